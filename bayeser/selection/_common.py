"""Shared result types for exposure-metric and covariate selection."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from bayeser.ermod import ERModel


@dataclass(frozen=True, eq=False)
class ExposureSelection:
    """Result of comparing candidate exposure metrics by ELPD-LOO.

    Attributes
    ----------
    var_exp_selected : str
        Exposure metric with the highest ELPD-LOO.
    comparison : DataFrame
        ``arviz.compare`` table indexed by exposure metric, best first.
    models : dict
        Fitted model per candidate exposure metric.
    """

    var_exp_selected: str
    var_exp_candidates: tuple[str, ...]
    comparison: pd.DataFrame
    models: dict[str, ERModel]

    @property
    def ermod(self) -> ERModel:
        """Model fitted with the selected exposure metric."""
        return self.models[self.var_exp_selected]

    def summary(self) -> str:
        lines = [
            "Exposure metric selection (ELPD-LOO)",
            "=" * 40,
            f"Selected    : {self.var_exp_selected}",
            "",
            f"{'metric':<16s} {'elpd_loo':>10s} {'elpd_diff':>10s} {'dse':>8s}",
        ]
        for name, row in self.comparison.iterrows():
            lines.append(
                f"{str(name):<16s} {row['elpd_loo']:>10.2f} {row['elpd_diff']:>10.2f} {row['dse']:>8.2f}"
            )
        return "\n".join(lines)


@dataclass(frozen=True)
class SelectionStep:
    """One candidate move in stepwise covariate modeling."""

    step: int
    direction: str  # 'forward' or 'backward'
    covariate: str
    elpd_before: float
    elpd_after: float
    accepted: bool

    @property
    def delta(self) -> float:
        """ELPD change of the move (positive = better fit)."""
        return self.elpd_after - self.elpd_before


@dataclass(frozen=True, eq=False)
class CovariateSelection:
    """Result of stepwise covariate modeling on ELPD-LOO."""

    var_cov_candidates: tuple[str, ...]
    var_cov_selected: tuple[str, ...]
    steps: tuple[SelectionStep, ...]
    ermod: ERModel
    threshold_forward: float
    threshold_backward: float

    def steps_frame(self) -> pd.DataFrame:
        """Step log as a table, one row per evaluated move."""
        return pd.DataFrame([
            {
                "step": s.step,
                "direction": s.direction,
                "covariate": s.covariate,
                "elpd_before": s.elpd_before,
                "elpd_after": s.elpd_after,
                "delta": s.delta,
                "accepted": s.accepted,
            }
            for s in self.steps
        ], columns=["step", "direction", "covariate", "elpd_before", "elpd_after", "delta", "accepted"])

    def summary(self) -> str:
        selected = ", ".join(self.var_cov_selected) or "(none)"
        lines = [
            "Stepwise covariate selection (ELPD-LOO)",
            "=" * 40,
            f"Candidates : {', '.join(self.var_cov_candidates)}",
            f"Selected   : {selected}",
            f"Thresholds : forward > {self.threshold_forward}, backward >= {self.threshold_backward}",
            "",
        ]
        for s in self.steps:
            if not s.accepted:
                continue
            verb = "added" if s.direction == "forward" else "removed"
            lines.append(f"  step {s.step}: {verb} {s.covariate} (delta ELPD {s.delta:+.2f})")
        return "\n".join(lines)
