"""Shared result types for model diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ConvergenceResult:
    """MCMC convergence diagnostics of a fitted model.

    ``converged`` is ``False`` when any parameter exceeds the R-hat
    threshold or falls below the minimum effective sample size.
    """

    max_rhat: float
    min_ess_bulk: float
    min_ess_tail: float
    n_divergent: int
    rhat_threshold: float
    min_ess: float
    converged: bool
    problems: tuple[str, ...] = ()

    def summary(self) -> str:
        lines = [
            "MCMC Convergence",
            "=" * 40,
            f"max R-hat     : {self.max_rhat:.4f}  (threshold {self.rhat_threshold})",
            f"min ESS bulk  : {self.min_ess_bulk:.0f}",
            f"min ESS tail  : {self.min_ess_tail:.0f}  (minimum {self.min_ess:.0f})",
            f"divergences   : {self.n_divergent}",
            f"converged     : {self.converged}",
        ]
        for p in self.problems:
            lines.append(f"  - {p}")
        return "\n".join(lines)


@dataclass(frozen=True)
class EvalResult:
    """Predictive performance of a model.

    Binary models report ``auroc`` and ``brier``; continuous models report
    ``rmse``, ``mae`` and ``r2``.
    """

    eval_type: str  # 'training', 'test' or 'kfold'
    metrics: dict[str, float] = field(default_factory=dict)
    n_obs: int = 0
    k: int | None = None  # number of folds for 'kfold'

    def summary(self) -> str:
        header = f"Model evaluation ({self.eval_type}"
        header += f", k = {self.k})" if self.k is not None else ")"
        lines = [header, "=" * 40, f"n obs : {self.n_obs}"]
        for name, value in self.metrics.items():
            lines.append(f"{name:<6s}: {value:.4f}")
        return "\n".join(lines)
