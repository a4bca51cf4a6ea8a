"""Stepwise covariate modeling (SCM) on ELPD-LOO.

Forward addition: at each step every remaining candidate is added in
turn and the one with the largest ELPD gain is kept if the gain exceeds
``threshold_forward``.  Backward elimination: every selected covariate
is dropped in turn and the least useful one is removed if dropping it
costs less than ``threshold_backward``.  A stricter backward threshold
mirrors the classic forward p < 0.05 / backward p < 0.01 scheme.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import pandas as pd

from bayeser._config import SamplerConfig
from bayeser.ermod import ERModel, dev_ermod
from bayeser.selection._common import CovariateSelection, SelectionStep
from bayeser.selection._compare import elpd_loo

logger = logging.getLogger(__name__)


def select_covariates(
    data: pd.DataFrame,
    var_resp: str,
    var_exposure: str,
    var_cov_candidates: Sequence[str],
    *,
    model_type: str = "bin_linear",
    threshold_forward: float = 2.0,
    threshold_backward: float = 4.0,
    gamma_fix: float | None = 1.0,
    config: SamplerConfig | None = None,
) -> CovariateSelection:
    """Select covariates by forward addition and backward elimination.

    Parameters
    ----------
    data : DataFrame
        One row per subject.
    var_resp, var_exposure : str
        Response and exposure columns.
    var_cov_candidates : sequence of str
        Candidate covariate columns.
    model_type : str
        Model type used throughout the search.
    threshold_forward : float
        Minimum ELPD gain to add a covariate.
    threshold_backward : float
        A selected covariate is removed when dropping it loses less ELPD
        than this.
    gamma_fix : float or None
        Hill coefficient for Emax model types.
    config : SamplerConfig or None
        Sampler settings.

    Returns
    -------
    CovariateSelection
    """
    candidates = tuple(var_cov_candidates)
    if not candidates:
        raise ValueError("var_cov_candidates must contain at least one covariate")
    if len(set(candidates)) != len(candidates):
        raise ValueError(f"var_cov_candidates contains duplicates: {list(candidates)}")
    if threshold_forward < 0 or threshold_backward < 0:
        raise ValueError("thresholds must be non-negative")

    def fit(var_cov: Sequence[str]) -> ERModel:
        return dev_ermod(
            data, var_resp, var_exposure, var_cov,
            model_type=model_type, gamma_fix=gamma_fix, config=config,
        )

    selected: list[str] = []
    current = fit(selected)
    current_elpd = elpd_loo(current)
    steps: list[SelectionStep] = []
    step = 0

    # Forward addition
    remaining = list(candidates)
    while remaining:
        step += 1
        trials = {c: fit([*selected, c]) for c in remaining}
        elpds = {c: elpd_loo(m) for c, m in trials.items()}
        best = max(elpds, key=elpds.get)
        accepted = elpds[best] - current_elpd > threshold_forward
        for c in remaining:
            steps.append(SelectionStep(step, "forward", c, current_elpd, elpds[c], accepted and c == best))
        if not accepted:
            logger.info("Forward step %d: no covariate improves ELPD by > %s", step, threshold_forward)
            break
        logger.info("Forward step %d: added %s (delta ELPD %+.2f)", step, best, elpds[best] - current_elpd)
        selected.append(best)
        remaining.remove(best)
        current, current_elpd = trials[best], elpds[best]

    # Backward elimination
    while selected:
        step += 1
        trials = {c: fit([s for s in selected if s != c]) for c in selected}
        elpds = {c: elpd_loo(m) for c, m in trials.items()}
        weakest = max(elpds, key=elpds.get)
        accepted = current_elpd - elpds[weakest] < threshold_backward
        for c in selected:
            steps.append(SelectionStep(step, "backward", c, current_elpd, elpds[c], accepted and c == weakest))
        if not accepted:
            logger.info("Backward step %d: every covariate costs >= %s ELPD to drop", step, threshold_backward)
            break
        logger.info("Backward step %d: removed %s (delta ELPD %+.2f)", step, weakest, elpds[weakest] - current_elpd)
        selected.remove(weakest)
        current, current_elpd = trials[weakest], elpds[weakest]

    return CovariateSelection(
        var_cov_candidates=candidates,
        var_cov_selected=tuple(selected),
        steps=tuple(steps),
        ermod=current,
        threshold_forward=threshold_forward,
        threshold_backward=threshold_backward,
    )
