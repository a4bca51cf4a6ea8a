"""MCMC convergence checks delegated to ArviZ."""

from __future__ import annotations

import logging

import arviz as az
import numpy as np
import pandas as pd

from bayeser.diagnostics._common import ConvergenceResult
from bayeser.ermod import ERModel

logger = logging.getLogger(__name__)


def convergence_summary(ermod: ERModel, *, hdi_prob: float = 0.95) -> pd.DataFrame:
    """ArviZ summary table of sampled parameters.

    Columns include mean, sd, HDI bounds, MCSE, ESS (bulk/tail) and R-hat.
    """
    return az.summary(ermod.idata, var_names=list(ermod.param_names), hdi_prob=hdi_prob)


def check_convergence(
    ermod: ERModel,
    *,
    rhat_threshold: float = 1.01,
    min_ess: float = 400.0,
) -> ConvergenceResult:
    """Check R-hat, effective sample size and divergences.

    R-hat needs at least two chains; with a single chain it is reported as
    ``nan`` and not counted as a problem.
    """
    var_names = list(ermod.param_names)
    rhat = az.rhat(ermod.idata, var_names=var_names)
    ess_bulk = az.ess(ermod.idata, var_names=var_names, method="bulk")
    ess_tail = az.ess(ermod.idata, var_names=var_names, method="tail")

    def _values(ds) -> np.ndarray:
        arrays = [np.atleast_1d(ds[v].values).ravel() for v in ds.data_vars]
        return np.concatenate(arrays) if arrays else np.array([np.nan])

    rhat_vals = _values(rhat)
    max_rhat = float(np.nanmax(rhat_vals)) if not np.all(np.isnan(rhat_vals)) else float("nan")
    min_bulk = float(np.nanmin(_values(ess_bulk)))
    min_tail = float(np.nanmin(_values(ess_tail)))

    n_divergent = 0
    if "sample_stats" in ermod.idata.groups() and "diverging" in ermod.idata.sample_stats:
        n_divergent = int(ermod.idata.sample_stats["diverging"].values.sum())

    problems: list[str] = []
    if not np.isnan(max_rhat) and max_rhat > rhat_threshold:
        problems.append(f"max R-hat {max_rhat:.3f} exceeds {rhat_threshold}")
    if min(min_bulk, min_tail) < min_ess:
        problems.append(f"min ESS {min(min_bulk, min_tail):.0f} below {min_ess:.0f}")
    if n_divergent:
        problems.append(f"{n_divergent} divergent transitions")

    for p in problems:
        logger.debug("Convergence check: %s", p)

    return ConvergenceResult(
        max_rhat=max_rhat,
        min_ess_bulk=min_bulk,
        min_ess_tail=min_tail,
        n_divergent=n_divergent,
        rhat_threshold=rhat_threshold,
        min_ess=min_ess,
        converged=not problems,
        problems=tuple(problems),
    )
