"""Exposure metric selection.

One model is fitted per candidate exposure metric (AUC, Cmax, Cmin, ...)
with otherwise identical structure; the metric whose model has the
highest ELPD-LOO is selected.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import pandas as pd

from bayeser._config import SamplerConfig
from bayeser.ermod import dev_ermod
from bayeser.selection._common import ExposureSelection
from bayeser.selection._compare import compare_ermods

logger = logging.getLogger(__name__)


def select_exposure(
    data: pd.DataFrame,
    var_resp: str,
    var_exp_candidates: Sequence[str],
    *,
    model_type: str = "bin_linear",
    var_cov: Sequence[str] | None = None,
    gamma_fix: float | None = 1.0,
    config: SamplerConfig | None = None,
) -> ExposureSelection:
    """Select the exposure metric that best predicts the response.

    Parameters
    ----------
    data : DataFrame
        One row per subject.
    var_resp : str
        Response column.
    var_exp_candidates : sequence of str
        Candidate exposure metric columns (at least two).
    model_type : str
        Model type used for every candidate.
    var_cov : sequence of str or None
        Covariates included in every candidate model.
    gamma_fix : float or None
        Hill coefficient for Emax model types.
    config : SamplerConfig or None
        Sampler settings.

    Returns
    -------
    ExposureSelection
    """
    candidates = tuple(var_exp_candidates)
    if len(candidates) < 2:
        raise ValueError(f"Need at least 2 exposure candidates, got {list(candidates)}")
    if len(set(candidates)) != len(candidates):
        raise ValueError(f"var_exp_candidates contains duplicates: {list(candidates)}")

    models = {}
    for var_exposure in candidates:
        logger.info("Exposure selection: fitting candidate %s", var_exposure)
        models[var_exposure] = dev_ermod(
            data, var_resp, var_exposure, var_cov,
            model_type=model_type, gamma_fix=gamma_fix, config=config,
        )

    comparison = compare_ermods(models)
    selected = str(comparison.index[0])
    logger.info("Exposure selection: %s selected", selected)
    return ExposureSelection(
        var_exp_selected=selected,
        var_exp_candidates=candidates,
        comparison=comparison,
        models=models,
    )
