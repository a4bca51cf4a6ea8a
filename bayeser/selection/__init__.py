"""
Exposure metric selection, covariate selection and model comparison.

All comparisons use the expected log predictive density estimated by
PSIS-LOO (ArviZ).
"""

from bayeser.selection._common import CovariateSelection, ExposureSelection, SelectionStep
from bayeser.selection._compare import compare_ermods, elpd_loo
from bayeser.selection._exposure import select_exposure
from bayeser.selection._covariates import select_covariates

__all__ = [
    "CovariateSelection",
    "ExposureSelection",
    "SelectionStep",
    "compare_ermods",
    "elpd_loo",
    "select_exposure",
    "select_covariates",
]
