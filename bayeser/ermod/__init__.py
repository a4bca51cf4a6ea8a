"""
Exposure-response model development.

Logistic and Emax models for binary and continuous endpoints, with
optional covariates, fitted by NUTS in PyMC.  Every fit returns an
immutable :class:`ERModel` holding the ArviZ posterior.
"""

from bayeser.ermod._common import CoefInterval, ConvergenceWarning, ERModel
from bayeser.ermod._design import CovariateDesign, build_design
from bayeser.ermod._models import (
    ModelSpec,
    VALID_MODEL_TYPES,
    get_model_spec,
    inv_logit,
    linear_exposure,
    sigmoid_emax,
)
from bayeser.ermod._fit import (
    dev_ermod,
    dev_ermod_bin,
    dev_ermod_bin_emax,
    dev_ermod_emax,
    dev_ermod_lin,
    ermod_from_idata,
    refit_ermod,
)

__all__ = [
    "ERModel",
    "CoefInterval",
    "ConvergenceWarning",
    "CovariateDesign",
    "ModelSpec",
    "VALID_MODEL_TYPES",
    "build_design",
    "get_model_spec",
    "inv_logit",
    "linear_exposure",
    "sigmoid_emax",
    "dev_ermod",
    "dev_ermod_bin",
    "dev_ermod_bin_emax",
    "dev_ermod_emax",
    "dev_ermod_lin",
    "ermod_from_idata",
    "refit_ermod",
]
