"""Exposure-response model functions.

Each function computes the linear predictor at given exposure values for
a specific structural model.  Binary models put the linear predictor on
the logit scale; continuous models use it as the expected response.

Parameters may be scalars or arrays of posterior draws shaped ``(S, 1)``
so that a single call broadcasts over draws and exposures.

Exposure = 0 (placebo) is handled explicitly in the Emax model so that
``0 ** gamma`` never goes through ``log(0)``.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.special import expit


# ---------------------------------------------------------------------------
# Model functions
# ---------------------------------------------------------------------------

def inv_logit(x: NDArray[np.floating]) -> NDArray[np.floating]:
    """Inverse logit, ``1 / (1 + exp(-x))``."""
    return expit(x)


def linear_exposure(
    exposure: NDArray[np.floating],
    intercept: float | NDArray[np.floating],
    slope: float | NDArray[np.floating],
) -> NDArray[np.floating]:
    """Linear exposure model, ``intercept + slope * exposure``.

    For binary endpoints this is the logistic regression linear predictor.
    """
    exposure = np.asarray(exposure, dtype=np.float64)
    return intercept + slope * exposure


def sigmoid_emax(
    exposure: NDArray[np.floating],
    e0: float | NDArray[np.floating],
    emax: float | NDArray[np.floating],
    ec50: float | NDArray[np.floating],
    gamma: float | NDArray[np.floating] = 1.0,
) -> NDArray[np.floating]:
    """Sigmoid Emax model.

    .. math::
        f(x) = E_0 + \\frac{E_{max} x^\\gamma}{EC_{50}^\\gamma + x^\\gamma}

    Parameters
    ----------
    exposure : array
        Exposure values (AUC, Cmax, ...).  Must be non-negative.
    e0 : float or array
        Response at zero exposure.
    emax : float or array
        Maximal drug effect (response at infinite exposure minus ``e0``).
    ec50 : float or array
        Exposure producing half of ``emax``.
    gamma : float or array
        Hill coefficient.  ``1.0`` gives the hyperbolic Emax model.

    Returns
    -------
    NDArray
    """
    exposure = np.asarray(exposure, dtype=np.float64)
    positive = exposure > 0
    x = np.where(positive, exposure, 1.0)
    with np.errstate(over="ignore"):
        # x^g / (ec50^g + x^g) == 1 / (1 + (ec50 / x)^g)
        frac = 1.0 / (1.0 + (ec50 / x) ** gamma)
    return e0 + emax * np.where(positive, frac, 0.0)


# ---------------------------------------------------------------------------
# Model registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelSpec:
    """Structure and likelihood family of an E-R model type."""

    structure: str  # 'linear' or 'emax'
    family: str  # 'binomial' or 'gaussian'
    description: str

    @property
    def is_binary(self) -> bool:
        return self.family == "binomial"


_MODEL_MAP: dict[str, ModelSpec] = {
    "bin_linear": ModelSpec("linear", "binomial", "Binary logistic regression, linear in exposure"),
    "bin_emax": ModelSpec("emax", "binomial", "Binary Emax model on the logit scale"),
    "linear": ModelSpec("linear", "gaussian", "Continuous linear regression"),
    "emax": ModelSpec("emax", "gaussian", "Continuous sigmoid Emax model"),
}

VALID_MODEL_TYPES = tuple(_MODEL_MAP.keys())


def get_model_spec(model_type: str) -> ModelSpec:
    if model_type not in _MODEL_MAP:
        raise ValueError(f"model_type must be one of {VALID_MODEL_TYPES}, got {model_type!r}")
    return _MODEL_MAP[model_type]
