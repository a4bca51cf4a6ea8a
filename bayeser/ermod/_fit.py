"""Bayesian exposure-response model fitting via PyMC.

Every model shares one layout: an exposure model (linear or sigmoid
Emax) plus a linear covariate term on centered covariates, with either a
Bernoulli (logit link) or Normal likelihood.  NUTS sampling, the
log-likelihood needed for LOO-CV, and all posterior storage are handled
by PyMC/ArviZ.

Default priors are weakly informative and scaled to the data, in the
spirit of rstanarm's autoscaled priors: coefficients get
``Normal(0, 2.5 * s_y / s_x)`` where ``s_y`` is 1 on the logit scale and
the response SD for continuous models.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Mapping, Sequence

import arviz as az
import numpy as np
import pandas as pd
import pymc as pm

from bayeser._config import SamplerConfig
from bayeser.ermod._common import ConvergenceWarning, ERModel, _EXPOSURE_PARAMS
from bayeser.ermod._design import CovariateDesign, build_design
from bayeser.ermod._models import get_model_spec

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _validate_inputs(
    data: pd.DataFrame,
    var_resp: str,
    var_exposure: str,
    var_cov: Sequence[str],
    model_type: str,
) -> None:
    if not isinstance(data, pd.DataFrame):
        raise ValueError(f"data must be a pandas DataFrame, got {type(data).__name__}")
    spec = get_model_spec(model_type)

    needed = [var_resp, var_exposure, *var_cov]
    missing = [c for c in needed if c not in data.columns]
    if missing:
        raise ValueError(f"data is missing columns: {missing}")
    if var_exposure in var_cov or var_resp in var_cov:
        raise ValueError("var_cov must not contain the response or exposure column")

    y = data[var_resp]
    x = data[var_exposure]
    if y.isna().any():
        raise ValueError(f"response column {var_resp!r} contains missing values")
    if x.isna().any():
        raise ValueError(f"exposure column {var_exposure!r} contains missing values")
    if not pd.api.types.is_numeric_dtype(x):
        raise ValueError(f"exposure column {var_exposure!r} must be numeric")

    if spec.is_binary:
        values = set(np.unique(y.to_numpy(dtype=np.float64)))
        if not values <= {0.0, 1.0}:
            raise ValueError(f"response must be binary (0/1) for {model_type!r}, got values {sorted(values)}")
        if len(values) < 2:
            raise ValueError(f"response {var_resp!r} has a single outcome; need both 0 and 1")
    elif not pd.api.types.is_numeric_dtype(y):
        raise ValueError(f"response column {var_resp!r} must be numeric")

    if spec.structure == "emax" and (x < 0).any():
        raise ValueError("exposure must be non-negative for Emax models")

    n_min = len(_EXPOSURE_PARAMS[spec.structure]) + 2
    if len(data) < n_min:
        raise ValueError(f"Need at least {n_min} observations for {model_type!r}, got {len(data)}")


# ---------------------------------------------------------------------------
# PyMC model construction
# ---------------------------------------------------------------------------

def _emax_fraction(x: np.ndarray, ec50, gamma):
    """``x^gamma / (ec50^gamma + x^gamma)`` with a finite gradient at x = 0."""
    positive = x > 0
    x_safe = np.where(positive, x, 1.0)
    frac = x_safe**gamma / (ec50**gamma + x_safe**gamma)
    return pm.math.switch(positive, frac, 0.0)


def _build_pymc_model(
    model_type: str,
    x: np.ndarray,
    y: np.ndarray,
    Xc: np.ndarray,
    design: CovariateDesign,
    fixed: Mapping[str, float],
) -> pm.Model:
    spec = get_model_spec(model_type)

    if spec.is_binary:
        s_y = 1.0
        loc_y = 0.0
    else:
        s_y = float(np.std(y)) or 1.0
        loc_y = float(np.mean(y))
    s_x = float(np.std(x)) or 1.0

    coords = {"term": list(design.terms)}
    with pm.Model(coords=coords) as model:
        if spec.structure == "linear":
            intercept = pm.Normal("intercept", mu=loc_y, sigma=2.5 * s_y)
            slope = pm.Normal("slope", mu=0.0, sigma=2.5 * s_y / s_x)
            mu = intercept + slope * x
        else:
            x_pos = x[x > 0]
            ec50_loc = float(np.log(np.median(x_pos))) if x_pos.size else 0.0
            e0 = fixed["e0"] if "e0" in fixed else pm.Normal("e0", mu=loc_y, sigma=2.5 * s_y)
            emax = fixed["emax"] if "emax" in fixed else pm.Normal("emax", mu=0.0, sigma=5.0 * s_y)
            ec50 = pm.LogNormal("ec50", mu=ec50_loc, sigma=1.5)
            gamma = fixed["gamma"] if "gamma" in fixed else pm.LogNormal("gamma", mu=0.0, sigma=0.5)
            mu = e0 + emax * _emax_fraction(x, ec50, gamma)

        if design.n_terms:
            beta = pm.Normal("beta_cov", mu=0.0, sigma=2.5 * s_y / design.scales, dims="term")
            mu = mu + pm.math.dot(Xc, beta)

        if spec.is_binary:
            pm.Bernoulli("y", logit_p=mu, observed=y.astype(np.int64))
        else:
            sigma = pm.Exponential("sigma", lam=1.0 / s_y)
            pm.Normal("y", mu=mu, sigma=sigma, observed=y)

    return model


def _resolve_fixed(
    model_type: str,
    gamma_fix: float | None,
    e0_fix: float | None,
    emax_fix: float | None,
) -> dict[str, float]:
    if get_model_spec(model_type).structure != "emax":
        return {}
    fixed: dict[str, float] = {}
    if gamma_fix is not None:
        if gamma_fix <= 0:
            raise ValueError(f"gamma_fix must be positive, got {gamma_fix}")
        fixed["gamma"] = float(gamma_fix)
    if e0_fix is not None:
        fixed["e0"] = float(e0_fix)
    if emax_fix is not None:
        fixed["emax"] = float(emax_fix)
    return fixed


def _warn_if_not_converged(ermod: ERModel, rhat_threshold: float) -> None:
    from bayeser.diagnostics import check_convergence

    result = check_convergence(
        ermod, rhat_threshold=rhat_threshold, min_ess=min(400.0, 0.1 * ermod.n_draws)
    )
    if not result.converged:
        msg = "; ".join(result.problems)
        logger.warning("Model %s ~ %s may not have converged: %s", ermod.var_resp, ermod.var_exposure, msg)
        warnings.warn(msg, ConvergenceWarning, stacklevel=3)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def dev_ermod(
    data: pd.DataFrame,
    var_resp: str,
    var_exposure: str,
    var_cov: Sequence[str] | None = None,
    *,
    model_type: str = "bin_linear",
    gamma_fix: float | None = 1.0,
    e0_fix: float | None = None,
    emax_fix: float | None = None,
    config: SamplerConfig | None = None,
    levels: Mapping[str, Sequence] | None = None,
) -> ERModel:
    """Fit an exposure-response model of any supported type.

    Parameters
    ----------
    data : DataFrame
        One row per subject.
    var_resp : str
        Response column (0/1 for binary model types).
    var_exposure : str
        Exposure metric column.
    var_cov : sequence of str or None
        Covariate columns.  Numeric covariates enter linearly; categorical
        ones are dummy-coded against their first level.  In Emax models
        covariates act on E0.
    model_type : str
        ``'bin_linear'``, ``'bin_emax'``, ``'linear'`` or ``'emax'``.
    gamma_fix, e0_fix, emax_fix : float or None
        Emax parameters to hold fixed.  ``gamma_fix=None`` estimates the
        Hill coefficient.  Ignored by linear models.
    config : SamplerConfig or None
        Sampler settings; defaults to ``SamplerConfig.from_env()``.
    levels : mapping or None
        Predeclared categorical levels (see :func:`build_design`).

    Returns
    -------
    ERModel
    """
    var_cov = tuple(var_cov or ())
    _validate_inputs(data, var_resp, var_exposure, var_cov, model_type)
    fixed = _resolve_fixed(model_type, gamma_fix, e0_fix, emax_fix)
    if config is None:
        config = SamplerConfig.from_env()

    data = data.reset_index(drop=True)
    design = build_design(data, var_cov, levels=levels)
    x = data[var_exposure].to_numpy(dtype=np.float64)
    y = data[var_resp].to_numpy(dtype=np.float64)
    Xc = design.centered_matrix(data)

    logger.info(
        "Fitting %s model: %s ~ %s%s (n=%d, chains=%d, draws=%d)",
        model_type,
        var_resp,
        var_exposure,
        "".join(f" + {c}" for c in var_cov),
        len(data),
        config.chains,
        config.draws,
    )

    model = _build_pymc_model(model_type, x, y, Xc, design, fixed)
    with model:
        idata = pm.sample(**config.sample_kwargs(), idata_kwargs={"log_likelihood": True})

    ermod = ERModel(
        model_type=model_type,
        var_resp=var_resp,
        var_exposure=var_exposure,
        data=data,
        idata=idata,
        design=design,
        fixed=fixed,
        config=config,
    )
    _warn_if_not_converged(ermod, config.rhat_threshold)
    return ermod


def dev_ermod_bin(
    data: pd.DataFrame,
    var_resp: str,
    var_exposure: str,
    var_cov: Sequence[str] | None = None,
    *,
    config: SamplerConfig | None = None,
) -> ERModel:
    """Bayesian logistic regression, linear in exposure on the logit scale.

    Examples
    --------
    >>> from bayeser.datasets import simulate_binary_data
    >>> df = simulate_binary_data()
    >>> ermod = dev_ermod_bin(df, "AEFLAG", "AUCss_1000", ["BGLUC"])
    >>> ermod.coef_exp_ci().estimate > 0
    True
    """
    return dev_ermod(data, var_resp, var_exposure, var_cov, model_type="bin_linear", config=config)


def dev_ermod_bin_emax(
    data: pd.DataFrame,
    var_resp: str,
    var_exposure: str,
    var_cov: Sequence[str] | None = None,
    *,
    gamma_fix: float | None = 1.0,
    e0_fix: float | None = None,
    emax_fix: float | None = None,
    config: SamplerConfig | None = None,
) -> ERModel:
    """Binary Emax model: logit(p) follows a sigmoid Emax curve."""
    return dev_ermod(
        data, var_resp, var_exposure, var_cov,
        model_type="bin_emax", gamma_fix=gamma_fix, e0_fix=e0_fix, emax_fix=emax_fix,
        config=config,
    )


def dev_ermod_lin(
    data: pd.DataFrame,
    var_resp: str,
    var_exposure: str,
    var_cov: Sequence[str] | None = None,
    *,
    config: SamplerConfig | None = None,
) -> ERModel:
    """Continuous response, linear in exposure."""
    return dev_ermod(data, var_resp, var_exposure, var_cov, model_type="linear", config=config)


def dev_ermod_emax(
    data: pd.DataFrame,
    var_resp: str,
    var_exposure: str,
    var_cov: Sequence[str] | None = None,
    *,
    gamma_fix: float | None = 1.0,
    e0_fix: float | None = None,
    emax_fix: float | None = None,
    config: SamplerConfig | None = None,
) -> ERModel:
    """Continuous sigmoid Emax model with covariates on E0.

    Examples
    --------
    >>> from bayeser.datasets import simulate_emax_data
    >>> df = simulate_emax_data()
    >>> ermod = dev_ermod_emax(df, "response_1", "exposure", ["cnt_a"])
    >>> "ec50" in ermod.param_names
    True
    """
    return dev_ermod(
        data, var_resp, var_exposure, var_cov,
        model_type="emax", gamma_fix=gamma_fix, e0_fix=e0_fix, emax_fix=emax_fix,
        config=config,
    )


def refit_ermod(
    ermod: ERModel,
    data: pd.DataFrame,
    *,
    var_cov: Sequence[str] | None = None,
    var_exposure: str | None = None,
    config: SamplerConfig | None = None,
) -> ERModel:
    """Fit the same model specification to different data or covariates.

    Categorical levels of the original design are kept so that predictions
    on the original data remain possible.
    """
    var_cov = ermod.var_cov if var_cov is None else tuple(var_cov)
    levels = {k: v for k, v in ermod.design.levels.items() if k in var_cov}
    return dev_ermod(
        data,
        ermod.var_resp,
        var_exposure or ermod.var_exposure,
        var_cov,
        model_type=ermod.model_type,
        gamma_fix=ermod.fixed.get("gamma"),
        e0_fix=ermod.fixed.get("e0"),
        emax_fix=ermod.fixed.get("emax"),
        config=config or ermod.config,
        levels=levels,
    )


def ermod_from_idata(
    idata: az.InferenceData,
    data: pd.DataFrame,
    var_resp: str,
    var_exposure: str,
    var_cov: Sequence[str] | None = None,
    *,
    model_type: str,
    gamma_fix: float | None = 1.0,
    e0_fix: float | None = None,
    emax_fix: float | None = None,
) -> ERModel:
    """Wrap posterior draws from a user-written PyMC model as an :class:`ERModel`.

    The posterior must use this package's variable names (``intercept`` and
    ``slope``; or ``e0``, ``emax``, ``ec50``, ``gamma``; ``beta_cov`` over
    centered covariate terms; ``sigma`` for continuous responses).  Once
    wrapped, the simulation, covariate-effect and plotting helpers all work
    on a hand-built model.
    """
    var_cov = tuple(var_cov or ())
    _validate_inputs(data, var_resp, var_exposure, var_cov, model_type)
    fixed = _resolve_fixed(model_type, gamma_fix, e0_fix, emax_fix)
    data = data.reset_index(drop=True)
    design = build_design(data, var_cov)

    ermod = ERModel(
        model_type=model_type,
        var_resp=var_resp,
        var_exposure=var_exposure,
        data=data,
        idata=idata,
        design=design,
        fixed=fixed,
    )

    if "posterior" not in idata.groups():
        raise ValueError("idata has no posterior group")
    absent = [n for n in ermod.param_names if n not in idata.posterior]
    if absent:
        raise ValueError(f"posterior is missing variables: {absent}")
    if design.n_terms:
        n_beta = ermod.draws("beta_cov").shape[-1]
        if n_beta != design.n_terms:
            raise ValueError(
                f"beta_cov has {n_beta} columns but the design has {design.n_terms} terms {list(design.terms)}"
            )
    return ermod
