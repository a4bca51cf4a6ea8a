"""Posterior simulation of the exposure-response relationship.

Every simulation evaluates the fitted model's linear predictor once per
posterior draw: no re-sampling is involved.  ``epred`` is the expected
response (probability for binary models) and ``prediction`` adds
observation-level noise (Bernoulli or Normal) when ``predictive=True``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from bayeser.ermod import ERModel, inv_logit
from bayeser.simulate._summary import calc_ersim_med_qi

logger = logging.getLogger(__name__)

VALID_OUTPUT_TYPES = ("draws", "median_qi")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_output_type(output_type: str) -> None:
    if output_type not in VALID_OUTPUT_TYPES:
        raise ValueError(f"output_type must be one of {VALID_OUTPUT_TYPES}, got {output_type!r}")


def _select_draws(ermod: ERModel, n_draws: int | None) -> NDArray[np.intp]:
    """Evenly thinned draw indices (all draws when *n_draws* is None)."""
    total = ermod.n_draws
    if n_draws is None or n_draws >= total:
        return np.arange(total)
    if n_draws < 1:
        raise ValueError(f"n_draws must be >= 1, got {n_draws}")
    return np.unique(np.linspace(0, total - 1, n_draws).round().astype(np.intp))


def _predictive_draws(
    ermod: ERModel,
    epred: NDArray,
    draw_idx: NDArray[np.intp],
    rng: np.random.Generator,
) -> NDArray:
    if ermod.is_binary:
        return rng.binomial(1, epred).astype(np.float64)
    sigma = ermod.draws("sigma")[draw_idx][:, None]
    return rng.normal(epred, sigma)


def _covariate_frame(ermod: ERModel, data_cov: pd.DataFrame | None) -> pd.DataFrame:
    if data_cov is None:
        if not ermod.var_cov:
            return pd.DataFrame(index=[0])
        data_cov = ermod.data
    missing = [c for c in ermod.var_cov if c not in data_cov.columns]
    if missing:
        raise ValueError(f"data_cov is missing covariate columns: {missing}")
    return data_cov.drop(columns=[ermod.var_exposure], errors="ignore").reset_index(drop=True)


def _exposure_values(exposure_to_sim: Sequence[float] | NDArray) -> NDArray:
    values = np.asarray(exposure_to_sim, dtype=np.float64).ravel()
    if values.size == 0:
        raise ValueError("exposure_to_sim must contain at least one value")
    if np.isnan(values).any():
        raise ValueError("exposure_to_sim contains missing values")
    return values


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def sim_er(
    ermod: ERModel,
    newdata: pd.DataFrame | None = None,
    *,
    output_type: str = "draws",
    qi_width: float = 0.95,
    n_draws: int | None = None,
    predictive: bool = False,
    seed: int | None = None,
) -> pd.DataFrame:
    """Simulate responses at the exposure/covariate values in *newdata*.

    Parameters
    ----------
    ermod : ERModel
        Fitted model.
    newdata : DataFrame or None
        Rows to simulate; must hold the exposure column and every model
        covariate.  Defaults to the training data.
    output_type : str
        ``'draws'`` (one row per input row and draw) or ``'median_qi'``.
    qi_width : float
        Interval width for ``'median_qi'``.
    n_draws : int or None
        Thin posterior draws evenly to this many.
    predictive : bool
        Also draw observation-level ``prediction`` values.
    seed : int or None
        Seed for the predictive noise.

    Returns
    -------
    DataFrame
        ``'draws'``: the *newdata* columns plus ``.row``, ``.draw``,
        ``linpred``, ``epred`` (and ``prediction``).
    """
    _check_output_type(output_type)
    if newdata is None:
        newdata = ermod.data
    newdata = newdata.reset_index(drop=True)

    draw_idx = _select_draws(ermod, n_draws)
    lp = ermod.linpred(newdata, draw_idx)  # (S, N)
    ep = inv_logit(lp) if ermod.is_binary else lp
    S, N = lp.shape

    out = newdata.loc[np.repeat(np.arange(N), S)].reset_index(drop=True)
    out[".row"] = np.repeat(np.arange(N), S)
    out[".draw"] = np.tile(draw_idx, N)
    out["linpred"] = lp.T.ravel()
    out["epred"] = ep.T.ravel()
    if predictive:
        rng = np.random.default_rng(seed)
        out["prediction"] = _predictive_draws(ermod, ep, draw_idx, rng).T.ravel()

    logger.debug("Simulated %d rows x %d draws", N, S)
    if output_type == "median_qi":
        return calc_ersim_med_qi(out, qi_width=qi_width)
    return out


def sim_er_new_exp(
    ermod: ERModel,
    exposure_to_sim: Sequence[float] | NDArray,
    *,
    data_cov: pd.DataFrame | None = None,
    output_type: str = "draws",
    qi_width: float = 0.95,
    n_draws: int | None = None,
    predictive: bool = False,
    seed: int | None = None,
) -> pd.DataFrame:
    """Simulate each covariate row at each new exposure value.

    Every row of *data_cov* (training data by default) is crossed with
    every value of *exposure_to_sim*; the model's own exposure column is
    replaced.
    """
    values = _exposure_values(exposure_to_sim)
    cov = _covariate_frame(ermod, data_cov)
    exp_frame = pd.DataFrame({ermod.var_exposure: values})
    newdata = cov.merge(exp_frame, how="cross") if len(cov.columns) else exp_frame
    return sim_er(
        ermod,
        newdata,
        output_type=output_type,
        qi_width=qi_width,
        n_draws=n_draws,
        predictive=predictive,
        seed=seed,
    )


def sim_er_new_exp_marg(
    ermod: ERModel,
    exposure_to_sim: Sequence[float] | NDArray,
    *,
    data_cov: pd.DataFrame | None = None,
    output_type: str = "draws",
    qi_width: float = 0.95,
    n_draws: int | None = None,
) -> pd.DataFrame:
    """Marginal E-R: average over covariate rows within each draw.

    Returns one row per (exposure value, draw) with the mean ``linpred``
    and ``epred`` across *data_cov* rows, or their median/QI.
    """
    _check_output_type(output_type)
    values = _exposure_values(exposure_to_sim)
    cov = _covariate_frame(ermod, data_cov)
    draw_idx = _select_draws(ermod, n_draws)

    frames = []
    for value in values:
        newdata = cov.copy()
        newdata[ermod.var_exposure] = value
        lp = ermod.linpred(newdata, draw_idx)
        ep = inv_logit(lp) if ermod.is_binary else lp
        frames.append(pd.DataFrame({
            ermod.var_exposure: value,
            ".draw": draw_idx,
            "linpred": lp.mean(axis=1),
            "epred": ep.mean(axis=1),
        }))
    out = pd.concat(frames, ignore_index=True)

    if output_type == "median_qi":
        return calc_ersim_med_qi(out, qi_width=qi_width, by=[ermod.var_exposure])
    return out


def sim_er_curve(
    ermod: ERModel,
    *,
    n_points: int = 50,
    exposure_range: tuple[float, float] | None = None,
    output_type: str = "median_qi",
    qi_width: float = 0.95,
    n_draws: int | None = None,
) -> pd.DataFrame:
    """E-R curve over an exposure grid with covariates at reference values.

    The grid spans the training exposure range unless *exposure_range*
    is given.  Numeric covariates sit at their training median and
    categorical ones at their reference level.
    """
    if n_points < 2:
        raise ValueError(f"n_points must be >= 2, got {n_points}")
    if exposure_range is None:
        x = ermod.data[ermod.var_exposure]
        exposure_range = (float(x.min()), float(x.max()))
    lo, hi = exposure_range
    if not lo < hi:
        raise ValueError(f"exposure_range must be increasing, got {exposure_range}")

    grid = np.linspace(lo, hi, n_points)
    newdata = ermod.design.reference_frame(n_points)
    newdata[ermod.var_exposure] = grid
    return sim_er(ermod, newdata, output_type=output_type, qi_width=qi_width, n_draws=n_draws)
