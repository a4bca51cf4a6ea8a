"""Predictive performance metrics for fitted E-R models.

Predictions are posterior means of the expected response.  Binary models
are scored with the AUROC (Mann-Whitney U / (n1 * n0)) and the Brier
score; continuous models with RMSE, MAE and R².

``eval_type='kfold'`` refits the model on each training split, so it
costs ``k`` full MCMC runs.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from scipy import stats

from bayeser._config import SamplerConfig
from bayeser.diagnostics._common import EvalResult
from bayeser.ermod import ERModel, refit_ermod

logger = logging.getLogger(__name__)

VALID_EVAL_TYPES = ("training", "test", "kfold")


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------

def _auroc(y: NDArray, p: NDArray) -> float:
    """AUC via pooled midranks; ``nan`` when only one class is present."""
    case = y == 1
    n1 = int(case.sum())
    n0 = len(y) - n1
    if n1 == 0 or n0 == 0:
        return float("nan")
    ranks = stats.rankdata(p)
    u = ranks[case].sum() - n1 * (n1 + 1) / 2.0
    return float(u / (n1 * n0))


def _binary_metrics(y: NDArray, p: NDArray) -> dict[str, float]:
    return {
        "auroc": _auroc(y, p),
        "brier": float(np.mean((p - y) ** 2)),
    }


def _continuous_metrics(y: NDArray, pred: NDArray) -> dict[str, float]:
    resid = y - pred
    ss_tot = float(np.sum((y - y.mean()) ** 2))
    return {
        "rmse": float(np.sqrt(np.mean(resid**2))),
        "mae": float(np.mean(np.abs(resid))),
        "r2": 1.0 - float(np.sum(resid**2)) / ss_tot if ss_tot > 0 else float("nan"),
    }


def _score(ermod: ERModel, y: NDArray, pred: NDArray) -> dict[str, float]:
    if ermod.is_binary:
        return _binary_metrics(y, pred)
    return _continuous_metrics(y, pred)


def _mean_epred(ermod: ERModel, data: pd.DataFrame) -> NDArray:
    return ermod.epred(data).mean(axis=0)


def _test_response(ermod: ERModel, newdata: pd.DataFrame) -> NDArray:
    """Observed response of a held-out set, checked like the fitting data."""
    for role, col in (("response", ermod.var_resp), ("exposure", ermod.var_exposure)):
        if col not in newdata.columns:
            raise ValueError(f"newdata is missing {role} column {col!r}")
        if newdata[col].isna().any():
            raise ValueError(f"newdata {role} column {col!r} contains missing values")
    y = newdata[ermod.var_resp].to_numpy(dtype=np.float64)
    if ermod.is_binary and not set(np.unique(y)) <= {0.0, 1.0}:
        raise ValueError(
            f"newdata response must be binary (0/1) for {ermod.model_type!r}, "
            f"got values {sorted(set(np.unique(y)))}"
        )
    return y


def _fold_ids(n: int, k: int, seed: int | None) -> NDArray[np.intp]:
    rng = np.random.default_rng(seed)
    ids = np.arange(n) % k
    rng.shuffle(ids)
    return ids


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def eval_ermod(
    ermod: ERModel,
    *,
    eval_type: str = "training",
    newdata: pd.DataFrame | None = None,
    k: int = 5,
    seed: int | None = None,
    config: SamplerConfig | None = None,
) -> EvalResult:
    """Evaluate predictive performance.

    Parameters
    ----------
    ermod : ERModel
        Fitted model.
    eval_type : str
        ``'training'`` scores the training data, ``'test'`` scores
        *newdata*, ``'kfold'`` scores out-of-fold predictions from ``k``
        refits.
    newdata : DataFrame or None
        Held-out data (required for ``'test'``).
    k : int
        Number of folds for ``'kfold'``.
    seed : int or None
        Seed for fold assignment.
    config : SamplerConfig or None
        Sampler settings for k-fold refits; defaults to the model's own.

    Returns
    -------
    EvalResult
    """
    if eval_type not in VALID_EVAL_TYPES:
        raise ValueError(f"eval_type must be one of {VALID_EVAL_TYPES}, got {eval_type!r}")

    if eval_type == "training":
        data = ermod.data
        y = data[ermod.var_resp].to_numpy(dtype=np.float64)
        return EvalResult(eval_type, _score(ermod, y, _mean_epred(ermod, data)), n_obs=len(y))

    if eval_type == "test":
        if newdata is None:
            raise ValueError("newdata is required for eval_type='test'")
        y = _test_response(ermod, newdata)
        return EvalResult(eval_type, _score(ermod, y, _mean_epred(ermod, newdata)), n_obs=len(y))

    n = ermod.n_obs
    if not (2 <= k <= n):
        raise ValueError(f"k must be between 2 and the number of observations ({n}), got {k}")

    data = ermod.data
    folds = _fold_ids(n, k, seed)
    pred = np.empty(n)
    for fold in range(k):
        test_mask = folds == fold
        logger.info("k-fold evaluation: fold %d/%d (%d held out)", fold + 1, k, int(test_mask.sum()))
        fit = refit_ermod(ermod, data.loc[~test_mask], config=config)
        pred[test_mask] = _mean_epred(fit, data.loc[test_mask])

    y = data[ermod.var_resp].to_numpy(dtype=np.float64)
    return EvalResult(eval_type, _score(ermod, y, pred), n_obs=n, k=k)
