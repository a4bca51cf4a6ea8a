"""Binned goodness-of-fit: observed vs. predicted response by exposure bin.

Subjects are grouped into exposure quantile bins.  Within each bin the
observed proportion (binary, exact Clopper-Pearson CI) or mean
(continuous, t-interval) is set against the model's posterior mean
prediction for the same subjects.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import stats

from bayeser.ermod import ERModel


def _binned_proportion_ci(
    y_bin: np.ndarray, conf_level: float,
) -> tuple[float, float]:
    """Exact (Clopper-Pearson) interval for the event rate of one bin.

    Beta quantiles are undefined when a bin has no events or only events;
    those ends are pinned to 0 and 1.
    """
    n = len(y_bin)
    k = int(np.sum(y_bin))
    tail = (1 - conf_level) / 2
    lo = stats.beta.ppf(tail, k, n - k + 1) if k > 0 else 0.0
    hi = stats.beta.ppf(1 - tail, k + 1, n - k) if k < n else 1.0
    return float(lo), float(hi)


def _t_interval(values: np.ndarray, conf_level: float) -> tuple[float, float]:
    n = len(values)
    mean = float(np.mean(values))
    if n < 2:
        return float("nan"), float("nan")
    half = stats.t.ppf((1 + conf_level) / 2, n - 1) * np.std(values, ddof=1) / np.sqrt(n)
    return mean - float(half), mean + float(half)


def exposure_bins(exposure: pd.Series, n_bins: int) -> pd.Series:
    """Quantile bin index (0-based) of each exposure value.

    Tied quantile edges (e.g. many placebo zeros) are merged, so fewer than
    *n_bins* bins may result.
    """
    if n_bins < 1:
        raise ValueError(f"n_bins must be >= 1, got {n_bins}")
    if n_bins == 1:
        return pd.Series(np.zeros(len(exposure), dtype=int), index=exposure.index)
    return pd.qcut(exposure, q=n_bins, labels=False, duplicates="drop").astype(int)


def gof_binned(
    ermod: ERModel,
    *,
    n_bins: int = 4,
    conf_level: float = 0.95,
    qi_width: float = 0.95,
) -> pd.DataFrame:
    """Observed vs. predicted response in exposure quantile bins.

    Parameters
    ----------
    ermod : ERModel
        Fitted model; its training data are binned.
    n_bins : int
        Number of exposure quantile bins.
    conf_level : float
        Confidence level of the observed-response interval.
    qi_width : float
        Width of the posterior quantile interval of the prediction.

    Returns
    -------
    DataFrame
        One row per bin with columns ``bin, n, exposure_min,
        exposure_max, exposure_median, obs, obs_lower, obs_upper, pred,
        pred_lower, pred_upper``.
    """
    if not (0.0 < conf_level < 1.0):
        raise ValueError(f"conf_level must be in (0, 1), got {conf_level}")
    if not (0.0 < qi_width < 1.0):
        raise ValueError(f"qi_width must be in (0, 1), got {qi_width}")

    data = ermod.data
    exposure = data[ermod.var_exposure]
    bins = exposure_bins(exposure, n_bins).to_numpy()
    y = data[ermod.var_resp].to_numpy(dtype=np.float64)
    epred = ermod.epred(data)  # (S, N)
    q_lo, q_hi = (1 - qi_width) / 2, 1 - (1 - qi_width) / 2

    rows = []
    for b in np.unique(bins):
        mask = bins == b
        yb = y[mask]
        n = int(mask.sum())
        if ermod.is_binary:
            obs = float(np.mean(yb))
            obs_lo, obs_hi = _binned_proportion_ci(yb, conf_level)
        else:
            obs = float(np.mean(yb))
            obs_lo, obs_hi = _t_interval(yb, conf_level)

        pred_draws = epred[:, mask].mean(axis=1)
        xb = exposure.to_numpy()[mask]
        rows.append({
            "bin": int(b),
            "n": n,
            "exposure_min": float(xb.min()),
            "exposure_max": float(xb.max()),
            "exposure_median": float(np.median(xb)),
            "obs": obs,
            "obs_lower": obs_lo,
            "obs_upper": obs_hi,
            "pred": float(np.median(pred_draws)),
            "pred_lower": float(np.quantile(pred_draws, q_lo)),
            "pred_upper": float(np.quantile(pred_draws, q_hi)),
        })

    return pd.DataFrame(rows)
