"""Simulated exposure-response datasets.

Two datasets mirror the examples used throughout the E-R workflow:

* :func:`simulate_binary_data`: a binary adverse-event flag driven by
  steady-state AUC and two glycaemic covariates, with three exposure
  metrics and several covariates that have no true effect.
* :func:`simulate_emax_data`: a continuous and a binary endpoint following
  Emax curves, with covariate effects on E0 for the continuous one.

The generating parameters are exported as module constants so fits can
be checked against the truth.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy.special import expit

BINARY_DOSES = (0.0, 100.0, 200.0, 400.0)
RACE_LEVELS = ("White", "Asian", "Black", "Other")

# logit(P(AEFLAG = 1)) = intercept + AUCss_1000 * b_auc
#                        + (BGLUC - 6) * b_gluc + (BHBA1C_5 - 8) * b_hba1c
BINARY_TRUE_PARAMS = {
    "intercept": -2.0,
    "AUCss_1000": 0.6,
    "BGLUC": 0.5,
    "BHBA1C_5": 0.3,
}

EMAX_DOSES = (0.0, 100.0, 200.0, 400.0, 800.0)

# response_1 = e0 + emax * x^gamma / (ec50^gamma + x^gamma)
#              + cnt_a * b_a + cnt_b * b_b + bin_d * b_d + N(0, sigma)
EMAX_TRUE_PARAMS = {
    "e0": 5.0,
    "emax": 10.0,
    "ec50": 4000.0,
    "gamma": 1.0,
    "sigma": 1.0,
    "cnt_a": 0.5,
    "cnt_b": -0.5,
    "bin_d": 1.0,
}

# logit(P(response_2 = 1)) = e0 + emax * x / (ec50 + x)
EMAX_BIN_TRUE_PARAMS = {
    "e0": -2.5,
    "emax": 5.0,
    "ec50": 3000.0,
    "gamma": 1.0,
}


def simulate_binary_data(n: int = 500, *, seed: int | None = 1234) -> pd.DataFrame:
    """Subject-level data for a binary E-R analysis.

    Parameters
    ----------
    n : int
        Number of subjects.
    seed : int or None
        Random seed.

    Returns
    -------
    DataFrame
        Columns ``ID, DOSE, AUCss_1000, Cmaxss, Cminss, BAGE_10, BWT_10,
        BGLUC, BHBA1C_5, RACE, VISC, AEFLAG``.  ``RACE`` is categorical
        with ``'White'`` as first level; ``VISC`` is boolean.  Exposure
        metrics are 0 for placebo subjects.
    """
    if n < 10:
        raise ValueError(f"n must be >= 10, got {n}")
    rng = np.random.default_rng(seed)

    dose = np.asarray(BINARY_DOSES)[np.arange(n) % len(BINARY_DOSES)]
    rng.shuffle(dose)

    age = np.clip(rng.normal(55.0, 10.0, n), 20.0, 85.0)
    wt = np.clip(rng.normal(75.0, 15.0, n), 40.0, 150.0)
    gluc = np.clip(rng.normal(6.0, 1.2, n), 3.0, 12.0)
    hba1c = np.clip(rng.normal(40.0, 8.0, n), 20.0, 80.0)
    race = rng.choice(RACE_LEVELS, size=n, p=[0.6, 0.2, 0.15, 0.05])
    visc = rng.random(n) < 0.3

    # Allometric clearance; AUCss = daily dose / CL
    cl = 5.0 * (wt / 75.0) ** 0.75 * np.exp(rng.normal(0.0, 0.3, n))
    auc = dose / cl * 24.0
    cavg = auc / 24.0
    cmax = cavg * 1.8 * np.exp(rng.normal(0.0, 0.1, n))
    cmin = cavg * 0.4 * np.exp(rng.normal(0.0, 0.15, n))

    auc_1000 = auc / 1000.0
    hba1c_5 = hba1c / 5.0
    p = BINARY_TRUE_PARAMS
    logit = (
        p["intercept"]
        + p["AUCss_1000"] * auc_1000
        + p["BGLUC"] * (gluc - 6.0)
        + p["BHBA1C_5"] * (hba1c_5 - 8.0)
    )
    aeflag = (rng.random(n) < expit(logit)).astype(int)

    return pd.DataFrame({
        "ID": np.arange(1, n + 1),
        "DOSE": dose,
        "AUCss_1000": auc_1000,
        "Cmaxss": cmax,
        "Cminss": cmin,
        "BAGE_10": age / 10.0,
        "BWT_10": wt / 10.0,
        "BGLUC": gluc,
        "BHBA1C_5": hba1c_5,
        "RACE": pd.Categorical(race, categories=list(RACE_LEVELS)),
        "VISC": visc,
        "AEFLAG": aeflag,
    })


def simulate_emax_data(n: int = 300, *, seed: int | None = 1234) -> pd.DataFrame:
    """Subject-level data following Emax exposure-response curves.

    Parameters
    ----------
    n : int
        Number of subjects.
    seed : int or None
        Random seed.

    Returns
    -------
    DataFrame
        Columns ``ID, dose, exposure, response_1, response_2, cnt_a,
        cnt_b, cnt_c, bin_d, bin_e``.  ``response_1`` is continuous,
        ``response_2`` is 0/1.  ``cnt_c`` and ``bin_e`` have no effect.
    """
    if n < 10:
        raise ValueError(f"n must be >= 10, got {n}")
    rng = np.random.default_rng(seed)

    dose = np.asarray(EMAX_DOSES)[np.arange(n) % len(EMAX_DOSES)]
    rng.shuffle(dose)
    exposure = dose * 15.0 * np.exp(rng.normal(0.0, 0.4, n))

    cnt_a = rng.normal(5.0, 2.0, n)
    cnt_b = rng.normal(5.0, 2.0, n)
    cnt_c = rng.normal(5.0, 2.0, n)
    bin_d = (rng.random(n) < 0.5).astype(int)
    bin_e = (rng.random(n) < 0.5).astype(int)

    p = EMAX_TRUE_PARAMS
    frac = exposure ** p["gamma"] / (p["ec50"] ** p["gamma"] + exposure ** p["gamma"])
    response_1 = (
        p["e0"]
        + p["emax"] * frac
        + p["cnt_a"] * cnt_a
        + p["cnt_b"] * cnt_b
        + p["bin_d"] * bin_d
        + rng.normal(0.0, p["sigma"], n)
    )

    pb = EMAX_BIN_TRUE_PARAMS
    logit = pb["e0"] + pb["emax"] * exposure / (pb["ec50"] + exposure)
    response_2 = (rng.random(n) < expit(logit)).astype(int)

    return pd.DataFrame({
        "ID": np.arange(1, n + 1),
        "dose": dose,
        "exposure": exposure,
        "response_1": response_1,
        "response_2": response_2,
        "cnt_a": cnt_a,
        "cnt_b": cnt_b,
        "cnt_c": cnt_c,
        "bin_d": bin_d,
        "bin_e": bin_e,
    })
