"""Forest plots of covariate effects."""

from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def plot_coveff(coveff: pd.DataFrame, *, ax: plt.Axes | None = None) -> plt.Axes:
    """Forest plot of a :func:`sim_coveff` table.

    Odds ratios are drawn on a log axis with a reference line at 1;
    differences on a linear axis with a reference line at 0.  Reference
    rows appear only when ``show_ref_value`` is set.
    """
    needed = ("var_label", "value_annot", "value_label", "effect", "effect_lower",
              "effect_upper", "effect_type", "is_ref_value", "show_ref_value")
    missing = [c for c in needed if c not in coveff.columns]
    if missing:
        raise ValueError(f"coveff is missing columns: {missing}")

    is_ref = coveff["is_ref_value"].astype(bool)
    rows = coveff[~is_ref | coveff["show_ref_value"].astype(bool)].reset_index(drop=True)
    if rows.empty:
        raise ValueError("coveff has no rows to plot")
    odds = (rows["effect_type"] == "odds_ratio").all()

    if ax is None:
        _, ax = plt.subplots(figsize=(6.4, 0.35 * len(rows) + 1.2))

    y = np.arange(len(rows))[::-1]
    est = rows["effect"].to_numpy(dtype=np.float64)
    lo = rows["effect_lower"].to_numpy(dtype=np.float64)
    hi = rows["effect_upper"].to_numpy(dtype=np.float64)
    ax.errorbar(est, y, xerr=[est - lo, hi - est], fmt="o", color="#4C78A8", capsize=3)
    ax.axvline(1.0 if odds else 0.0, color="0.4", linestyle="--", linewidth=1)

    labels = [f"{r.var_label}: {r.value_annot} ({r.value_label})" for r in rows.itertuples()]
    ax.set_yticks(y)
    ax.set_yticklabels(labels)
    if odds:
        ax.set_xscale("log")
        ax.set_xlabel("Odds ratio")
    else:
        ax.set_xlabel("Difference in response")
    return ax
