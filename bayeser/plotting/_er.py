"""Exposure-response curves and goodness-of-fit plots."""

from __future__ import annotations

import logging

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from bayeser.diagnostics import gof_binned
from bayeser.ermod import ERModel
from bayeser.simulate import sim_er_new_exp_marg

logger = logging.getLogger(__name__)

CURVE_COLOR = "#4C78A8"
OBS_COLOR = "#F58518"


def _get_ax(ax: plt.Axes | None) -> plt.Axes:
    if ax is None:
        _, ax = plt.subplots(figsize=(6.4, 4.4))
    return ax


def _draw_observed(ax: plt.Axes, ermod: ERModel, n_bins: int) -> None:
    """Raw observations plus binned means with intervals."""
    data = ermod.data
    x = data[ermod.var_exposure].to_numpy(dtype=np.float64)
    y = data[ermod.var_resp].to_numpy(dtype=np.float64)
    if ermod.is_binary:
        rng = np.random.default_rng(0)
        jitter = rng.uniform(-0.03, 0.03, len(y))
        ax.scatter(x, y + jitter, s=8, color="0.5", alpha=0.4, linewidths=0)
    else:
        ax.scatter(x, y, s=8, color="0.5", alpha=0.4, linewidths=0)

    gof = gof_binned(ermod, n_bins=n_bins)
    ax.errorbar(
        gof["exposure_median"],
        gof["obs"],
        yerr=[gof["obs"] - gof["obs_lower"], gof["obs_upper"] - gof["obs"]],
        fmt="o",
        color=OBS_COLOR,
        capsize=3,
        label="Observed (binned)",
    )


def plot_er(
    ersim_med_qi: pd.DataFrame,
    *,
    ermod: ERModel | None = None,
    var_exposure: str | None = None,
    var_y: str = "epred",
    show_orig_data: bool = False,
    show_coef_exp: bool = False,
    n_bins: int = 4,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Plot a simulated E-R curve with its credible band.

    Parameters
    ----------
    ersim_med_qi : DataFrame
        Median/QI output of :func:`sim_er_new_exp_marg` or
        :func:`sim_er_curve`; must hold ``<var_y>``, ``<var_y>_lower`` and
        ``<var_y>_upper``.
    ermod : ERModel or None
        Fitted model.  Needed for *show_orig_data* and *show_coef_exp* and
        to infer *var_exposure*.
    var_exposure : str or None
        Exposure column; defaults to ``ermod.var_exposure``.
    var_y : str
        Value column to draw (``'epred'`` or ``'linpred'``).
    show_orig_data : bool
        Overlay training observations and binned observed means.
    show_coef_exp : bool
        Annotate the exposure slope and its 95% CrI (linear models only).
    n_bins : int
        Number of exposure bins for the observed means.
    ax : Axes or None
        Target axes; a new figure is created when None.

    Returns
    -------
    Axes
    """
    if var_exposure is None:
        if ermod is None:
            raise ValueError("Pass ermod or var_exposure to identify the exposure column")
        var_exposure = ermod.var_exposure
    if (show_orig_data or show_coef_exp) and ermod is None:
        raise ValueError("show_orig_data and show_coef_exp need ermod")
    needed = [var_exposure, var_y, f"{var_y}_lower", f"{var_y}_upper"]
    missing = [c for c in needed if c not in ersim_med_qi.columns]
    if missing:
        raise ValueError(f"ersim_med_qi is missing columns: {missing}")

    ax = _get_ax(ax)
    curve = ersim_med_qi.sort_values(var_exposure)
    x = curve[var_exposure].to_numpy(dtype=np.float64)
    ax.fill_between(
        x,
        curve[f"{var_y}_lower"],
        curve[f"{var_y}_upper"],
        color=CURVE_COLOR,
        alpha=0.2,
        linewidth=0,
    )
    ax.plot(x, curve[var_y], color=CURVE_COLOR, label="Model (median)")

    if show_orig_data:
        _draw_observed(ax, ermod, n_bins)
    if show_coef_exp:
        ci = ermod.coef_exp_ci()
        ax.text(
            0.02, 0.97,
            f"slope: {ci.estimate:.3g} [{ci.lower:.3g}, {ci.upper:.3g}]",
            transform=ax.transAxes,
            va="top",
            fontsize=9,
        )

    ax.set_xlabel(var_exposure)
    if ermod is not None and ermod.is_binary and var_y == "epred":
        ax.set_ylabel(f"P({ermod.var_resp})")
    else:
        ax.set_ylabel(ermod.var_resp if ermod is not None else var_y)
    ax.legend(frameon=False, loc="lower right")
    return ax


def plot_er_gof(
    ermod: ERModel,
    *,
    n_bins: int = 4,
    n_points: int = 50,
    n_draws: int | None = 500,
    ax: plt.Axes | None = None,
) -> plt.Axes:
    """Marginal model curve against binned observations.

    The curve averages predictions over the training covariate
    distribution at each exposure, which is what binned observed means
    estimate.
    """
    x = ermod.data[ermod.var_exposure]
    grid = np.linspace(float(x.min()), float(x.max()), n_points)
    sim = sim_er_new_exp_marg(ermod, grid, output_type="median_qi", n_draws=n_draws)
    ax = plot_er(sim, ermod=ermod, show_orig_data=True, n_bins=n_bins, ax=ax)
    ax.set_title(f"{ermod.var_resp} vs {ermod.var_exposure}")
    return ax


def plot_er_exp_sel(selection, *, n_bins: int = 4, n_draws: int | None = 500) -> plt.Figure:
    """One goodness-of-fit panel per candidate exposure metric.

    Parameters
    ----------
    selection : ExposureSelection
        Output of :func:`bayeser.selection.select_exposure`.

    Returns
    -------
    Figure
    """
    candidates = list(selection.var_exp_candidates)
    fig, axes = plt.subplots(
        1, len(candidates), figsize=(4.2 * len(candidates), 4.0), sharey=True, squeeze=False,
    )
    for ax, var in zip(axes[0], candidates):
        plot_er_gof(selection.models[var], n_bins=n_bins, n_draws=n_draws, ax=ax)
        elpd = selection.comparison.loc[var, "elpd_loo"]
        marker = " (selected)" if var == selection.var_exp_selected else ""
        ax.set_title(f"{var}{marker}\nELPD-LOO {elpd:.1f}")
    logger.debug("Drew exposure-selection panels for %s", ", ".join(candidates))
    return fig
