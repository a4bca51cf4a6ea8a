"""
Plots for exposure-response analyses.

E-R curves with credible bands, binned goodness-of-fit, exposure-metric
comparison panels, covariate-effect forest plots and MCMC traces.  All
functions draw with matplotlib and return the axes or figure.
"""

from bayeser.plotting._coveff import plot_coveff
from bayeser.plotting._er import plot_er, plot_er_exp_sel, plot_er_gof
from bayeser.plotting._trace import plot_trace

__all__ = [
    "plot_coveff",
    "plot_er",
    "plot_er_exp_sel",
    "plot_er_gof",
    "plot_trace",
]
