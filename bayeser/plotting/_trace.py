"""MCMC trace plots."""

from __future__ import annotations

from collections.abc import Sequence

import arviz as az

from bayeser.ermod import ERModel


def plot_trace(ermod: ERModel, var_names: Sequence[str] | None = None):
    """Trace and density plots of the sampled parameters via ArviZ.

    Returns the array of matplotlib axes from :func:`arviz.plot_trace`.
    """
    if var_names is None:
        var_names = ermod.param_names
    return az.plot_trace(ermod.idata, var_names=list(var_names))
