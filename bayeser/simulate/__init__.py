"""
Posterior simulation at new exposures.

Draw-level predictions (linear predictor, expected response and optional
observation-level predictions) for new data, exposure grids and marginal
E-R curves, plus median/quantile-interval summaries.
"""

from bayeser.simulate._summary import calc_ersim_med_qi
from bayeser.simulate._sim import (
    sim_er,
    sim_er_curve,
    sim_er_new_exp,
    sim_er_new_exp_marg,
)

__all__ = [
    "calc_ersim_med_qi",
    "sim_er",
    "sim_er_curve",
    "sim_er_new_exp",
    "sim_er_new_exp_marg",
]
