"""
Model diagnostics for fitted exposure-response models.

MCMC convergence (R-hat, ESS, divergences) via ArviZ, predictive
performance on training, test or k-fold data, and binned
observed-vs-predicted goodness-of-fit tables.
"""

from bayeser.diagnostics._common import ConvergenceResult, EvalResult
from bayeser.diagnostics._convergence import check_convergence, convergence_summary
from bayeser.diagnostics._eval import eval_ermod
from bayeser.diagnostics._gof import exposure_bins, gof_binned

__all__ = [
    "ConvergenceResult",
    "EvalResult",
    "check_convergence",
    "convergence_summary",
    "eval_ermod",
    "exposure_bins",
    "gof_binned",
]
