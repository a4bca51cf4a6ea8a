"""
BayesER: Bayesian exposure-response analysis for Python.

Covers the E-R workflow of clinical pharmacology: develop logistic or
Emax models with PyMC, select exposure metrics and covariates by
ELPD-LOO, simulate responses at new exposures, quantify covariate
effects, and summarise the result in plots and reports.

Usage:
    from bayeser import ermod, selection, simulate, coveff, diagnostics
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from bayeser._config import SamplerConfig
from bayeser import datasets
from bayeser import ermod
from bayeser import diagnostics
from bayeser import simulate
from bayeser import coveff
from bayeser import selection
from bayeser import plotting
from bayeser import report

__all__ = [
    "__version__",
    "SamplerConfig",
    "datasets",
    "ermod",
    "diagnostics",
    "simulate",
    "coveff",
    "selection",
    "plotting",
    "report",
]
