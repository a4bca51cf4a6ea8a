"""
Exposure-response datasets.

Simulated subject-level data for binary and Emax E-R analyses, with the
true generating parameters, and a CSV reader for user data.
"""

from bayeser.datasets._simulate import (
    BINARY_TRUE_PARAMS,
    EMAX_BIN_TRUE_PARAMS,
    EMAX_TRUE_PARAMS,
    RACE_LEVELS,
    simulate_binary_data,
    simulate_emax_data,
)
from bayeser.datasets._io import read_er_data

__all__ = [
    "BINARY_TRUE_PARAMS",
    "EMAX_BIN_TRUE_PARAMS",
    "EMAX_TRUE_PARAMS",
    "RACE_LEVELS",
    "simulate_binary_data",
    "simulate_emax_data",
    "read_er_data",
]
