"""
Covariate effects.

Build a specification of the values at which each covariate (and the
exposure) is evaluated, edit it, simulate effects relative to reference
values, and print them as a table.
"""

from bayeser.coveff._spec import SPEC_COLUMNS, build_spec_coveff, replace_spec_coveff
from bayeser.coveff._sim import print_coveff, sim_coveff

__all__ = [
    "SPEC_COLUMNS",
    "build_spec_coveff",
    "replace_spec_coveff",
    "sim_coveff",
    "print_coveff",
]
