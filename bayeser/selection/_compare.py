"""Model comparison by PSIS-LOO, delegated to ArviZ."""

from __future__ import annotations

import logging
from collections.abc import Mapping

import arviz as az
import numpy as np
import pandas as pd

from bayeser.ermod import ERModel

logger = logging.getLogger(__name__)


def elpd_loo(ermod: ERModel) -> float:
    """Expected log pointwise predictive density (PSIS-LOO)."""
    return float(ermod.loo().elpd_loo)


def compare_ermods(models: Mapping[str, ERModel]) -> pd.DataFrame:
    """Rank fitted models by ELPD-LOO.

    All models must be fitted to the same observations of the same
    response, otherwise their ELPDs are not comparable.

    Parameters
    ----------
    models : mapping of str to ERModel
        Named models, e.g. ``{'linear': m1, 'emax': m2}``.

    Returns
    -------
    DataFrame
        ``arviz.compare`` table (``rank``, ``elpd_loo``, ``p_loo``,
        ``elpd_diff``, ``weight``, ``se``, ``dse``, ``warning``), best
        model first.
    """
    if len(models) < 2:
        raise ValueError(f"Need at least 2 models to compare, got {len(models)}")

    first = next(iter(models.values()))
    for name, m in models.items():
        if m.var_resp != first.var_resp:
            raise ValueError(
                f"Model {name!r} has response {m.var_resp!r}, expected {first.var_resp!r}"
            )
        if m.n_obs != first.n_obs or not np.array_equal(
            m.data[m.var_resp].to_numpy(), first.data[first.var_resp].to_numpy()
        ):
            raise ValueError(f"Model {name!r} was fitted to different observations")

    logger.info("Comparing %d models by ELPD-LOO: %s", len(models), ", ".join(models))
    return az.compare({name: m.idata for name, m in models.items()}, ic="loo")
