"""Reading E-R datasets from disk."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)


def read_er_data(
    path: str | Path,
    *,
    required: Sequence[str] | None = None,
    categorical: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Read a subject-level E-R dataset from CSV.

    Parameters
    ----------
    path : str or Path
        CSV file.
    required : sequence of str or None
        Columns that must be present.
    categorical : sequence of str or None
        Columns converted to pandas categoricals (levels sorted; the first
        level becomes the model reference).

    Returns
    -------
    DataFrame
    """
    path = Path(path)
    data = pd.read_csv(path)
    logger.info("Read %d rows x %d columns from %s", len(data), len(data.columns), path)

    missing = [c for c in (required or ()) if c not in data.columns]
    if missing:
        raise ValueError(f"{path.name} is missing required columns: {missing}")

    for col in categorical or ():
        if col not in data.columns:
            raise ValueError(f"{path.name} has no column {col!r} to make categorical")
        data[col] = data[col].astype("category")
    return data
