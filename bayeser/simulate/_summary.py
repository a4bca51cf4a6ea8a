"""Median and quantile-interval summaries of simulation draws."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

VALUE_COLUMNS = ("linpred", "epred", "prediction")


def calc_ersim_med_qi(
    ersim: pd.DataFrame,
    *,
    qi_width: float = 0.95,
    by: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Reduce draw-level simulation output to median and quantile interval.

    Parameters
    ----------
    ersim : DataFrame
        Draw-level output of :func:`sim_er` and friends.  Must contain a
        ``.draw`` column and at least one of ``linpred``, ``epred``,
        ``prediction``.
    qi_width : float
        Width of the equal-tailed interval (default 0.95).
    by : sequence of str or None
        Grouping columns.  Defaults to ``.row`` when present, otherwise
        every column that is neither a value column nor ``.draw``.

    Returns
    -------
    DataFrame
        One row per group: the grouping and carried-over columns, then
        ``<v>``, ``<v>_lower``, ``<v>_upper`` for each value column, and
        ``.width``.
    """
    if not (0.0 < qi_width < 1.0):
        raise ValueError(f"qi_width must be in (0, 1), got {qi_width}")
    if ".draw" not in ersim.columns:
        raise ValueError("ersim must contain a '.draw' column; pass draw-level output")

    value_cols = [c for c in VALUE_COLUMNS if c in ersim.columns]
    if not value_cols:
        raise ValueError(f"ersim has none of the value columns {VALUE_COLUMNS}")

    if by is None:
        if ".row" in ersim.columns:
            by = [".row"]
        else:
            by = [c for c in ersim.columns if c not in value_cols and c != ".draw"]
    by = list(by)
    if not by:
        raise ValueError("No grouping columns; pass `by` explicitly")
    missing = [c for c in by if c not in ersim.columns]
    if missing:
        raise ValueError(f"ersim is missing grouping columns: {missing}")

    lo, hi = (1 - qi_width) / 2, 1 - (1 - qi_width) / 2
    grouped = ersim.groupby(by, sort=True, observed=True)

    carried = [c for c in ersim.columns if c not in by and c not in value_cols and c != ".draw"]
    parts = []
    if carried:
        parts.append(grouped[carried].first())

    stats = {}
    for col in value_cols:
        g = grouped[col]
        stats[col] = g.median()
        stats[f"{col}_lower"] = g.quantile(lo)
        stats[f"{col}_upper"] = g.quantile(hi)
    parts.append(pd.DataFrame(stats))

    out = pd.concat(parts, axis=1).reset_index()
    out[".width"] = qi_width
    return out
