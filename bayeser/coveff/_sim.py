"""Covariate-effect simulation.

For each variable in a specification, the model is evaluated at each
listed value with every other variable held at its reference value.
Effects are relative to the variable's own reference value, draw by
draw: odds ratios for binary models and response differences for
continuous models.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from bayeser.coveff._spec import SPEC_COLUMNS, _check_one_reference, build_spec_coveff
from bayeser.ermod import ERModel


def _reference_profile(ermod: ERModel, spec: pd.DataFrame) -> dict[str, object]:
    """Reference value of the exposure and every covariate."""
    profile: dict[str, object] = dict(ermod.design.reference)
    profile[ermod.var_exposure] = float(np.median(ermod.data[ermod.var_exposure]))
    ref_rows = spec[spec["is_ref_value"].astype(bool)]
    for _, row in ref_rows.iterrows():
        profile[row["var_name"]] = _row_value(row)
    return profile


def _row_value(row: pd.Series) -> object:
    if row["value_cat"] is not None and not (isinstance(row["value_cat"], float) and np.isnan(row["value_cat"])):
        return row["value_cat"]
    return float(row["value_cont"])


def sim_coveff(
    ermod: ERModel,
    spec: pd.DataFrame | None = None,
    *,
    qi_width: float = 0.9,
) -> pd.DataFrame:
    """Simulate covariate effects relative to reference values.

    Parameters
    ----------
    ermod : ERModel
        Fitted model.
    spec : DataFrame or None
        Covariate-effect specification; defaults to
        :func:`build_spec_coveff`.
    qi_width : float
        Width of the equal-tailed posterior interval (default 0.9).

    Returns
    -------
    DataFrame
        The specification columns plus ``effect``, ``effect_lower``,
        ``effect_upper``, ``effect_type`` (``'odds_ratio'`` or
        ``'difference'``) and ``.width``.  Reference rows have an effect
        of exactly 1 (odds ratio) or 0 (difference).
    """
    if not (0.0 < qi_width < 1.0):
        raise ValueError(f"qi_width must be in (0, 1), got {qi_width}")
    if spec is None:
        spec = build_spec_coveff(ermod)
    missing = [c for c in SPEC_COLUMNS if c not in spec.columns]
    if missing:
        raise ValueError(f"spec is missing columns: {missing}")
    model_vars = {ermod.var_exposure, *ermod.var_cov}
    unknown = set(spec["var_name"]) - model_vars
    if unknown:
        raise ValueError(f"spec names variables not in the model: {sorted(unknown)}")
    _check_one_reference(spec)

    spec = spec.sort_values(["var_order", "value_order"], kind="stable").reset_index(drop=True)
    profile = _reference_profile(ermod, spec)
    lo, hi = (1 - qi_width) / 2, 1 - (1 - qi_width) / 2
    effect_type = "odds_ratio" if ermod.is_binary else "difference"

    parts = []
    for var, rows in spec.groupby("var_name", sort=False):
        newdata = pd.DataFrame([profile] * len(rows))
        newdata[var] = [_row_value(r) for _, r in rows.iterrows()]
        lp = ermod.linpred(newdata)  # (S, k)
        ref_idx = int(np.flatnonzero(rows["is_ref_value"].to_numpy(dtype=bool))[0])
        diff = lp - lp[:, [ref_idx]]
        eff = np.exp(diff) if ermod.is_binary else diff

        out = rows.copy()
        out["effect"] = np.median(eff, axis=0)
        out["effect_lower"] = np.quantile(eff, lo, axis=0)
        out["effect_upper"] = np.quantile(eff, hi, axis=0)
        parts.append(out)

    result = pd.concat(parts, ignore_index=True)
    result["effect_type"] = effect_type
    result[".width"] = qi_width
    return result


def print_coveff(coveff: pd.DataFrame, *, digits: int = 3) -> str:
    """Format a :func:`sim_coveff` table as aligned text.

    Reference rows are listed only when ``show_ref_value`` is set.
    """
    is_ref = coveff["is_ref_value"].astype(bool)
    rows = coveff[~is_ref | coveff["show_ref_value"].astype(bool)]
    effect_name = "Odds ratio" if (coveff["effect_type"] == "odds_ratio").all() else "Difference"
    width = f"{coveff['.width'].iloc[0]:.0%}" if len(coveff) else ""

    labels = [f"{r.var_label}: {r.value_annot} ({r.value_label})" for r in rows.itertuples()]
    col_w = max([len(s) for s in labels] + [8])
    lines = [f"{'Variable':<{col_w}s}  {effect_name} [{width} CrI]", "-" * (col_w + 30)]
    for label, r in zip(labels, rows.itertuples()):
        if r.is_ref_value:
            est = "reference"
        else:
            est = f"{r.effect:.{digits}g} [{r.effect_lower:.{digits}g}, {r.effect_upper:.{digits}g}]"
        lines.append(f"{label:<{col_w}s}  {est}")
    return "\n".join(lines)
