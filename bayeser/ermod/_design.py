"""Covariate design matrices.

Numeric covariates enter as-is and are centered on their training means
inside the model.  Categorical covariates (strings, booleans, pandas
categoricals) are dummy-coded against their first level, which serves
as the reference.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from numpy.typing import NDArray


def _is_categorical(series: pd.Series) -> bool:
    if pd.api.types.is_bool_dtype(series):
        return True
    return not pd.api.types.is_numeric_dtype(series)


def _levels_of(series: pd.Series) -> tuple:
    """Levels in model order: declared order for categoricals, sorted otherwise."""
    if isinstance(series.dtype, pd.CategoricalDtype):
        return tuple(series.cat.categories)
    return tuple(pd.Categorical(series).categories)


@dataclass(frozen=True, eq=False)
class CovariateDesign:
    """How covariate columns map onto model terms.

    Attributes
    ----------
    var_cov : tuple of str
        Covariate column names in model order.
    levels : dict
        Categorical covariate -> tuple of levels; the first is the reference.
    terms : tuple of str
        Design-matrix column names, e.g. ``'BWT_10'`` or ``'RACE[Asian]'``.
    centers : array
        Training mean of each term column.
    scales : array
        Training standard deviation of each term column (1.0 when constant).
    reference : dict
        Reference value of each covariate: training median for numeric
        covariates, first level for categorical ones.
    """

    var_cov: tuple[str, ...]
    levels: dict[str, tuple] = field(default_factory=dict)
    terms: tuple[str, ...] = ()
    centers: NDArray[np.floating] = field(default_factory=lambda: np.zeros(0))
    scales: NDArray[np.floating] = field(default_factory=lambda: np.ones(0))
    reference: dict[str, object] = field(default_factory=dict)

    @property
    def n_terms(self) -> int:
        return len(self.terms)

    def is_categorical(self, var: str) -> bool:
        return var in self.levels

    def matrix(self, data: pd.DataFrame) -> NDArray[np.floating]:
        """Uncentered design matrix ``(n_rows, n_terms)`` for *data*."""
        missing = [c for c in self.var_cov if c not in data.columns]
        if missing:
            raise ValueError(f"data is missing covariate columns: {missing}")

        cols: list[NDArray] = []
        for var in self.var_cov:
            values = data[var]
            if var in self.levels:
                levels = self.levels[var]
                unknown = set(pd.unique(values)) - set(levels)
                if unknown:
                    raise ValueError(
                        f"covariate {var!r} has levels not seen in training: {sorted(map(str, unknown))}"
                    )
                for level in levels[1:]:
                    cols.append((values == level).to_numpy(dtype=np.float64))
            else:
                if values.isna().any():
                    raise ValueError(f"covariate {var!r} contains missing values")
                cols.append(values.to_numpy(dtype=np.float64))

        if not cols:
            return np.zeros((len(data), 0))
        return np.column_stack(cols)

    def centered_matrix(self, data: pd.DataFrame) -> NDArray[np.floating]:
        return self.matrix(data) - self.centers

    def reference_frame(self, n: int = 1) -> pd.DataFrame:
        """Data frame of *n* identical rows holding every covariate at reference."""
        return pd.DataFrame({var: [self.reference[var]] * n for var in self.var_cov}, index=range(n))


def build_design(
    data: pd.DataFrame,
    var_cov: Sequence[str] | None,
    *,
    levels: Mapping[str, Sequence] | None = None,
) -> CovariateDesign:
    """Build a :class:`CovariateDesign` from training data.

    Parameters
    ----------
    data : DataFrame
        Training data.
    var_cov : sequence of str or None
        Covariate column names.
    levels : mapping or None
        Predeclared levels per categorical covariate.  Used when refitting
        on a subset of rows that may not contain every level.
    """
    var_cov = tuple(var_cov or ())
    if len(set(var_cov)) != len(var_cov):
        raise ValueError(f"var_cov contains duplicates: {list(var_cov)}")
    missing = [c for c in var_cov if c not in data.columns]
    if missing:
        raise ValueError(f"data is missing covariate columns: {missing}")

    cat_levels: dict[str, tuple] = {}
    reference: dict[str, object] = {}
    terms: list[str] = []
    for var in var_cov:
        series = data[var]
        if series.isna().any():
            raise ValueError(f"covariate {var!r} contains missing values")
        if levels is not None and var in levels:
            lv = tuple(levels[var])
        elif _is_categorical(series):
            lv = _levels_of(series)
        else:
            lv = None

        if lv is not None:
            if len(lv) < 2:
                raise ValueError(f"categorical covariate {var!r} needs at least 2 levels, got {list(lv)}")
            cat_levels[var] = lv
            reference[var] = lv[0]
            terms.extend(f"{var}[{level}]" for level in lv[1:])
        else:
            reference[var] = float(np.median(series.to_numpy(dtype=np.float64)))
            terms.append(var)

    design = CovariateDesign(var_cov=var_cov, levels=cat_levels, terms=tuple(terms), reference=reference)
    X = design.matrix(data)
    if X.shape[1]:
        centers = X.mean(axis=0)
        scales = X.std(axis=0)
        scales = np.where(scales > 0, scales, 1.0)
    else:
        centers = np.zeros(0)
        scales = np.ones(0)

    return CovariateDesign(
        var_cov=var_cov,
        levels=cat_levels,
        terms=tuple(terms),
        centers=centers,
        scales=scales,
        reference=reference,
    )
