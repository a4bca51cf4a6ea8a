"""Markdown report of a fitted exposure-response model."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from string import Template

import pandas as pd

from bayeser.diagnostics import check_convergence
from bayeser.ermod import ERModel

logger = logging.getLogger(__name__)

REPORT_TEMPLATE = Template("""\
# $title

## Model

- Model type: `$model_type` ($description)
- Response: `$var_resp`
- Exposure: `$var_exposure`
- Covariates: $covariates
- Observations: $n_obs
- Posterior draws: $n_draws
$fixed
## Parameter estimates

Median and $qi_label equal-tailed credible interval.

$param_table

## Predictive performance (PSIS-LOO)

$loo_table

## Convergence

$convergence
$extra""")


def _fmt(value: object, digits: int = 4) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (int, float)):
        return f"{value:.{digits}g}"
    return str(value)


def markdown_table(frame: pd.DataFrame, *, digits: int = 4) -> str:
    """Render a DataFrame as a pipe table (index not included).

    Numeric cells are written with ``digits`` significant figures and
    boolean columns as ``yes``/``no``.
    """
    frame = frame.copy()
    for col in frame.columns[frame.dtypes == bool]:
        frame[col] = frame[col].map(_fmt)
    return frame.to_markdown(index=False, floatfmt=f".{digits}g")


def _param_table(ermod: ERModel, qi_width: float) -> str:
    rows = []
    for name in ermod.coef_draws().columns:
        ci = ermod.coef_interval(name, qi_width)
        rows.append({"parameter": name, "median": ci.estimate, "lower": ci.lower, "upper": ci.upper})
    return markdown_table(pd.DataFrame(rows))


def _loo_table(ermod: ERModel) -> str:
    if "log_likelihood" not in ermod.idata.groups():
        return "Not available: the posterior has no pointwise log-likelihood."
    loo = ermod.loo()
    frame = pd.DataFrame([{
        "elpd_loo": float(loo.elpd_loo),
        "se": float(loo.se),
        "p_loo": float(loo.p_loo),
    }])
    return markdown_table(frame)


def _convergence_text(ermod: ERModel) -> str:
    result = check_convergence(ermod)
    lines = [
        f"- Max R-hat: {_fmt(result.max_rhat)}",
        f"- Min bulk ESS: {result.min_ess_bulk:.0f}",
        f"- Min tail ESS: {result.min_ess_tail:.0f}",
        f"- Divergent transitions: {result.n_divergent}",
        f"- Status: {'converged' if result.converged else 'check sampler output'}",
    ]
    lines.extend(f"  - {p}" for p in result.problems)
    return "\n".join(lines)


def _coveff_section(coveff: pd.DataFrame) -> str:
    is_ref = coveff["is_ref_value"].astype(bool)
    rows = coveff[~is_ref | coveff["show_ref_value"].astype(bool)]
    name = "odds ratio" if (coveff["effect_type"] == "odds_ratio").all() else "difference"
    table = pd.DataFrame({
        "variable": rows["var_label"],
        "value": [f"{a} ({b})" for a, b in zip(rows["value_annot"], rows["value_label"])],
        "effect": rows["effect"],
        "lower": rows["effect_lower"],
        "upper": rows["effect_upper"],
    })
    width = coveff[".width"].iloc[0]
    return (
        "\n## Covariate effects\n\n"
        f"Effect as {name} against each variable's reference value, "
        f"{width:.0%} credible interval.\n\n"
        + markdown_table(table, digits=3)
        + "\n"
    )


def _selection_section(selection) -> str:
    # ExposureSelection carries a comparison table, CovariateSelection a step log
    if hasattr(selection, "comparison"):
        comp = selection.comparison.reset_index().rename(columns={"index": "metric"})
        cols = [c for c in ("metric", "rank", "elpd_loo", "elpd_diff", "dse") if c in comp.columns]
        return (
            "\n## Exposure metric selection\n\n"
            f"Selected: `{selection.var_exp_selected}`\n\n"
            + markdown_table(comp[cols], digits=4)
            + "\n"
        )
    steps = selection.steps_frame()
    selected = ", ".join(f"`{c}`" for c in selection.var_cov_selected) or "none"
    return (
        "\n## Covariate selection\n\n"
        f"Selected: {selected}\n\n"
        + (markdown_table(steps, digits=4) if len(steps) else "No candidate moves evaluated.")
        + "\n"
    )


def render_report(
    ermod: ERModel,
    *,
    title: str,
    coveff: pd.DataFrame | None = None,
    selection: object | Sequence[object] | None = None,
    qi_width: float = 0.95,
) -> str:
    """Markdown report summarising a fitted model.

    Parameters
    ----------
    ermod : ERModel
        Fitted model.
    title : str
        Report heading.
    coveff : DataFrame or None
        Output of :func:`bayeser.coveff.sim_coveff` to tabulate.
    selection : ExposureSelection, CovariateSelection, a sequence of them, or None
        Selection results to log.
    qi_width : float
        Width of the parameter credible intervals.

    Returns
    -------
    str
    """
    if not title:
        raise ValueError("title must be a non-empty string")

    fixed = ""
    if ermod.fixed:
        fixed = "- Fixed: " + ", ".join(f"`{k}` = {_fmt(v)}" for k, v in ermod.fixed.items()) + "\n"

    extra = ""
    if coveff is not None:
        extra += _coveff_section(coveff)
    if selection is not None:
        items = selection if isinstance(selection, (list, tuple)) else [selection]
        for item in items:
            extra += _selection_section(item)

    logger.info("Rendering report %r for %s model", title, ermod.model_type)
    return REPORT_TEMPLATE.substitute(
        title=title,
        model_type=ermod.model_type,
        description=ermod.spec.description,
        var_resp=ermod.var_resp,
        var_exposure=ermod.var_exposure,
        covariates=", ".join(f"`{c}`" for c in ermod.var_cov) or "none",
        n_obs=ermod.n_obs,
        n_draws=ermod.n_draws,
        fixed=fixed,
        qi_label=f"{qi_width:.0%}",
        param_table=_param_table(ermod, qi_width),
        loo_table=_loo_table(ermod),
        convergence=_convergence_text(ermod),
        extra=extra,
    )
