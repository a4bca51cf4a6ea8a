"""Fitted exposure-response model type."""

from __future__ import annotations

from dataclasses import dataclass, field

import arviz as az
import numpy as np
import pandas as pd
from numpy.typing import NDArray

from bayeser._config import SamplerConfig
from bayeser.ermod._design import CovariateDesign
from bayeser.ermod._models import ModelSpec, get_model_spec, inv_logit, linear_exposure, sigmoid_emax


class ConvergenceWarning(UserWarning):
    """MCMC diagnostics (R-hat, ESS) indicate the chains have not converged."""


# Exposure-model parameters per structure, in display order.
_EXPOSURE_PARAMS = {
    "linear": ("intercept", "slope"),
    "emax": ("e0", "emax", "ec50", "gamma"),
}


def _flatten_draws(idata: az.InferenceData, name: str) -> NDArray[np.floating]:
    """Posterior draws of *name* as ``(n_chains * n_draws, ...)``."""
    values = idata.posterior[name].values
    return values.reshape(-1, *values.shape[2:])


@dataclass(frozen=True)
class CoefInterval:
    """Posterior median and equal-tailed credible interval of one parameter."""

    name: str
    estimate: float
    lower: float
    upper: float
    qi_width: float

    def summary(self) -> str:
        return (
            f"{self.name}: {self.estimate:.4g} "
            f"({self.qi_width:.0%} CrI: {self.lower:.4g}, {self.upper:.4g})"
        )


@dataclass(frozen=True, eq=False)
class ERModel:
    """A fitted Bayesian exposure-response model.

    Holds posterior draws (``idata``) and everything needed to rebuild the
    linear predictor at new exposure and covariate values.  Never mutated
    after creation.

    Attributes
    ----------
    model_type : str
        ``'bin_linear'``, ``'bin_emax'``, ``'linear'`` or ``'emax'``.
    var_resp, var_exposure : str
        Response and exposure column names.
    data : DataFrame
        Training data.
    idata : arviz.InferenceData
        Posterior draws, with a ``log_likelihood`` group when fitted by
        this package.
    design : CovariateDesign
        Covariate coding.  The posterior ``beta_cov`` follows
        ``design.terms``.
    fixed : dict
        Emax parameters held fixed during fitting (e.g. ``{'gamma': 1.0}``).
    config : SamplerConfig or None
        Sampler settings used for the fit.
    """

    model_type: str
    var_resp: str
    var_exposure: str
    data: pd.DataFrame
    idata: az.InferenceData
    design: CovariateDesign
    fixed: dict[str, float] = field(default_factory=dict)
    config: SamplerConfig | None = None

    # -- structure --------------------------------------------------------

    @property
    def spec(self) -> ModelSpec:
        return get_model_spec(self.model_type)

    @property
    def is_binary(self) -> bool:
        return self.spec.is_binary

    @property
    def var_cov(self) -> tuple[str, ...]:
        return self.design.var_cov

    @property
    def exposure_params(self) -> tuple[str, ...]:
        """Sampled exposure-model parameters (fixed ones excluded)."""
        names = _EXPOSURE_PARAMS[self.spec.structure]
        return tuple(n for n in names if n not in self.fixed)

    @property
    def param_names(self) -> tuple[str, ...]:
        """Posterior variable names of all sampled parameters."""
        names = list(self.exposure_params)
        if self.design.n_terms:
            names.append("beta_cov")
        if not self.is_binary:
            names.append("sigma")
        return tuple(names)

    @property
    def n_obs(self) -> int:
        return len(self.data)

    @property
    def n_draws(self) -> int:
        post = self.idata.posterior
        return int(post.sizes["chain"] * post.sizes["draw"])

    # -- draws ------------------------------------------------------------

    def draws(self, name: str) -> NDArray[np.floating]:
        """Flattened posterior draws of a parameter.

        Fixed Emax parameters are returned as a constant vector.
        """
        if name in self.fixed:
            return np.full(self.n_draws, float(self.fixed[name]))
        return _flatten_draws(self.idata, name)

    def coef_draws(self) -> pd.DataFrame:
        """Posterior draws of every sampled parameter, one column per name.

        Covariate coefficients are labelled by design term.
        """
        cols: dict[str, NDArray] = {}
        for name in self.exposure_params:
            cols[name] = self.draws(name)
        if self.design.n_terms:
            beta = self.draws("beta_cov")
            for j, term in enumerate(self.design.terms):
                cols[term] = beta[:, j]
        if not self.is_binary:
            cols["sigma"] = self.draws("sigma")
        frame = pd.DataFrame(cols)
        frame.index.name = ".draw"
        return frame

    def coef_interval(self, name: str, qi_width: float = 0.95) -> CoefInterval:
        """Median and equal-tailed interval of a named coefficient."""
        if not (0.0 < qi_width < 1.0):
            raise ValueError(f"qi_width must be in (0, 1), got {qi_width}")
        coefs = self.coef_draws()
        if name not in coefs.columns:
            raise ValueError(f"Unknown coefficient {name!r}; available: {list(coefs.columns)}")
        values = coefs[name].to_numpy()
        lo, hi = np.quantile(values, [(1 - qi_width) / 2, 1 - (1 - qi_width) / 2])
        return CoefInterval(
            name=name,
            estimate=float(np.median(values)),
            lower=float(lo),
            upper=float(hi),
            qi_width=qi_width,
        )

    def coef_exp_ci(self, qi_width: float = 0.95) -> CoefInterval:
        """Credible interval of the exposure slope (linear models only)."""
        if self.spec.structure != "linear":
            raise ValueError(
                f"coef_exp_ci is only defined for linear exposure models, got {self.model_type!r}"
            )
        return self.coef_interval("slope", qi_width)

    # -- prediction -------------------------------------------------------

    def linpred(
        self,
        newdata: pd.DataFrame,
        draw_idx: NDArray[np.integer] | None = None,
    ) -> NDArray[np.floating]:
        """Linear predictor ``(n_draws, n_rows)`` at *newdata*.

        Logit scale for binary models, response scale for continuous ones.
        """
        if self.var_exposure not in newdata.columns:
            raise ValueError(f"newdata is missing exposure column {self.var_exposure!r}")
        x = newdata[self.var_exposure].to_numpy(dtype=np.float64)
        if np.isnan(x).any():
            raise ValueError(f"exposure column {self.var_exposure!r} contains missing values")

        def pick(name: str) -> NDArray:
            d = self.draws(name)
            return d if draw_idx is None else d[draw_idx]

        if self.spec.structure == "linear":
            lp = linear_exposure(x[None, :], pick("intercept")[:, None], pick("slope")[:, None])
        else:
            lp = sigmoid_emax(
                x[None, :],
                pick("e0")[:, None],
                pick("emax")[:, None],
                pick("ec50")[:, None],
                pick("gamma")[:, None],
            )

        if self.design.n_terms:
            Xc = self.design.centered_matrix(newdata)
            lp = lp + pick("beta_cov") @ Xc.T
        return lp

    def epred(
        self,
        newdata: pd.DataFrame,
        draw_idx: NDArray[np.integer] | None = None,
    ) -> NDArray[np.floating]:
        """Expected response ``(n_draws, n_rows)``: probability for binary models."""
        lp = self.linpred(newdata, draw_idx)
        return inv_logit(lp) if self.is_binary else lp

    # -- model comparison -------------------------------------------------

    def loo(self, *, pointwise: bool = False) -> az.ELPDData:
        """PSIS-LOO estimate of the expected log predictive density."""
        if "log_likelihood" not in self.idata.groups():
            raise ValueError("idata has no log_likelihood group; LOO-CV is unavailable")
        return az.loo(self.idata, pointwise=pointwise)

    # -- reporting --------------------------------------------------------

    def summary(self, qi_width: float = 0.95) -> str:
        """Human-readable summary of the model and its parameters."""
        lines = [
            f"Exposure-response model: {self.model_type} ({self.spec.description})",
            "",
            f"  Response  : {self.var_resp}",
            f"  Exposure  : {self.var_exposure}",
            f"  Covariates: {', '.join(self.var_cov) if self.var_cov else '(none)'}",
            f"  n obs     : {self.n_obs}",
            f"  draws     : {self.n_draws}",
            "",
            f"Parameter estimates (median, {qi_width:.0%} CrI):",
        ]
        for name in self.coef_draws().columns:
            ci = self.coef_interval(name, qi_width)
            lines.append(f"  {name:>16s} = {ci.estimate:>11.4g}  [{ci.lower:.4g}, {ci.upper:.4g}]")
        if self.fixed:
            lines.append("")
            lines.append("Fixed parameters:")
            for name, val in self.fixed.items():
                lines.append(f"  {name:>16s} = {val:>11.4g}")
        if self.design.n_terms:
            lines.append("")
            lines.append("  Intercept/E0 refers to covariates at their training means.")
        return "\n".join(lines)
