"""Shared fixtures: fitted-looking models built from synthetic posteriors.

Posterior draws are scattered tightly around known parameter values and
wrapped with ``ermod_from_idata``, so simulation, covariate-effect,
diagnostic and plotting code can be tested without running a sampler.
Pointwise log-likelihoods are computed from the draws, which keeps
PSIS-LOO meaningful.
"""

import matplotlib

matplotlib.use("Agg")

import arviz as az
import numpy as np
import pytest
from scipy import stats

from bayeser.datasets import simulate_binary_data, simulate_emax_data
from bayeser.ermod import build_design, ermod_from_idata

N_CHAINS = 2
N_DRAWS = 200


def _fake_ermod(
    data,
    var_resp,
    var_exposure,
    var_cov=(),
    *,
    model_type,
    params,
    beta_cov=None,
    gamma_fix=1.0,
    rel_sd=0.03,
    seed=0,
):
    rng = np.random.default_rng(seed)
    shape = (N_CHAINS, N_DRAWS)
    posterior = {
        name: value + rel_sd * max(abs(value), 0.1) * rng.standard_normal(shape)
        for name, value in params.items()
    }
    design = build_design(data, var_cov)
    if design.n_terms:
        beta = np.asarray(beta_cov if beta_cov is not None else np.zeros(design.n_terms), dtype=float)
        posterior["beta_cov"] = beta + 0.02 * rng.standard_normal((*shape, design.n_terms))

    kwargs = dict(model_type=model_type, gamma_fix=gamma_fix)
    draft = ermod_from_idata(
        az.from_dict(posterior=posterior), data, var_resp, var_exposure, var_cov, **kwargs
    )
    y = draft.data[var_resp].to_numpy(dtype=float)
    mu = draft.epred(draft.data)
    if draft.is_binary:
        loglik = stats.bernoulli.logpmf(y, np.clip(mu, 1e-12, 1 - 1e-12))
    else:
        loglik = stats.norm.logpdf(y, mu, draft.draws("sigma")[:, None])

    idata = az.from_dict(
        posterior=posterior,
        log_likelihood={var_resp: loglik.reshape(*shape, -1)},
        sample_stats={"diverging": np.zeros(shape, dtype=bool)},
    )
    return ermod_from_idata(idata, data, var_resp, var_exposure, var_cov, **kwargs)


@pytest.fixture(scope="session")
def fake_ermod():
    """Factory building an ERModel from synthetic posterior draws."""
    return _fake_ermod


@pytest.fixture(scope="session")
def binary_data():
    return simulate_binary_data(n=200, seed=11)


@pytest.fixture(scope="session")
def emax_data():
    return simulate_emax_data(n=150, seed=11)


@pytest.fixture(scope="session")
def bin_ermod(binary_data):
    """Logistic model on AUC with a numeric and a categorical covariate."""
    return _fake_ermod(
        binary_data, "AEFLAG", "AUCss_1000", ("BGLUC", "RACE"),
        model_type="bin_linear",
        params={"intercept": -2.0, "slope": 0.6},
        beta_cov=[0.5, 0.2, -0.2, 0.0],
    )


@pytest.fixture(scope="session")
def bin_ermod_nocov(binary_data):
    return _fake_ermod(
        binary_data, "AEFLAG", "AUCss_1000",
        model_type="bin_linear",
        params={"intercept": -2.0, "slope": 0.6},
    )


@pytest.fixture(scope="session")
def emax_ermod(emax_data):
    """Continuous Emax model with gamma fixed at 1 and covariates on E0."""
    return _fake_ermod(
        emax_data, "response_1", "exposure", ("cnt_a", "bin_d"),
        model_type="emax",
        params={"e0": 5.5, "emax": 10.0, "ec50": 4000.0, "sigma": 1.0},
        beta_cov=[0.5, 1.0],
    )


@pytest.fixture(scope="session")
def lin_ermod(emax_data):
    return _fake_ermod(
        emax_data, "response_1", "exposure",
        model_type="linear",
        params={"intercept": 8.0, "slope": 0.001, "sigma": 2.0},
    )
