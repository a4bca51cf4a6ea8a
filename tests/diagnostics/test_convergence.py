"""Tests for MCMC convergence checks."""

import arviz as az
import numpy as np
import pytest

from bayeser.diagnostics import check_convergence, convergence_summary
from bayeser.ermod import ermod_from_idata


class TestCheckConvergence:

    def test_well_mixed(self, bin_ermod):
        r = check_convergence(bin_ermod, rhat_threshold=1.05, min_ess=100)
        assert r.converged
        assert r.max_rhat < 1.05
        assert r.n_divergent == 0
        assert r.problems == ()

    def test_ess_threshold(self, bin_ermod):
        r = check_convergence(bin_ermod, min_ess=1e6)
        assert not r.converged
        assert any("ESS" in p for p in r.problems)

    def test_stuck_chains(self, binary_data):
        rng = np.random.default_rng(0)
        idata = az.from_dict(
            posterior={
                "intercept": rng.normal(-2.0, 0.1, (2, 200)),
                "slope": np.stack([rng.normal(0.0, 0.1, 200), rng.normal(3.0, 0.1, 200)]),
            },
            sample_stats={"diverging": np.r_[np.ones(5), np.zeros(395)].astype(bool).reshape(2, 200)},
        )
        m = ermod_from_idata(idata, binary_data, "AEFLAG", "AUCss_1000", model_type="bin_linear")
        r = check_convergence(m, min_ess=10)
        assert not r.converged
        assert r.max_rhat > 1.5
        assert r.n_divergent == 5
        assert "divergent" in r.summary()

    def test_single_chain_rhat_ignored(self, binary_data):
        rng = np.random.default_rng(1)
        idata = az.from_dict(posterior={
            "intercept": rng.normal(-2.0, 0.1, (1, 400)),
            "slope": rng.normal(0.6, 0.1, (1, 400)),
        })
        m = ermod_from_idata(idata, binary_data, "AEFLAG", "AUCss_1000", model_type="bin_linear")
        r = check_convergence(m, min_ess=50)
        assert np.isnan(r.max_rhat)
        assert r.converged


class TestConvergenceSummary:

    def test_rows(self, emax_ermod):
        table = convergence_summary(emax_ermod)
        assert "e0" in table.index
        assert "r_hat" in table.columns
        # two covariate coefficients
        assert sum(name.startswith("beta_cov") for name in table.index) == 2
