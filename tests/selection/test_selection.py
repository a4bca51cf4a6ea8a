"""Tests for model comparison, exposure-metric and covariate selection."""

import warnings

import numpy as np
import pytest

from bayeser import SamplerConfig
from bayeser.datasets import simulate_binary_data
from bayeser.ermod import ConvergenceWarning
from bayeser.selection import (
    CovariateSelection,
    ExposureSelection,
    SelectionStep,
    compare_ermods,
    elpd_loo,
    select_covariates,
    select_exposure,
)

FAST = SamplerConfig(chains=2, draws=250, tune=250, random_seed=99)


@pytest.fixture(scope="module")
def sel_data():
    return simulate_binary_data(n=400, seed=21)


@pytest.fixture(scope="module")
def flat_ermod(fake_ermod, binary_data):
    """Wrong baseline rate and no exposure effect."""
    return fake_ermod(
        binary_data, "AEFLAG", "Cminss",
        model_type="bin_linear",
        params={"intercept": -0.5, "slope": 0.0},
    )


# ---------------------------------------------------------------------------
# compare_ermods (synthetic posteriors)
# ---------------------------------------------------------------------------

class TestCompareErmods:

    def test_ranks_true_model_first(self, bin_ermod_nocov, flat_ermod):
        comp = compare_ermods({"AUCss_1000": bin_ermod_nocov, "Cminss": flat_ermod})
        assert comp.index[0] == "AUCss_1000"
        assert comp.loc["AUCss_1000", "elpd_diff"] == 0.0
        assert comp.loc["Cminss", "elpd_diff"] > 0

    def test_elpd_matches_loo(self, bin_ermod_nocov):
        assert elpd_loo(bin_ermod_nocov) == pytest.approx(float(bin_ermod_nocov.loo().elpd_loo))

    def test_needs_two_models(self, bin_ermod):
        with pytest.raises(ValueError, match="at least 2 models"):
            compare_ermods({"a": bin_ermod})

    def test_different_response(self, bin_ermod, emax_ermod):
        with pytest.raises(ValueError, match="has response"):
            compare_ermods({"a": bin_ermod, "b": emax_ermod})

    def test_different_observations(self, fake_ermod, bin_ermod_nocov, binary_data):
        other = fake_ermod(
            binary_data.head(150), "AEFLAG", "AUCss_1000",
            model_type="bin_linear", params={"intercept": -2.0, "slope": 0.6},
        )
        with pytest.raises(ValueError, match="different observations"):
            compare_ermods({"a": bin_ermod_nocov, "b": other})


class TestSelectionResults:

    def test_exposure_selection_summary(self, bin_ermod_nocov, flat_ermod):
        models = {"AUCss_1000": bin_ermod_nocov, "Cminss": flat_ermod}
        sel = ExposureSelection(
            var_exp_selected="AUCss_1000",
            var_exp_candidates=("AUCss_1000", "Cminss"),
            comparison=compare_ermods(models),
            models=models,
        )
        assert sel.ermod is bin_ermod_nocov
        assert "Selected    : AUCss_1000" in sel.summary()

    def test_steps_frame(self, bin_ermod):
        steps = (
            SelectionStep(1, "forward", "BGLUC", -100.0, -90.0, True),
            SelectionStep(1, "forward", "RACE", -100.0, -99.5, False),
        )
        sel = CovariateSelection(("BGLUC", "RACE"), ("BGLUC",), steps, bin_ermod, 2.0, 4.0)
        frame = sel.steps_frame()
        assert frame["delta"].tolist() == [10.0, 0.5]
        assert "added BGLUC" in sel.summary()
        assert "RACE" not in sel.summary().split("Selected")[1].splitlines()[0]


# ---------------------------------------------------------------------------
# Selection with sampling
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def exp_sel(sel_data):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        return select_exposure(sel_data, "AEFLAG", ["AUCss_1000", "BAGE_10"], config=FAST)


@pytest.fixture(scope="module")
def cov_sel(sel_data):
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", ConvergenceWarning)
        return select_covariates(
            sel_data, "AEFLAG", "AUCss_1000", ["BGLUC", "BWT_10"], config=FAST,
        )


class TestSelectExposure:

    def test_selects_exposure_driving_response(self, exp_sel):
        assert exp_sel.var_exp_selected == "AUCss_1000"
        assert exp_sel.comparison.index[0] == "AUCss_1000"

    def test_one_model_per_candidate(self, exp_sel):
        assert set(exp_sel.models) == {"AUCss_1000", "BAGE_10"}
        assert exp_sel.ermod.var_exposure == "AUCss_1000"

    def test_needs_two_candidates(self, sel_data):
        with pytest.raises(ValueError, match="at least 2 exposure candidates"):
            select_exposure(sel_data, "AEFLAG", ["AUCss_1000"], config=FAST)


class TestSelectCovariates:

    def test_selects_true_covariate(self, cov_sel):
        assert cov_sel.var_cov_selected == ("BGLUC",)
        assert cov_sel.ermod.var_cov == ("BGLUC",)

    def test_step_log(self, cov_sel):
        frame = cov_sel.steps_frame()
        first = frame[frame["step"] == 1]
        assert set(first["covariate"]) == {"BGLUC", "BWT_10"}
        assert first.loc[first["covariate"] == "BGLUC", "accepted"].item()
        assert "backward" in set(frame["direction"])
        assert np.all(np.isfinite(frame["elpd_after"]))

    def test_empty_candidates(self, sel_data):
        with pytest.raises(ValueError, match="at least one covariate"):
            select_covariates(sel_data, "AEFLAG", "AUCss_1000", [], config=FAST)

    def test_negative_threshold(self, sel_data):
        with pytest.raises(ValueError, match="non-negative"):
            select_covariates(
                sel_data, "AEFLAG", "AUCss_1000", ["BGLUC"], threshold_forward=-1.0, config=FAST,
            )
