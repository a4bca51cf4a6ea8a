"""Tests for predictive-performance evaluation."""

import warnings

import numpy as np
import pytest

from bayeser import SamplerConfig
from bayeser.diagnostics import eval_ermod
from bayeser.diagnostics._eval import _auroc, _binary_metrics, _continuous_metrics, _fold_ids
from bayeser.ermod import ConvergenceWarning


class TestMetrics:

    def test_auroc_perfect(self):
        y = np.array([0, 0, 1, 1])
        assert _auroc(y, np.array([0.1, 0.2, 0.8, 0.9])) == pytest.approx(1.0)

    def test_auroc_reversed(self):
        y = np.array([0, 0, 1, 1])
        assert _auroc(y, np.array([0.9, 0.8, 0.2, 0.1])) == pytest.approx(0.0)

    def test_auroc_ties_count_half(self):
        y = np.array([0, 1])
        assert _auroc(y, np.array([0.5, 0.5])) == pytest.approx(0.5)

    def test_auroc_single_class(self):
        assert np.isnan(_auroc(np.array([1, 1]), np.array([0.2, 0.4])))

    def test_brier(self):
        m = _binary_metrics(np.array([0.0, 1.0]), np.array([0.2, 0.6]))
        assert m["brier"] == pytest.approx((0.04 + 0.16) / 2)

    def test_continuous(self):
        y = np.array([1.0, 2.0, 3.0, 4.0])
        m = _continuous_metrics(y, y + np.array([0.5, -0.5, 0.5, -0.5]))
        assert m["rmse"] == pytest.approx(0.5)
        assert m["mae"] == pytest.approx(0.5)
        assert m["r2"] == pytest.approx(1 - 1.0 / 5.0)

    def test_fold_ids_balanced(self):
        ids = _fold_ids(23, 5, seed=1)
        counts = np.bincount(ids)
        assert counts.sum() == 23
        assert counts.max() - counts.min() <= 1


class TestEvalErmod:

    def test_training_binary(self, bin_ermod):
        r = eval_ermod(bin_ermod)
        assert set(r.metrics) == {"auroc", "brier"}
        assert 0.5 < r.metrics["auroc"] <= 1.0
        assert r.n_obs == bin_ermod.n_obs
        assert "training" in r.summary()

    def test_test_set(self, emax_ermod, emax_data):
        r = eval_ermod(emax_ermod, eval_type="test", newdata=emax_data.head(40))
        assert set(r.metrics) == {"rmse", "mae", "r2"}
        assert r.n_obs == 40
        assert r.metrics["r2"] > 0.5

    def test_test_needs_newdata(self, emax_ermod):
        with pytest.raises(ValueError, match="newdata is required"):
            eval_ermod(emax_ermod, eval_type="test")

    def test_test_needs_response(self, emax_ermod, emax_data):
        with pytest.raises(ValueError, match="missing response"):
            eval_ermod(emax_ermod, eval_type="test", newdata=emax_data.drop(columns="response_1"))

    def test_test_needs_exposure(self, bin_ermod, binary_data):
        with pytest.raises(ValueError, match="missing exposure"):
            eval_ermod(bin_ermod, eval_type="test", newdata=binary_data.drop(columns="AUCss_1000"))

    def test_test_rejects_missing_response(self, bin_ermod, binary_data):
        newdata = binary_data.head(30).copy()
        newdata["AEFLAG"] = newdata["AEFLAG"].astype(float)
        newdata.loc[newdata.index[0], "AEFLAG"] = np.nan
        with pytest.raises(ValueError, match="missing values"):
            eval_ermod(bin_ermod, eval_type="test", newdata=newdata)

    def test_test_rejects_non_binary_response(self, bin_ermod, binary_data):
        newdata = binary_data.head(30).copy()
        newdata["AEFLAG"] = newdata["AEFLAG"].astype(float)
        newdata.loc[newdata.index[0], "AEFLAG"] = 2.0
        with pytest.raises(ValueError, match="must be binary"):
            eval_ermod(bin_ermod, eval_type="test", newdata=newdata)

    def test_unknown_type(self, bin_ermod):
        with pytest.raises(ValueError, match="eval_type must be one of"):
            eval_ermod(bin_ermod, eval_type="loo")

    def test_bad_k(self, bin_ermod):
        with pytest.raises(ValueError, match="k must be between"):
            eval_ermod(bin_ermod, eval_type="kfold", k=1)

    def test_kfold_refits(self, lin_ermod):
        config = SamplerConfig(chains=1, draws=200, tune=200, random_seed=5)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConvergenceWarning)
            r = eval_ermod(lin_ermod, eval_type="kfold", k=2, seed=1, config=config)
        assert r.k == 2
        assert r.n_obs == lin_ermod.n_obs
        assert np.isfinite(r.metrics["rmse"])
        assert "k = 2" in r.summary()
