"""Tests for exposure-model functions and the model registry."""

import numpy as np
import pytest

from bayeser.ermod import (
    VALID_MODEL_TYPES,
    get_model_spec,
    inv_logit,
    linear_exposure,
    sigmoid_emax,
)


class TestSigmoidEmax:

    def test_at_zero_returns_e0(self):
        assert sigmoid_emax(0.0, e0=2.0, emax=10.0, ec50=5.0) == pytest.approx(2.0)

    def test_at_ec50_half_emax(self):
        r = sigmoid_emax(5.0, e0=2.0, emax=10.0, ec50=5.0, gamma=2.5)
        assert r == pytest.approx(7.0)

    def test_approaches_e0_plus_emax(self):
        r = sigmoid_emax(1e9, e0=2.0, emax=10.0, ec50=5.0)
        assert r == pytest.approx(12.0, rel=1e-6)

    def test_monotone_increasing(self):
        x = np.linspace(0, 100, 50)
        r = sigmoid_emax(x, e0=0.0, emax=1.0, ec50=10.0, gamma=1.5)
        assert np.all(np.diff(r) > 0)

    def test_negative_emax_decreasing(self):
        x = np.linspace(0, 100, 50)
        r = sigmoid_emax(x, e0=0.0, emax=-1.0, ec50=10.0)
        assert np.all(np.diff(r) < 0)

    def test_gamma_steepens(self):
        # Above EC50 a larger Hill coefficient is closer to the plateau
        shallow = sigmoid_emax(20.0, e0=0.0, emax=1.0, ec50=10.0, gamma=1.0)
        steep = sigmoid_emax(20.0, e0=0.0, emax=1.0, ec50=10.0, gamma=4.0)
        assert steep > shallow

    def test_broadcasts_over_draws(self):
        x = np.array([0.0, 10.0, 100.0])[None, :]
        ec50 = np.array([5.0, 50.0])[:, None]
        r = sigmoid_emax(x, e0=0.0, emax=1.0, ec50=ec50)
        assert r.shape == (2, 3)
        assert np.all(r[:, 0] == 0.0)


class TestLinearAndLink:

    def test_linear(self):
        np.testing.assert_allclose(linear_exposure(np.array([0.0, 2.0]), 1.0, 0.5), [1.0, 2.0])

    def test_inv_logit(self):
        assert inv_logit(0.0) == pytest.approx(0.5)
        assert inv_logit(np.log(3.0)) == pytest.approx(0.75)

    def test_inv_logit_extremes_finite(self):
        r = inv_logit(np.array([-800.0, 800.0]))
        assert np.all(np.isfinite(r))
        np.testing.assert_allclose(r, [0.0, 1.0])


class TestModelRegistry:

    @pytest.mark.parametrize("name", VALID_MODEL_TYPES)
    def test_known_types(self, name):
        spec = get_model_spec(name)
        assert spec.structure in ("linear", "emax")

    def test_binary_flags(self):
        assert get_model_spec("bin_linear").is_binary
        assert get_model_spec("bin_emax").is_binary
        assert not get_model_spec("linear").is_binary
        assert not get_model_spec("emax").is_binary

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="model_type must be one of"):
            get_model_spec("probit")
