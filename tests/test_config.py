"""Tests for SamplerConfig."""

import pytest

from bayeser import SamplerConfig


class TestSamplerConfig:

    def test_defaults(self):
        c = SamplerConfig()
        assert c.chains == 4
        assert c.n_draws == 4000
        assert c.sample_kwargs()["target_accept"] == 0.9

    def test_with_overrides(self):
        c = SamplerConfig().with_overrides(draws=200)
        assert c.draws == 200
        assert c.chains == 4

    @pytest.mark.parametrize("kwargs", [
        {"chains": 0},
        {"draws": 0},
        {"tune": -1},
        {"target_accept": 1.0},
        {"cores": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError, match="must be"):
            SamplerConfig(**kwargs)


class TestFromEnv:

    def test_overrides(self):
        env = {"BAYESER_CHAINS": "2", "BAYESER_TARGET_ACCEPT": "0.95", "BAYESER_PROGRESSBAR": "yes"}
        c = SamplerConfig.from_env(env)
        assert c.chains == 2
        assert c.target_accept == 0.95
        assert c.progressbar is True
        assert c.draws == 1000

    def test_empty_values_ignored(self):
        assert SamplerConfig.from_env({"BAYESER_DRAWS": ""}).draws == 1000

    def test_custom_prefix(self):
        c = SamplerConfig.from_env({"ER_RANDOM_SEED": "7"}, prefix="ER_")
        assert c.random_seed == 7

    def test_bad_value(self):
        with pytest.raises(ValueError, match="BAYESER_DRAWS"):
            SamplerConfig.from_env({"BAYESER_DRAWS": "many"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("BAYESER_TUNE", "123")
        assert SamplerConfig.from_env().tune == 123
