"""Tests for simulated datasets and the CSV reader."""

import numpy as np
import pandas as pd
import pytest

from bayeser.datasets import (
    RACE_LEVELS,
    read_er_data,
    simulate_binary_data,
    simulate_emax_data,
)


class TestSimulateBinaryData:

    def test_columns(self):
        df = simulate_binary_data(n=100)
        assert list(df.columns) == [
            "ID", "DOSE", "AUCss_1000", "Cmaxss", "Cminss", "BAGE_10", "BWT_10",
            "BGLUC", "BHBA1C_5", "RACE", "VISC", "AEFLAG",
        ]
        assert len(df) == 100

    def test_reproducible(self):
        pd.testing.assert_frame_equal(simulate_binary_data(seed=3), simulate_binary_data(seed=3))

    def test_placebo_has_zero_exposure(self):
        df = simulate_binary_data()
        placebo = df[df["DOSE"] == 0]
        assert (placebo[["AUCss_1000", "Cmaxss", "Cminss"]] == 0).all().all()
        assert (df.loc[df["DOSE"] > 0, "AUCss_1000"] > 0).all()

    def test_types(self):
        df = simulate_binary_data()
        assert list(df["RACE"].cat.categories) == list(RACE_LEVELS)
        assert df["VISC"].dtype == bool
        assert set(df["AEFLAG"].unique()) == {0, 1}

    def test_event_rate_rises_with_dose(self):
        df = simulate_binary_data(n=4000, seed=0)
        rate = df.groupby("DOSE")["AEFLAG"].mean()
        assert rate.loc[400.0] > rate.loc[0.0]

    def test_too_small(self):
        with pytest.raises(ValueError, match="n must be"):
            simulate_binary_data(n=5)


class TestSimulateEmaxData:

    def test_columns(self):
        df = simulate_emax_data(n=50)
        assert {"exposure", "response_1", "response_2", "cnt_a", "bin_e"} <= set(df.columns)
        assert (df["exposure"] >= 0).all()

    def test_response_plateaus(self):
        df = simulate_emax_data(n=5000, seed=0)
        means = df.groupby("dose")["response_1"].mean()
        assert means.loc[800.0] > means.loc[0.0]
        # diminishing increments along doubling doses
        assert means.loc[800.0] - means.loc[400.0] < means.loc[200.0] - means.loc[0.0]

    def test_binary_response(self):
        df = simulate_emax_data()
        assert set(df["response_2"].unique()) <= {0, 1}


class TestReadErData:

    def test_roundtrip_with_categoricals(self, tmp_path):
        path = tmp_path / "er.csv"
        simulate_binary_data(n=30).to_csv(path, index=False)
        df = read_er_data(path, required=["AEFLAG", "AUCss_1000"], categorical=["RACE"])
        assert isinstance(df["RACE"].dtype, pd.CategoricalDtype)
        assert len(df) == 30

    def test_missing_required(self, tmp_path):
        path = tmp_path / "er.csv"
        pd.DataFrame({"a": [1, 2]}).to_csv(path, index=False)
        with pytest.raises(ValueError, match="missing required columns"):
            read_er_data(path, required=["AEFLAG"])

    def test_unknown_categorical(self, tmp_path):
        path = tmp_path / "er.csv"
        pd.DataFrame({"a": [1, 2]}).to_csv(path, index=False)
        with pytest.raises(ValueError, match="no column"):
            read_er_data(path, categorical=["RACE"])
