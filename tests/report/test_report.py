"""Tests for Markdown report rendering."""

import re

import pandas as pd
import pytest

from bayeser.coveff import sim_coveff
from bayeser.report import markdown_table, render_report
from bayeser.selection import CovariateSelection, SelectionStep


class TestMarkdownTable:

    def test_layout(self):
        text = markdown_table(pd.DataFrame({"a": [1.23456, 2.0], "b": ["x", "y"]}), digits=3)
        rows = [[cell.strip() for cell in line.strip("|").split("|")] for line in text.splitlines()]
        assert rows[0] == ["a", "b"]
        assert set(rows[1][0]) <= {"-", ":"}
        assert rows[2] == ["1.23", "x"]
        assert rows[3] == ["2", "y"]

    def test_boolean_column(self):
        text = markdown_table(pd.DataFrame({"step": [1, 2], "accepted": [True, False]}))
        cells = [line.strip("|").split("|")[-1].strip() for line in text.splitlines()[2:]]
        assert cells == ["yes", "no"]


class TestRenderReport:

    def test_sections(self, bin_ermod):
        text = render_report(bin_ermod, title="AE analysis")
        assert text.startswith("# AE analysis")
        for heading in ("## Model", "## Parameter estimates", "## Predictive performance", "## Convergence"):
            assert heading in text
        assert "`AUCss_1000`" in text
        assert re.search(r"\|\s*slope\s*\|", text)
        assert "elpd_loo" in text

    def test_fixed_parameters_listed(self, emax_ermod):
        text = render_report(emax_ermod, title="Emax")
        assert "`gamma` = 1" in text

    def test_coveff_section(self, bin_ermod):
        text = render_report(bin_ermod, title="AE", coveff=sim_coveff(bin_ermod))
        assert "## Covariate effects" in text
        assert "odds ratio" in text
        assert "90% credible interval" in text

    def test_selection_sections(self, bin_ermod):
        steps = (SelectionStep(1, "forward", "BGLUC", -120.0, -110.0, True),)
        cov_sel = CovariateSelection(("BGLUC",), ("BGLUC",), steps, bin_ermod, 2.0, 4.0)
        text = render_report(bin_ermod, title="AE", selection=cov_sel)
        assert "## Covariate selection" in text
        assert "Selected: `BGLUC`" in text

    def test_empty_title(self, bin_ermod):
        with pytest.raises(ValueError, match="title"):
            render_report(bin_ermod, title="")
