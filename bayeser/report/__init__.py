"""Markdown reports for fitted exposure-response models."""

from bayeser.report._render import REPORT_TEMPLATE, markdown_table, render_report

__all__ = ["REPORT_TEMPLATE", "markdown_table", "render_report"]
