"""site_diff.report: writers for the JUnit, JSON and HTML reports of a run."""

from __future__ import annotations

from .html_report import render_html
from .json_report import render_json
from .junit import JUnitReport

__all__ = ["JUnitReport", "render_json", "render_html"]
