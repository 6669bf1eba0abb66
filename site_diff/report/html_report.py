"""site_diff.report.html_report: HTML summary of a run rendered with Jinja2."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_diff.aggregator import RunReport

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def template_env(template_dir: Union[Path, str, None] = None) -> Environment:
    """Jinja2 environment over *template_dir* (the bundled templates by default)."""
    return Environment(
        loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )


def _relative(path: Optional[str], base: Path) -> Optional[str]:
    if not path:
        return None
    try:
        return Path(os.path.relpath(path, base)).as_posix()
    except ValueError:
        return Path(path).as_posix()


def render_html(
    report: RunReport,
    output_path: Union[Path, str],
    template_dir: Union[Path, str, None] = None,
) -> Path:
    """Render ``report.html.j2`` for *report* and save it to *output_path*.

    Image links are made relative to the report file so the run directory can
    be moved or served as-is.

    Example:
    ```python
    from site_diff.report.html_report import render_html
    html_path = render_html(report, 'tmp/report.html')
    ```
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    base = output_path.parent

    template = template_env(template_dir).get_template("report.html.j2")
    records = [
        {
            "name": r.name,
            "passed": r.passed,
            "message": r.message,
            "kind": r.kind,
            "diff_pixels": r.diff_pixels,
            "screenshot_a": _relative(r.screenshot_a, base),
            "screenshot_b": _relative(r.screenshot_b, base),
            "diff": _relative(r.diff, base),
        }
        for r in report.records
    ]
    context: dict[str, Any] = {
        "report": report,
        "records": records,
        "failures": len(report.failures),
        "divergence": report.divergence,
    }
    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
