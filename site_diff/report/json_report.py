# site_diff/report/json_report.py

"""
JSON report for SiteDiff.

Serializes a RunReport to a file.
"""
import json
from pathlib import Path

from site_diff.aggregator import RunReport


def render_json(report: RunReport, output_path: Path | str) -> Path:
    """
    Save *report* as JSON at *output_path*.

    :param report: RunReport of a finished run
    :param output_path: path of the JSON file
    :return: Path of the written file

    Example:
    ```python
    from site_diff.report.json_report import render_json
    report_path = render_json(report, 'tmp/report.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.as_dict(), f, ensure_ascii=False, indent=2)

    return output
