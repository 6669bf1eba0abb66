"""site_diff.report.junit: JUnit XML report sink built with lxml."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from lxml import etree

from site_diff.aggregator import TestRecord

SUITE_NAME = "Visual Regression Test"
CLASS_NAME = "site_diff"


class JUnitReport:
    """
    Collects test records for one run and serializes them as a JUnit suite.

    Created once per run; records are added while the aggregator works and
    the file is written at the end.
    """

    def __init__(self, suite_name: str = SUITE_NAME, timestamp: Optional[datetime] = None) -> None:
        self.suite_name = suite_name
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self.records: List[TestRecord] = []
        self.duration: float = 0.0

    def add(self, record: TestRecord) -> None:
        self.records.append(record)

    @property
    def failures(self) -> int:
        return sum(1 for r in self.records if not r.passed)

    def build(self) -> bytes:
        root = etree.Element(
            "testsuites",
            tests=str(len(self.records)),
            failures=str(self.failures),
            errors="0",
            time=f"{self.duration:.3f}",
        )
        suite = etree.SubElement(
            root,
            "testsuite",
            name=self.suite_name,
            tests=str(len(self.records)),
            failures=str(self.failures),
            errors="0",
            skipped="0",
            timestamp=self.timestamp.isoformat(timespec="seconds"),
            time=f"{self.duration:.3f}",
        )
        for record in self.records:
            case = etree.SubElement(suite, "testcase", name=record.name, classname=f"{CLASS_NAME}.{record.kind}")
            if not record.passed:
                failure = etree.SubElement(case, "failure", message=record.message, type=record.kind)
                failure.text = record.message
        return etree.tostring(root, pretty_print=True, xml_declaration=True, encoding="UTF-8")

    def write(self, output_path: Union[Path, str]) -> Path:
        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(self.build())
        return output
