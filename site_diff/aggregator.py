# File: site_diff/aggregator.py
"""site_diff.aggregator: graph divergence, screenshot diffing and test records."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set

from site_diff.config import ComparisonMode, RunConfig
from site_diff.crawler.models import CrawlResult, ScreenshotRecord
from site_diff.crawler.urls import site_key
from site_diff.diff import ImageDiffEngine
from site_diff.logger import logger

KIND_SCREENSHOT = "screenshot"
KIND_GRAPH = "graph"
GRAPH_CASE_NAME = "Graph Structure Comparison"
CAPTURE_CASE_NAME = "Screenshot Capture"


@dataclass(slots=True)
class TestRecord:
    """One pass/fail verdict of a run."""

    __test__ = False  # not a pytest class

    name: str
    passed: bool
    message: str = ""
    kind: str = KIND_SCREENSHOT
    screenshot_a: Optional[str] = None
    screenshot_b: Optional[str] = None
    diff: Optional[str] = None
    diff_pixels: Optional[int] = None


@dataclass(slots=True)
class GraphDivergence:
    """Site keys visited on only one side."""

    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    @property
    def diverged(self) -> bool:
        return bool(self.added or self.removed)

    def message(self) -> str:
        return f"Added URLs: {', '.join(self.added)}\nRemoved URLs: {', '.join(self.removed)}"


class ReportSink(Protocol):
    def add(self, record: TestRecord) -> None: ...


@dataclass(slots=True)
class RunReport:
    """Results of one regression run."""

    site_a: str
    site_b: str
    started_at: str = ""
    duration: float = 0.0
    comparison: str = ComparisonMode.POSITIONAL.value
    records: List[TestRecord] = field(default_factory=list)
    divergence: GraphDivergence = field(default_factory=GraphDivergence)
    screenshots_a: List[str] = field(default_factory=list)
    screenshots_b: List[str] = field(default_factory=list)

    @property
    def failures(self) -> List[TestRecord]:
        return [r for r in self.records if not r.passed]

    @property
    def passed(self) -> bool:
        return not self.failures

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["summary"] = {
            "total": len(self.records),
            "failures": len(self.failures),
            "passed": self.passed,
        }
        return data

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.as_dict(), ensure_ascii=False, indent=2 if pretty else None)


def compute_divergence(visited_a: Iterable[str], visited_b: Iterable[str]) -> GraphDivergence:
    """Compare visited sets by site key so that different hosts line up."""
    keys_a: Set[str] = {site_key(u) for u in visited_a}
    keys_b: Set[str] = {site_key(u) for u in visited_b}
    return GraphDivergence(added=sorted(keys_b - keys_a), removed=sorted(keys_a - keys_b))


class Aggregator:
    """Turns a :class:`CrawlResult` into test records, pushing each to *sink*."""

    def __init__(
        self,
        config: RunConfig,
        diff_dir: Path,
        engine: Optional[ImageDiffEngine] = None,
        sink: Optional[ReportSink] = None,
    ) -> None:
        self.config = config
        self.diff_dir = Path(diff_dir)
        self.engine = engine or ImageDiffEngine(config.diff_threshold)
        self.sink = sink

    def aggregate(self, result: CrawlResult) -> RunReport:
        report = RunReport(
            site_a=result.site_a,
            site_b=result.site_b,
            comparison=self.config.comparison.value,
            screenshots_a=[str(r.path) for r in result.screenshots_a],
            screenshots_b=[str(r.path) for r in result.screenshots_b],
        )
        report.divergence = compute_divergence(result.visited_a, result.visited_b)
        if report.divergence.diverged:
            logger.info(
                "Graph divergence: %d added, %d removed",
                len(report.divergence.added),
                len(report.divergence.removed),
            )
            self._emit(
                report,
                TestRecord(GRAPH_CASE_NAME, False, report.divergence.message(), kind=KIND_GRAPH),
            )

        logger.info(
            "Comparing screenshots:\n- Instance A (%d screenshots): %s\n- Instance B (%d screenshots): %s",
            len(result.screenshots_a),
            result.site_a,
            len(result.screenshots_b),
            result.site_b,
        )
        if not result.screenshots_a and not result.screenshots_b:
            logger.error("No screenshots captured for either instance")
            self._emit(
                report,
                TestRecord(CAPTURE_CASE_NAME, False, "No screenshots captured for either instance"),
            )
        if self.config.comparison is ComparisonMode.KEYED:
            self._compare_keyed(result, report)
        else:
            self._compare_positional(result, report)
        return report

    def _compare_positional(self, result: CrawlResult, report: RunReport) -> None:
        shots_a, shots_b = result.screenshots_a, result.screenshots_b
        for i in range(max(len(shots_a), len(shots_b))):
            name = f"Screenshot Comparison {i + 1}"
            a = shots_a[i] if i < len(shots_a) else None
            b = shots_b[i] if i < len(shots_b) else None
            self._emit(report, self._compare_one(name, a, b, self.diff_dir / f"diff_{i + 1}.png", result))

    def _compare_keyed(self, result: CrawlResult, report: RunReport) -> None:
        by_name_a = {r.filename: r for r in result.screenshots_a}
        by_name_b = {r.filename: r for r in result.screenshots_b}
        names = list(by_name_a) + [n for n in by_name_b if n not in by_name_a]
        for name in names:
            a, b = by_name_a.get(name), by_name_b.get(name)
            node = (a or b).node  # type: ignore[union-attr]
            case = f"Screenshot Comparison {site_key(node)}"
            self._emit(report, self._compare_one(case, a, b, self.diff_dir / name, result))

    def _compare_one(
        self,
        name: str,
        a: Optional[ScreenshotRecord],
        b: Optional[ScreenshotRecord],
        diff_path: Path,
        result: CrawlResult,
    ) -> TestRecord:
        record = TestRecord(
            name,
            True,
            screenshot_a=str(a.path) if a else None,
            screenshot_b=str(b.path) if b else None,
        )
        if a is None or b is None:
            missing_site = result.site_a if a is None else result.site_b
            side = "A" if a is None else "B"
            record.passed = False
            record.message = f"Missing screenshot in instance {side} ({missing_site})"
            logger.info("%s: Missing in instance %s (%s)", name, side, missing_site)
            return record

        verdict = self.engine.compare(a.path, b.path, diff_path)
        record.diff = str(verdict.diff_path) if verdict.diff_path else None
        record.diff_pixels = verdict.diff_pixels if verdict.diff_path else None
        if verdict.differs:
            record.passed = False
            detail = verdict.reason or f"{verdict.diff_pixels} pixels differ"
            record.message = f"Visual difference detected in {name.lower()} ({detail})"
            logger.info("%s: Differences detected (%s)", name, detail)
        else:
            logger.info("%s: No differences", name)
        return record

    def _emit(self, report: RunReport, record: TestRecord) -> None:
        report.records.append(record)
        if self.sink is not None:
            self.sink.add(record)
