# File: site_diff/engine.py
"""site_diff.engine: orchestration of one regression run."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Tuple

from site_diff.aggregator import Aggregator, RunReport
from site_diff.browser import BrowserPage, BrowserSession
from site_diff.capture import ScreenshotCapture
from site_diff.config import RunConfig
from site_diff.crawler import SITE_A, SITE_B, CrawlResult, DualCrawler, Site
from site_diff.crawler.urls import entry_url
from site_diff.diff import ImageDiffEngine
from site_diff.logger import logger
from site_diff.report import JUnitReport, render_html, render_json
from site_diff.utils import clear_images, ensure_dir

__all__ = ["ArtifactLayout", "Engine", "run_regression"]

SCREENSHOTS_A = "screenshots-a"
SCREENSHOTS_B = "screenshots-b"
DIFFS = "diffs"
REPORT_XML = "report.xml"
REPORT_JSON = "report.json"
REPORT_HTML = "report.html"


@dataclass(frozen=True)
class ArtifactLayout:
    """File-system layout of one run directory."""

    root: Path

    @property
    def screenshots_a(self) -> Path:
        return self.root / SCREENSHOTS_A

    @property
    def screenshots_b(self) -> Path:
        return self.root / SCREENSHOTS_B

    @property
    def diffs(self) -> Path:
        return self.root / DIFFS

    @property
    def report_xml(self) -> Path:
        return self.root / REPORT_XML

    @property
    def report_json(self) -> Path:
        return self.root / REPORT_JSON

    @property
    def report_html(self) -> Path:
        return self.root / REPORT_HTML

    def screenshot_dirs(self) -> Dict[str, Path]:
        return {SITE_A: self.screenshots_a, SITE_B: self.screenshots_b}

    def prepare(self) -> "ArtifactLayout":
        """Create the directories and drop images left by an earlier run."""
        ensure_dir(self.root)
        for directory in (self.screenshots_a, self.screenshots_b, self.diffs):
            ensure_dir(directory)
            clear_images(directory)
        return self


class Engine:
    """One regression run: created at start, reports written at the end, never reused."""

    def __init__(
        self,
        config: RunConfig,
        layout: Optional[ArtifactLayout] = None,
        sink: Optional[JUnitReport] = None,
    ) -> None:
        self.config = config
        self.layout = layout or ArtifactLayout(Path(config.output_dir))
        self.sink = sink or JUnitReport()
        self.capture = ScreenshotCapture(config)
        self.diff_engine = ImageDiffEngine(config.diff_threshold)
        self._started: Optional[datetime] = None
        self._start = 0.0

    async def crawl(self, site_a: Site, site_b: Site) -> CrawlResult:
        crawler = DualCrawler(self.config, self.capture, self.layout.screenshot_dirs())
        return await crawler.crawl(site_a, site_b)

    def aggregate(self, result: CrawlResult) -> RunReport:
        aggregator = Aggregator(self.config, self.layout.diffs, self.diff_engine, self.sink)
        return aggregator.aggregate(result)

    async def run_with_pages(
        self,
        instance_a: str,
        instance_b: str,
        page_a: Optional[BrowserPage],
        page_b: Optional[BrowserPage],
    ) -> RunReport:
        """Run against already opened pages; the caller owns their lifecycle."""
        instance_a, instance_b = self._begin(instance_a, instance_b)
        result = await self.crawl(Site(SITE_A, instance_a, page_a), Site(SITE_B, instance_b, page_b))
        return self._finish(result)

    async def run(self, instance_a: str, instance_b: str) -> RunReport:
        """Launch the browser and crawl; diffing starts once the browser is closed."""
        instance_a, instance_b = self._begin(instance_a, instance_b)
        async with BrowserSession(self.config) as session:
            page_a, page_b = await session.new_pages()
            result = await self.crawl(Site(SITE_A, instance_a, page_a), Site(SITE_B, instance_b, page_b))
        return self._finish(result)

    def _begin(self, instance_a: str, instance_b: str) -> Tuple[str, str]:
        """Validate the entry URLs and open the run directory."""
        if self._started is not None:
            raise RuntimeError("Engine instances are single-use")
        entries = entry_url(instance_a), entry_url(instance_b)
        self._started = datetime.now(timezone.utc)
        self._start = time.monotonic()
        self.layout.prepare()
        logger.info("Run directory: %s", self.layout.root)
        return entries

    def _finish(self, result: CrawlResult) -> RunReport:
        report = self.aggregate(result)
        report.started_at = self._started.isoformat(timespec="seconds") if self._started else ""
        report.duration = time.monotonic() - self._start
        self.write_reports(report)
        return report

    def write_reports(self, report: RunReport) -> None:
        self.sink.duration = report.duration
        xml_path = self.sink.write(self.layout.report_xml)
        json_path = render_json(report, self.layout.report_json)
        html_path = render_html(report, self.layout.report_html)
        logger.info("Report saved to %s", xml_path)
        logger.debug("JSON report: %s, HTML report: %s", json_path, html_path)
        logger.info("%d checks, %d failed", len(report.records), len(report.failures))


async def run_regression(instance_a: str, instance_b: str, config: Optional[RunConfig] = None) -> RunReport:
    """Compare two deployments with a fresh engine."""
    return await Engine(config or RunConfig()).run(instance_a, instance_b)
