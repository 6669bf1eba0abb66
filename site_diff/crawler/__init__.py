"""site_diff.crawler: synchronized traversal of two deployments."""

from .crawler import DualCrawler
from .models import (
    SITE_A,
    SITE_B,
    AlignmentPair,
    CrawlResult,
    Frame,
    LinkPartition,
    ScreenshotRecord,
    Site,
    TraversalContext,
)

__all__ = [
    "DualCrawler",
    "SITE_A",
    "SITE_B",
    "AlignmentPair",
    "CrawlResult",
    "Frame",
    "LinkPartition",
    "ScreenshotRecord",
    "Site",
    "TraversalContext",
]
