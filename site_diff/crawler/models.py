"""
Data models for the SiteDiff dual crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Set, Tuple

if TYPE_CHECKING:
    from site_diff.browser import BrowserPage

SITE_A = "a"
SITE_B = "b"


@dataclass(slots=True)
class Site:
    """Entry URL of one deployment and the page handle borrowed for the run."""

    label: str
    entry_url: str
    page: Optional["BrowserPage"]


@dataclass(frozen=True, slots=True)
class Frame:
    """One pending traversal step: a node on each side (either may be absent)."""

    node_a: Optional[str]
    node_b: Optional[str]
    depth: int


@dataclass(frozen=True, slots=True)
class AlignmentPair:
    node_a: str
    node_b: str


@dataclass(frozen=True, slots=True)
class ScreenshotRecord:
    """A captured full-page image of *node* on *site*."""

    site: str
    node: str
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass(slots=True)
class LinkPartition:
    common: List[AlignmentPair] = field(default_factory=list)
    unique_a: List[str] = field(default_factory=list)
    unique_b: List[str] = field(default_factory=list)


@dataclass(slots=True)
class TraversalContext:
    """Mutable state shared by every step of one crawl."""

    visited_a: Set[str] = field(default_factory=set)
    visited_b: Set[str] = field(default_factory=set)
    screenshots_a: List[ScreenshotRecord] = field(default_factory=list)
    screenshots_b: List[ScreenshotRecord] = field(default_factory=list)
    pairs: List[AlignmentPair] = field(default_factory=list)
    # order in which nodes were visited, for reporting
    order_a: List[str] = field(default_factory=list)
    order_b: List[str] = field(default_factory=list)
    _claimed: Dict[Tuple[str, str], int] = field(default_factory=dict)

    def visited(self, site: str) -> Set[str]:
        return self.visited_a if site == SITE_A else self.visited_b

    def screenshots(self, site: str) -> List[ScreenshotRecord]:
        return self.screenshots_a if site == SITE_A else self.screenshots_b

    def mark_visited(self, site: str, node: str) -> bool:
        """Add *node* to the visited set of *site*; False if it was already there."""
        visited = self.visited(site)
        if node in visited:
            return False
        visited.add(node)
        (self.order_a if site == SITE_A else self.order_b).append(node)
        return True

    def claim_filename(self, site: str, stem: str, suffix: str = ".png") -> str:
        """Reserve a file name for *site*, numbering repeats of the same stem."""
        count = self._claimed.get((site, stem), 0) + 1
        self._claimed[(site, stem)] = count
        return f"{stem}{suffix}" if count == 1 else f"{stem}-{count}{suffix}"


@dataclass(slots=True)
class CrawlResult:
    """Everything the aggregator needs once traversal is over."""

    site_a: str
    site_b: str
    visited_a: Set[str]
    visited_b: Set[str]
    screenshots_a: List[ScreenshotRecord]
    screenshots_b: List[ScreenshotRecord]
    pairs: List[AlignmentPair]
    order_a: List[str] = field(default_factory=list)
    order_b: List[str] = field(default_factory=list)
    duration: float = 0.0

    @classmethod
    def from_context(cls, site_a: str, site_b: str, ctx: TraversalContext, duration: float = 0.0) -> "CrawlResult":
        return cls(
            site_a=site_a,
            site_b=site_b,
            visited_a=set(ctx.visited_a),
            visited_b=set(ctx.visited_b),
            screenshots_a=list(ctx.screenshots_a),
            screenshots_b=list(ctx.screenshots_b),
            pairs=list(ctx.pairs),
            order_a=list(ctx.order_a),
            order_b=list(ctx.order_b),
            duration=duration,
        )
