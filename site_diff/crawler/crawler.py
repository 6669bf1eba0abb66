from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, List, Optional

from site_diff.capture import ScreenshotCapture
from site_diff.config import RunConfig
from site_diff.crawler.link_extractor import successor_links
from site_diff.crawler.matcher import partition_links
from site_diff.crawler.models import (
    SITE_A,
    SITE_B,
    AlignmentPair,
    CrawlResult,
    Frame,
    ScreenshotRecord,
    Site,
    TraversalContext,
)
from site_diff.crawler.urls import canonical_name, entry_url, is_anchor_link, try_normalize

__all__ = ("DualCrawler",)


class DualCrawler:
    """
    Walks two deployments of one site in lockstep.

    Pages that sit at the same path on both sites are visited together and
    their screenshots share a file name; pages found on only one side are
    walked alone after the shared ones. Traversal is depth-first over an
    explicit stack of :class:`Frame` objects and is strictly sequential:
    the visited sets are consulted and updated at every step.
    """

    def __init__(
        self,
        config: RunConfig,
        capture: ScreenshotCapture,
        screenshot_dirs: Dict[str, Path],
    ) -> None:
        self.config = config
        self.capture = capture
        self.screenshot_dirs = screenshot_dirs
        self.max_depth: int = config.max_depth
        self.logger = logging.getLogger("SiteDiff")
        self._sites: Dict[str, Site] = {}

    async def crawl(self, site_a: Site, site_b: Site) -> CrawlResult:
        self.logger.info("Starting dual crawl: A=%s B=%s (max depth %d)", site_a.entry_url, site_b.entry_url, self.max_depth)
        start = time.monotonic()
        ctx = TraversalContext()
        stack: List[Frame] = [self.bind(site_a, site_b)]
        while stack:
            frame = stack.pop()
            children = await self.step(frame, ctx)
            # reversed so the first child is processed next
            stack.extend(reversed(children))
        duration = time.monotonic() - start
        self.logger.info(
            "Crawl finished in %.2f s: A visited %d (%d screenshots), B visited %d (%d screenshots), %d aligned pairs",
            duration,
            len(ctx.visited_a),
            len(ctx.screenshots_a),
            len(ctx.visited_b),
            len(ctx.screenshots_b),
            len(ctx.pairs),
        )
        return CrawlResult.from_context(site_a.entry_url, site_b.entry_url, ctx, duration)

    def bind(self, site_a: Site, site_b: Site) -> Frame:
        """Attach the two sites and return the root frame.

        Raises ValueError when an entry URL cannot be crawled.
        """
        self._sites = {SITE_A: site_a, SITE_B: site_b}
        return Frame(entry_url(site_a.entry_url), entry_url(site_b.entry_url), 0)

    async def step(self, frame: Frame, ctx: TraversalContext) -> List[Frame]:
        """Process one frame and return its child frames in visiting order."""
        if frame.depth > self.max_depth:
            return []

        node_a = try_normalize(frame.node_a)
        node_b = try_normalize(frame.node_b)
        if node_a is None and node_b is None:
            return []
        if (node_a is not None and node_a in ctx.visited_a) or (node_b is not None and node_b in ctx.visited_b):
            return []

        stem = canonical_name(node_a if node_a is not None else node_b)
        for site, node in ((SITE_A, node_a), (SITE_B, node_b)):
            if node is not None:
                await self._visit(site, node, stem, ctx)
        if node_a is not None and node_b is not None:
            ctx.pairs.append(AlignmentPair(node_a, node_b))

        if is_anchor_link(node_a) or is_anchor_link(node_b):
            self.logger.debug("Anchor link, not expanding: %s | %s", node_a, node_b)
            return []

        links_a = await self._successors(SITE_A, node_a)
        links_b = await self._successors(SITE_B, node_b)
        partition = partition_links(links_a, links_b, ctx.visited_a, ctx.visited_b)
        depth = frame.depth + 1
        children = [Frame(p.node_a, p.node_b, depth) for p in partition.common]
        children += [Frame(link, None, depth) for link in partition.unique_a]
        children += [Frame(None, link, depth) for link in partition.unique_b]
        self.logger.debug(
            "Depth %d: %d common, %d only in A, %d only in B",
            frame.depth,
            len(partition.common),
            len(partition.unique_a),
            len(partition.unique_b),
        )
        return children

    async def _visit(self, site: str, node: str, stem: str, ctx: TraversalContext) -> None:
        # marked before navigating so a failing page is never retried
        ctx.mark_visited(site, node)
        filename = ctx.claim_filename(site, stem)
        path = self.screenshot_dirs[site] / filename
        page = self._sites[site].page
        captured = await self.capture.capture(page, node, path)
        if captured is not None:
            ctx.screenshots(site).append(ScreenshotRecord(site, node, captured))

    async def _successors(self, site: str, node: Optional[str]) -> List[str]:
        if node is None:
            return []
        page = self._sites[site].page
        if page is None:
            return []
        try:
            raw = await page.extract_links()
        except Exception as exc:
            self.logger.warning("Link extraction failed on %s: %s", node, exc)
            return []
        return successor_links(node, raw)
