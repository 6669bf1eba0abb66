# site_diff/capture.py
"""
Screenshot capture adapter.

Wraps a :class:`~site_diff.browser.BrowserPage`: navigate, wait until the
page is quiet, write a full-page image. Failures come back as ``None``.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from site_diff.config import RunConfig

if TYPE_CHECKING:
    from site_diff.browser import BrowserPage

__all__ = ["ScreenshotCapture"]

# slack on top of the per-step timeouts the page adapter already applies
_GRACE = 5.0


class ScreenshotCapture:
    """Navigate-wait-capture with every step under its own timeout."""

    def __init__(self, config: RunConfig) -> None:
        self.config = config
        self.logger = logging.getLogger("SiteDiff")

    @property
    def _quiescence_budget(self) -> float:
        indicators = self.config.indicator_timeout if self.config.loading_selectors else 0.0
        return self.config.navigation_timeout + self.config.settle_delay + indicators + _GRACE

    async def capture(self, page: Optional["BrowserPage"], url: str, path: Path) -> Optional[Path]:
        """Return *path* once the screenshot exists, None on any failure."""
        if page is None:
            self.logger.error("No page handle to capture %s", url)
            return None
        step = "navigation"
        try:
            await asyncio.wait_for(page.navigate(url), timeout=self.config.navigation_timeout + _GRACE)
            step = "wait"
            await asyncio.wait_for(page.wait_for_quiescence(), timeout=self._quiescence_budget)
            step = "capture"
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.wait_for(page.capture_full_page(path), timeout=self.config.navigation_timeout)
        except asyncio.TimeoutError:
            self.logger.warning("Timed out during %s of %s", step, url)
            return None
        except Exception as exc:
            self.logger.warning("Error during %s of %s: %s", step, url, exc)
            return None

        if not path.is_file():
            self.logger.error("Failed to capture screenshot for %s", url)
            return None
        self.logger.info("Screenshot captured: %s", path)
        return path
