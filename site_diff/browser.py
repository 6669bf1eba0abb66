# site_diff/browser.py
"""
Browser-driving primitive: Playwright pages behind a small protocol.

The crawler only sees :class:`BrowserPage`; tests substitute in-memory pages.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from site_diff.config import RunConfig
from site_diff.crawler.link_extractor import extract_hrefs

__all__ = ("BrowserPage", "PlaywrightPage", "BrowserSession")


@runtime_checkable
class BrowserPage(Protocol):
    """Operations the crawler needs from one browsing context."""

    async def navigate(self, url: str) -> None: ...

    async def wait_for_quiescence(self) -> None: ...

    async def capture_full_page(self, path: Path) -> None: ...

    async def extract_links(self) -> List[str]: ...


class PlaywrightPage:
    """:class:`BrowserPage` backed by a Playwright ``Page``."""

    def __init__(self, page: Page, config: RunConfig) -> None:
        self.page = page
        self.config = config
        self.loaded_url: Optional[str] = None
        self.logger = logging.getLogger("SiteDiff")

    async def navigate(self, url: str) -> None:
        self.loaded_url = None
        await self.page.goto(
            url,
            wait_until="networkidle",
            timeout=self.config.navigation_timeout * 1000,
        )
        self.loaded_url = self.page.url or url

    async def wait_for_quiescence(self) -> None:
        await self.page.wait_for_load_state("load", timeout=self.config.navigation_timeout * 1000)
        if self.config.settle_delay:
            await self.page.wait_for_timeout(self.config.settle_delay * 1000)
        await asyncio.gather(*(self._wait_hidden(sel) for sel in self.config.loading_selectors))

    async def _wait_hidden(self, selector: str) -> None:
        try:
            await self.page.wait_for_selector(
                selector, state="hidden", timeout=self.config.indicator_timeout * 1000
            )
        except PlaywrightError as exc:
            # a stuck indicator must not stall the crawl
            self.logger.debug("Indicator %s still visible on %s: %s", selector, self.loaded_url, exc)

    async def capture_full_page(self, path: Path) -> None:
        await self.page.screenshot(path=str(path), full_page=True)

    async def extract_links(self) -> List[str]:
        if self.loaded_url is None:
            return []
        html = await self.page.content()
        return extract_hrefs(html, self.loaded_url)


class BrowserSession:
    """Launch Chromium with one context and a page per site."""

    def __init__(self, config: RunConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.logger = logging.getLogger("SiteDiff")

    async def __aenter__(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        try:
            self.browser = await self._playwright.chromium.launch(headless=self.config.headless)
            context_kwargs = {
                "viewport": {"width": self.config.viewport_width, "height": self.config.viewport_height},
            }
            if self.config.user_agent:
                context_kwargs["user_agent"] = self.config.user_agent
            self.context = await self.browser.new_context(**context_kwargs)
        except Exception:
            await self._shutdown()
            raise
        self.logger.debug("Browser launched (headless=%s)", self.config.headless)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._shutdown()

    async def new_pages(self) -> Tuple[PlaywrightPage, PlaywrightPage]:
        if self.context is None:
            raise RuntimeError("Browser session not started")
        page_a = await self.context.new_page()
        page_b = await self.context.new_page()
        return PlaywrightPage(page_a, self.config), PlaywrightPage(page_b, self.config)

    async def _shutdown(self) -> None:
        if self.browser is not None:
            await self.browser.close()
            self.browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
