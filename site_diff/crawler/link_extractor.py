# site_diff/crawler/link_extractor.py
"""
Link extraction from rendered pages and successor filtering for the crawler.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_diff.crawler.urls import is_same_domain, is_traversable, try_normalize
from site_diff.utils import remove_duplicates

logger = logging.getLogger("SiteDiff")


def extract_hrefs(html: str, page_url: str) -> List[str]:
    """
    Return the ``href`` of every ``<a>`` in *html* resolved against the page.

    A ``<base href>`` in the document takes precedence over *page_url*, the
    way a browser resolves ``a.href``. Unresolvable values are skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    base = page_url
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag):
        base_href = base_tag.get("href")
        if isinstance(base_href, str) and base_href.strip():
            try:
                base = urljoin(page_url, base_href.strip())
            except ValueError:
                pass

    hrefs: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw:
            continue
        # urljoin leaves mailto:, tel: and friends untouched
        try:
            hrefs.append(urljoin(base, raw))
        except ValueError:
            logger.debug("Unresolvable href %r on %s", raw, page_url)
    return hrefs


def successor_links(page_url: str, links: Iterable[Optional[str]]) -> List[str]:
    """
    Filter raw links of the page at *page_url* down to crawlable nodes.

    Keeps traversable, same-domain links, resolves them to absolute form and
    normalizes them; links that fail any step are dropped. Order is kept and
    duplicates removed.
    """
    result: List[str] = []
    for link in links:
        if not link or not isinstance(link, str):
            continue
        try:
            absolute = urljoin(page_url, link.strip())
        except ValueError:
            logger.debug("Dropping malformed link %r on %s", link, page_url)
            continue
        if not is_traversable(absolute) or not is_same_domain(page_url, absolute):
            continue
        node = try_normalize(absolute)
        if node is None:
            logger.debug("Dropping unparsable link %r on %s", link, page_url)
            continue
        result.append(node)
    return remove_duplicates(result)
