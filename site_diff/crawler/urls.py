# site_diff/crawler/urls.py
"""
URL classification and normalization for the dual crawler.

All functions are pure and never raise on bad input except
:func:`normalize_url` and :func:`entry_url`, which raise ``ValueError``
(use :func:`try_normalize` for the non-raising variant).
"""
from __future__ import annotations

import hashlib
import posixpath
import re
from typing import Optional, Sequence
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit, urlunsplit

__all__: Sequence[str] = (
    "normalize_url",
    "try_normalize",
    "entry_url",
    "is_traversable",
    "is_same_domain",
    "is_anchor_link",
    "is_similar_path",
    "canonical_name",
    "site_key",
)

_WEB_SCHEMES = ("http", "https")
_BLOCKED_SCHEMES = ("mailto", "tel", "sms", "javascript", "data", "file", "ftp")
_DOCUMENT_EXTENSIONS = (".pdf", ".zip", ".doc", ".docx", ".xls", ".xlsx")
_DEFAULT_PORTS = {"http": 80, "https": 443}
_SLUG_RE = re.compile(r"[^a-z0-9]+")
_ESCAPE_RE = re.compile(r"%[0-9a-fA-F]{2}")
# "mailto:..." but not "localhost:8080"
_OTHER_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:(?!\d)")
_SLUG_MAX = 60


def normalize_url(url: str) -> str:
    """
    Canonical absolute form of *url*.

    Lower-cases scheme and host, drops the default port, removes dot
    segments (keeping a trailing slash), sorts the query and keeps the
    fragment. Raises ValueError for anything that is not an absolute
    http(s) URL.
    """
    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    if scheme not in _WEB_SCHEMES or not parts.hostname:
        raise ValueError(f"not an absolute http(s) URL: {url!r}")

    host = parts.hostname.lower()
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    netloc = host if port is None or port == _DEFAULT_PORTS[scheme] else f"{host}:{port}"

    # dot segments are resolved on the encoded path so %2F stays inside its segment
    path = parts.path or "/"
    norm = posixpath.normpath(path)
    if norm.startswith("//"):
        norm = "/" + norm.lstrip("/")
    if path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    norm = quote(norm, safe="/%@:+,;=~!$&'()*")
    norm = _ESCAPE_RE.sub(lambda m: m.group(0).upper(), norm)

    qs = parse_qsl(parts.query, keep_blank_values=True)
    qs.sort()
    query = urlencode(qs, doseq=True)
    return urlunsplit((scheme, netloc, norm, query, parts.fragment))


def try_normalize(url: Optional[str]) -> Optional[str]:
    """:func:`normalize_url` returning None instead of raising."""
    if not url:
        return None
    try:
        return normalize_url(url)
    except ValueError:
        return None


def entry_url(url: str) -> str:
    """
    Normalized form of a crawl entry URL given by the user.

    A scheme-less entry such as ``example.com`` is read as ``http``, the same
    default :func:`is_same_domain` applies. Raises ValueError when the result
    is still not an absolute http(s) URL.
    """
    raw = (url or "").strip()
    if not raw:
        raise ValueError("empty entry URL")
    if raw.startswith("//"):
        raw = "http:" + raw
    elif "://" not in raw and not _OTHER_SCHEME_RE.match(raw):
        raw = "http://" + raw
    try:
        return normalize_url(raw)
    except ValueError as exc:
        raise ValueError(f"invalid entry URL {url!r}: {exc}") from exc


def is_traversable(url: Optional[str]) -> bool:
    """True when *url* can be navigated to and is expected to render HTML."""
    if not url or not isinstance(url, str):
        return False
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return False
    scheme = parts.scheme.lower()
    if scheme in _BLOCKED_SCHEMES:
        return False
    if scheme and scheme not in _WEB_SCHEMES:
        return False
    return not parts.path.lower().endswith(_DOCUMENT_EXTENSIONS)


def is_same_domain(base_url: str, target_url: Optional[str]) -> bool:
    """
    True when *target_url* points at the host of *base_url*.

    Root-relative targets (``/about``) always match. Protocol-relative and
    scheme-less targets are read as ``http``. Fails closed on parse errors.
    """
    if not target_url or not isinstance(target_url, str):
        return False
    target = target_url.strip()
    if target.startswith("/") and not target.startswith("//"):
        return True
    if target.startswith("//"):
        target = "http:" + target
    elif "://" not in target:
        target = "http://" + target
    try:
        base_host = urlsplit(base_url).hostname
        target_host = urlsplit(target).hostname
    except ValueError:
        return False
    return bool(base_host) and base_host == target_host


def is_anchor_link(url: Optional[str]) -> bool:
    """True for an in-page jump on the site root, e.g. ``https://host/#top``."""
    if not url:
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return bool(parts.fragment) and parts.path in ("", "/")


def is_similar_path(url_a: str, url_b: str) -> bool:
    """
    Alignment predicate: do *url_a* and *url_b* denote the same page?

    Anchor links must match on the whole normalized URL. Other URLs match on
    their normalized path alone, whatever their host, query or fragment.
    """
    norm_a = try_normalize(url_a)
    norm_b = try_normalize(url_b)
    if norm_a is None or norm_b is None:
        return False
    if is_anchor_link(norm_a) or is_anchor_link(norm_b):
        return norm_a == norm_b
    return urlsplit(norm_a).path == urlsplit(norm_b).path


def canonical_name(url: str) -> str:
    """
    Host-independent file stem for the page at *url*.

    Built from the path (plus the fragment for anchor links) so the
    screenshot of ``/about`` gets the same name on both sites.
    """
    norm = try_normalize(url) or url
    parts = urlsplit(norm)
    key = parts.path or "/"
    if is_anchor_link(norm):
        key = f"{key}#{parts.fragment}"
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]
    slug = _SLUG_RE.sub("-", unquote(key).lower()).strip("-")[:_SLUG_MAX].rstrip("-")
    return f"{slug or 'root'}-{digest}"


def site_key(url: str) -> str:
    """Path, query and fragment of *url*: its identity within a site."""
    parts = urlsplit(url)
    key = parts.path or "/"
    if parts.query:
        key += "?" + parts.query
    if parts.fragment:
        key += "#" + parts.fragment
    return key
