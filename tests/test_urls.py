# File: tests/test_urls.py
import pytest

from site_diff.crawler.urls import (
    canonical_name,
    entry_url,
    is_anchor_link,
    is_same_domain,
    is_similar_path,
    is_traversable,
    normalize_url,
    site_key,
    try_normalize,
)


@pytest.mark.parametrize(
    "url",
    [
        "mailto:team@example.com",
        "tel:+15551234",
        "sms:+15551234",
        "javascript:void(0)",
        "data:text/html,hi",
        "file:///etc/passwd",
        "ftp://example.com/file",
        "https://example.com/manual.pdf",
        "https://example.com/archive.ZIP",
        "/reports/q1.xlsx",
        "/letter.docx",
        "",
        None,
        "http://[::1",
    ],
)
def test_non_traversable(url):
    assert is_traversable(url) is False


@pytest.mark.parametrize(
    "url",
    ["https://example.com/", "/about", "about/team", "http://example.com/page.html", "?page=2"],
)
def test_traversable(url):
    assert is_traversable(url) is True


@pytest.mark.parametrize(
    "base,target,expected",
    [
        ("https://example.com/a", "/about", True),
        ("https://example.com/a", "https://example.com/b", True),
        ("https://example.com/a", "http://example.com/b", True),
        ("https://example.com/a", "example.com/b", True),
        ("https://example.com/a", "//example.com/b", True),
        ("https://example.com/a", "//other.com/b", False),
        ("https://example.com/a", "https://www.example.com/b", False),
        ("https://example.com/a", "https://other.com/", False),
        ("https://example.com/a", "", False),
        ("https://example.com/a", "http://[::1", False),
        ("not a url", "https://example.com/", False),
    ],
)
def test_is_same_domain(base, target, expected):
    assert is_same_domain(base, target) is expected


def test_anchor_link_on_root():
    assert is_anchor_link("https://example.com/#section2")
    assert is_anchor_link("https://example.com#top")
    assert is_anchor_link("#section2")


def test_not_anchor_link():
    assert not is_anchor_link("https://example.com/")
    assert not is_anchor_link("https://example.com/#")
    assert not is_anchor_link("https://example.com/about#team")
    assert not is_anchor_link(None)


def test_normalize_url_canonicalizes():
    assert normalize_url("HTTPS://Example.COM:443/a/./b/../c?z=1&a=2#Frag") == "https://example.com/a/c?a=2&z=1#Frag"
    assert normalize_url("http://example.com") == "http://example.com/"
    assert normalize_url("http://example.com:8080/x/") == "http://example.com:8080/x/"


@pytest.mark.parametrize("url", ["/relative", "mailto:a@b.c", "http://", "example.com/x"])
def test_normalize_url_rejects(url):
    with pytest.raises(ValueError):
        normalize_url(url)
    assert try_normalize(url) is None


@pytest.mark.parametrize(
    "url",
    ["https://example.com/", "https://example.com/about", "https://example.com/a/b?x=1", "https://example.com/p#frag"],
)
def test_similar_path_is_reflexive(url):
    assert is_similar_path(url, url)


def test_similar_path_ignores_host_query_and_fragment():
    assert is_similar_path("https://a.example.com/about?x=1", "http://b.example.com/about#team")
    assert not is_similar_path("https://a.example.com/about", "https://b.example.com/pricing")


def test_similar_path_anchor_needs_full_match():
    assert is_similar_path("https://example.com/#one", "https://example.com/#one")
    assert not is_similar_path("https://example.com/#one", "https://example.com/#two")
    assert not is_similar_path("https://example.com/#one", "https://example.com/")
    assert not is_similar_path("https://a.example.com/#one", "https://b.example.com/#one")


def test_similar_path_malformed_is_false():
    assert not is_similar_path("mailto:x@y.z", "https://example.com/")


def test_canonical_name_is_host_independent():
    a = canonical_name("https://prod.example.com/about?ref=nav")
    b = canonical_name("http://staging.example.com/about")
    assert a == b
    assert a.startswith("about-")


def test_canonical_name_distinguishes_paths_and_anchors():
    root = canonical_name("https://example.com/")
    assert root.startswith("root-")
    assert canonical_name("https://example.com/#section2") != root
    assert canonical_name("https://example.com/a-b") != canonical_name("https://example.com/a/b")


def test_site_key():
    assert site_key("https://example.com/pricing?plan=pro#faq") == "/pricing?plan=pro#faq"
    assert site_key("https://example.com") == "/"


def test_normalize_url_keeps_encoded_slash():
    assert normalize_url("https://example.com/a%2Fb") == "https://example.com/a%2Fb"
    assert normalize_url("https://example.com/a%2fb") == "https://example.com/a%2Fb"
    assert normalize_url("https://example.com/a%2Fb") != normalize_url("https://example.com/a/b")
    assert normalize_url("https://example.com/a b/../c") == "https://example.com/c"
    assert normalize_url("https://example.com/my page") == "https://example.com/my%20page"


def test_encoded_slash_is_a_different_page():
    assert not is_similar_path("https://a.test/a%2Fb", "https://b.test/a/b")
    assert canonical_name("https://a.test/a%2Fb") != canonical_name("https://a.test/a/b")


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://Example.com", "https://example.com/"),
        ("example.com", "http://example.com/"),
        ("a.test/about", "http://a.test/about"),
        ("localhost:8080", "http://localhost:8080/"),
        ("//cdn.example.com/x", "http://cdn.example.com/x"),
        ("  http://a.test/  ", "http://a.test/"),
    ],
)
def test_entry_url_accepts(url, expected):
    assert entry_url(url) == expected


@pytest.mark.parametrize("url", ["", "   ", "mailto:a@b.c", "javascript:void(0)", "ftp://a.test/", "http://", "http://[::1"])
def test_entry_url_rejects(url):
    with pytest.raises(ValueError):
        entry_url(url)
