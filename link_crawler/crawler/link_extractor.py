# link_crawler/crawler/link_extractor.py
"""
Link extraction for LinkCrawler.

Returns the literal ``href`` values of all anchors, unresolved; relative
links are left for the caller (and, by default, the domain policy) to handle.
"""
from __future__ import annotations

from typing import List, Protocol
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from link_crawler.crawler.fetcher import CrawlError

__all__ = ("ParseError", "LinkExtractor", "extract_links", "resolve_links")


class ParseError(CrawlError):
    """The markup could not be turned into a list of links."""


class LinkExtractor(Protocol):
    def __call__(self, html: str) -> List[str]:
        ...


def extract_links(html: str) -> List[str]:
    """Return the ``href`` attribute of every ``<a href>`` in *html*, in document order."""
    if not isinstance(html, str):
        raise ParseError(f"expected markup as str, got {type(html).__name__}")
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as exc:
        raise ParseError(f"unparseable HTML: {exc}") from exc

    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if isinstance(href, str):
            links.append(href)
    return links


def resolve_links(page_url: str, links: List[str]) -> List[str]:
    """Join each link against *page_url* (opt-in, see ``resolve_relative_links``)."""
    resolved: List[str] = []
    for link in links:
        try:
            resolved.append(urljoin(page_url, link.strip()))
        except ValueError:
            resolved.append(link)
    return resolved
