# link_crawler/crawler/fetcher.py
"""
Fetcher module: retrieves page HTML over HTTP with a per-request timeout.

Failures of any kind (transport, timeout, HTTP status, non-text body) are
reported as :class:`FetchError`. Nothing is retried.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol, runtime_checkable

from aiohttp import ClientError, ClientSession, ClientTimeout

__all__ = ("CrawlError", "FetchError", "PageFetcher", "HttpFetcher")

_TEXT_TYPES = ("text/", "application/xhtml+xml", "application/xml")


class CrawlError(Exception):
    """Base class for errors that abandon a single crawl branch."""


class FetchError(CrawlError):
    """The page at *url* could not be retrieved."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


@runtime_checkable
class PageFetcher(Protocol):
    async def fetch(self, url: str) -> str:
        """Return the body of *url* or raise :class:`FetchError`."""
        ...


class HttpFetcher:
    """aiohttp-backed :class:`PageFetcher`; use as an async context manager."""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = "LinkCrawler/0.1",
        session: Optional[ClientSession] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> HttpFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.timeout),
                headers={"User-Agent": self.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> str:
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url) as resp:
                if resp.status >= 400:
                    raise FetchError(url, f"HTTP {resp.status}", status=resp.status)
                ctype = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                if ctype and not ctype.startswith(_TEXT_TYPES):
                    raise FetchError(url, f"non-text response ({ctype})", status=resp.status)
                return await resp.text(errors="replace")
        except asyncio.TimeoutError as exc:
            raise FetchError(url, "timed out") from exc
        except (ClientError, ValueError, UnicodeDecodeError) as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc
