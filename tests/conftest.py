# File: tests/conftest.py
from __future__ import annotations

import asyncio
import html
from collections.abc import AsyncIterator
from typing import Dict, Iterable, List

import pytest
from aiohttp import web

from link_crawler.config import CrawlerConfig
from link_crawler.crawler.fetcher import FetchError


def anchors(links: Iterable[str]) -> str:
    """Build a page whose body is one <a> per link."""
    body = "".join(f'<a href="{html.escape(link, quote=True)}">{i}</a>' for i, link in enumerate(links))
    return f"<html><body>{body}</body></html>"


class GraphFetcher:
    """In-memory PageFetcher serving pages from a link graph.

    URLs missing from the graph, or listed in *failing*, raise FetchError.
    Tracks how many fetches run at the same time.
    """

    def __init__(
        self,
        graph: Dict[str, List[str]],
        *,
        failing: Iterable[str] = (),
        delay: float = 0.0,
    ) -> None:
        self.graph = graph
        self.failing = set(failing)
        self.delay = delay
        self.calls: List[str] = []
        self.active = 0
        self.peak = 0

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            if url in self.failing or url not in self.graph:
                raise FetchError(url, "HTTP 404", status=404)
            return anchors(self.graph[url])
        finally:
            self.active -= 1


@pytest.fixture()
def make_config():
    """Factory for CrawlerConfig with test-friendly defaults."""

    def _make(**overrides) -> CrawlerConfig:
        data = {
            "seed_url": "https://a.com/",
            "permitted_domains": ["a.com"],
            "max_visits": 25,
            "workers": 3,
            "timeout": 2.0,
            "user_agent": "TestAgent/1.0",
        }
        data.update(overrides)
        return CrawlerConfig(**data)

    return _make


async def serve_app(app: web.Application) -> AsyncIterator[str]:
    """Start *app* on a free local port, yield its base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()
