# === FILE: link_crawler/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import List, Optional

from link_crawler.config import CrawlerConfig
from link_crawler.crawler.fetcher import FetchError, HttpFetcher, PageFetcher
from link_crawler.crawler.link_extractor import (
    LinkExtractor,
    ParseError,
    extract_links,
    resolve_links,
)
from link_crawler.crawler.models import SEED_REFERRER, CrawlUnit, VisitRecord
from link_crawler.crawler.policy import DomainPolicy
from link_crawler.crawler.registry import VisitedRegistry
from link_crawler.utils import canonical_key

__all__ = ("AsyncCrawler", "CrawlStats")


@dataclass(slots=True)
class CrawlStats:
    """Counters collected while crawling; only touched from the event loop."""
    admitted: int = 0
    skipped: int = 0
    fetch_failures: int = 0
    parse_failures: int = 0
    rejected_links: int = 0
    dispatched_links: int = 0
    in_flight: int = 0
    peak_in_flight: int = 0


class AsyncCrawler:
    """Bounded-concurrency crawler.

    One work queue and exactly ``config.workers`` worker tasks serve the whole
    run. A worker processes a page, enqueues the eligible links it found and
    moves on without waiting for them; the run ends when the queue is empty
    and no page is being processed. The visited registry's cap is the only
    thing that stops the crawl from expanding.
    """

    def __init__(
        self,
        config: CrawlerConfig,
        *,
        registry: Optional[VisitedRegistry] = None,
        fetcher: Optional[PageFetcher] = None,
        extractor: Optional[LinkExtractor] = None,
        policy: Optional[DomainPolicy] = None,
    ) -> None:
        self.config = config
        self.registry = registry if registry is not None else VisitedRegistry(config.max_visits)
        self.fetcher = fetcher
        self.extractor: LinkExtractor = extractor or extract_links
        self.policy = policy or DomainPolicy(config.domain_policy, debug=config.debug)
        self.concurrency: int = config.workers
        self.stats = CrawlStats()
        self.logger = logging.getLogger("LinkCrawler")
        self._own_fetcher: Optional[HttpFetcher] = None

    async def __aenter__(self) -> AsyncCrawler:
        if self.fetcher is None:
            self._own_fetcher = HttpFetcher(
                timeout=self.config.timeout, user_agent=self.config.user_agent
            )
            self.fetcher = await self._own_fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._own_fetcher is not None:
            await self._own_fetcher.__aexit__(exc_type, exc, tb)
            self._own_fetcher = None
            self.fetcher = None

    async def crawl(self, seed: Optional[str] = None) -> List[VisitRecord]:
        """Crawl from *seed* (default: ``config.seed_url``) and return the visit records."""
        if self.fetcher is None:
            raise RuntimeError("Fetcher not initialized; use 'async with AsyncCrawler(...)'")
        seed = seed or self.config.seed_url
        self.logger.info(
            "Starting crawl: %s (cap %d, %d workers)", seed, self.registry.max_visits, self.concurrency
        )
        start = time.monotonic()
        queue: asyncio.Queue[CrawlUnit] = asyncio.Queue()
        queue.put_nowait(CrawlUnit(seed, SEED_REFERRER))
        workers = [asyncio.create_task(self._worker(queue)) for _ in range(self.concurrency)]
        try:
            await queue.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
        duration = time.monotonic() - start
        self.logger.info(
            "Finished: %d pages in %.2f s (%d fetch failures, %d parse failures)",
            len(self.registry),
            duration,
            self.stats.fetch_failures,
            self.stats.parse_failures,
        )
        return self.registry.snapshot()

    async def _worker(self, queue: asyncio.Queue[CrawlUnit]) -> None:
        while True:
            unit = await queue.get()
            try:
                for child in await self.process(unit):
                    queue.put_nowait(child)
            except Exception:
                self.logger.exception("Unexpected error while crawling %s", unit.target)
            finally:
                queue.task_done()

    async def process(self, unit: CrawlUnit) -> List[CrawlUnit]:
        """Visit one page and return the units for the eligible links it holds.

        Returns an empty list when the page is not admitted by the registry or
        when fetching or link extraction fails. Failures only end this branch.
        """
        self.stats.in_flight += 1
        self.stats.peak_in_flight = max(self.stats.peak_in_flight, self.stats.in_flight)
        try:
            return await self._process(unit)
        finally:
            self.stats.in_flight -= 1

    async def _process(self, unit: CrawlUnit) -> List[CrawlUnit]:
        if self.fetcher is None:
            raise RuntimeError("Fetcher not initialized; use 'async with AsyncCrawler(...)'")
        key = canonical_key(unit.target)
        registration = self.registry.try_register(key, unit.target, unit.referrer)
        if not registration.admitted:
            self.stats.skipped += 1
            return []
        self.stats.admitted += 1
        if self.config.live_logging:
            self.logger.info("Visiting %s", key)

        try:
            html = await self.fetcher.fetch(unit.target)
        except FetchError as exc:
            self.stats.fetch_failures += 1
            self.logger.warning("Failed to fetch HTML from %s: %s", unit.target, exc.reason)
            return []

        try:
            links = self.extractor(html)
            if inspect.isawaitable(links):
                links = await links
        except ParseError as exc:
            self.stats.parse_failures += 1
            self.logger.warning("Failed to extract links from %s: %s", unit.target, exc)
            return []

        if self.config.resolve_relative_links:
            links = resolve_links(unit.target, links)

        children: List[CrawlUnit] = []
        for link in links:
            if self.policy.is_eligible(link):
                children.append(CrawlUnit(link, unit.target))
            else:
                self.stats.rejected_links += 1
        self.stats.dispatched_links += len(children)
        return children
