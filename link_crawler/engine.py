# File: link_crawler/engine.py
"""link_crawler.engine: runs a timed crawl and builds the report for the CLI and tests."""

from __future__ import annotations

import time
from typing import Optional

from link_crawler.aggregator import CrawlReport, build_report
from link_crawler.config import CrawlerConfig
from link_crawler.crawler.crawler import AsyncCrawler
from link_crawler.crawler.fetcher import PageFetcher
from link_crawler.crawler.link_extractor import LinkExtractor
from link_crawler.logger import logger

__all__ = ["start_crawl"]


async def start_crawl(
    config: CrawlerConfig,
    *,
    fetcher: Optional[PageFetcher] = None,
    extractor: Optional[LinkExtractor] = None,
) -> CrawlReport:
    """
    Crawl from ``config.seed_url`` and return the ordered visits with the elapsed time.

    Parameters
    ----------
    config : CrawlerConfig
        Run configuration.
    fetcher, extractor
        Optional replacements for the HTTP fetcher and the HTML link extractor.

    Returns
    -------
    CrawlReport
        Visits sorted by visit time and the wall-clock duration of the crawl.
    """
    start = time.monotonic()
    async with AsyncCrawler(config, fetcher=fetcher, extractor=extractor) as crawler:
        records = await crawler.crawl()
    elapsed = time.monotonic() - start
    logger.debug("Crawl of %s took %.3f s", config.seed_url, elapsed)
    return build_report(records, elapsed, seed_url=config.seed_url)
