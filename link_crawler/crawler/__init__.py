"""link_crawler.crawler: crawl engine (registry, domain policy, fetcher, scheduler)."""

from link_crawler.crawler.crawler import AsyncCrawler, CrawlStats
from link_crawler.crawler.fetcher import CrawlError, FetchError, HttpFetcher, PageFetcher
from link_crawler.crawler.link_extractor import LinkExtractor, ParseError, extract_links
from link_crawler.crawler.models import (
    SEED_REFERRER,
    Admission,
    CrawlUnit,
    Registration,
    VisitRecord,
)
from link_crawler.crawler.policy import DomainPolicy
from link_crawler.crawler.registry import VisitedRegistry

__all__ = [
    "AsyncCrawler",
    "CrawlStats",
    "CrawlError",
    "FetchError",
    "HttpFetcher",
    "PageFetcher",
    "LinkExtractor",
    "ParseError",
    "extract_links",
    "SEED_REFERRER",
    "Admission",
    "CrawlUnit",
    "Registration",
    "VisitRecord",
    "DomainPolicy",
    "VisitedRegistry",
]
