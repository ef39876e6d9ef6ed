# File: tests/test_crawler.py
# Crawl engine tests: in-memory link graphs for the invariants, a local
# aiohttp server for the end-to-end path.
from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from conftest import GraphFetcher, anchors, serve_app
from link_crawler.crawler.crawler import AsyncCrawler
from link_crawler.crawler.link_extractor import ParseError, extract_links
from link_crawler.crawler.models import SEED_REFERRER, CrawlUnit
from link_crawler.utils import canonical_key

SEED = "https://a.com/"


async def run_crawler(config, fetcher, **kwargs):
    """Run the crawler with a generous upper bound so a stall fails the test."""
    async with AsyncCrawler(config, fetcher=fetcher, **kwargs) as crawler:
        records = await asyncio.wait_for(crawler.crawl(), timeout=10)
    return crawler, records


def wide_graph(width: int, depth: int) -> dict[str, list[str]]:
    """Tree rooted at SEED where every page links to *width* children."""
    graph: dict[str, list[str]] = {}
    level = [SEED]
    for d in range(depth):
        nxt = []
        for parent in level:
            children = [f"{parent.rstrip('/')}/{d}-{i}" for i in range(width)]
            graph[parent] = children
            nxt.extend(children)
        level = nxt
    for leaf in level:
        graph[leaf] = []
    return graph


# --------------------------------------------------------------------------- #
#                                 Termination                                 #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_stops_at_cap_on_large_graph(make_config):
    config = make_config(max_visits=10)
    fetcher = GraphFetcher(wide_graph(width=6, depth=3))
    crawler, records = await run_crawler(config, fetcher)

    assert len(records) == 10
    assert len(crawler.registry) == 10
    assert len(fetcher.calls) == 10


@pytest.mark.asyncio()
async def test_single_visit_without_eligible_links(make_config):
    config = make_config()
    fetcher = GraphFetcher({SEED: ["https://b.com/", "/relative", "mailto:x@a.com"]})
    _, records = await run_crawler(config, fetcher)

    assert [r.url for r in records] == [SEED]
    assert records[0].referrer == SEED_REFERRER


@pytest.mark.asyncio()
async def test_crawls_whole_graph_below_cap(make_config):
    graph = wide_graph(width=3, depth=2)
    config = make_config(max_visits=100)
    _, records = await run_crawler(config, GraphFetcher(graph))

    assert {r.url for r in records} == set(graph)


# --------------------------------------------------------------------------- #
#                              Dedup & referrers                              #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_cycles_and_url_variants_are_visited_once(make_config):
    graph = {
        SEED: ["https://a.com/x", "http://www.a.com/x/", "https://a.com/x?utm=1", "https://a.com/y"],
        "https://a.com/x": [SEED, "https://a.com/y"],
        "https://a.com/y": ["http://a.com", "https://a.com/x"],
        "http://www.a.com/x/": [],
        "https://a.com/x?utm=1": [],
    }
    config = make_config(permitted_domains=["a.com", "www.a.com"])
    fetcher = GraphFetcher(graph, delay=0.001)
    _, records = await run_crawler(config, fetcher)

    keys = [canonical_key(r.url) for r in records]
    assert sorted(keys) == ["a.com", "a.com/x", "a.com/y"]
    assert not [k for k, n in Counter(canonical_key(u) for u in fetcher.calls).items() if n > 1]


@pytest.mark.asyncio()
async def test_referrer_is_raw_parent_url(make_config):
    graph = {
        SEED: ["https://a.com/p1", "https://a.com/p2?ref=seed"],
        "https://a.com/p1": ["https://a.com/p1/c"],
        "https://a.com/p2?ref=seed": [],
        "https://a.com/p1/c": [],
    }
    _, records = await run_crawler(make_config(), GraphFetcher(graph))
    by_url = {r.url: r.referrer for r in records}

    assert by_url == {
        SEED: SEED_REFERRER,
        "https://a.com/p1": SEED,
        "https://a.com/p2?ref=seed": SEED,
        "https://a.com/p1/c": "https://a.com/p1",
    }


# --------------------------------------------------------------------------- #
#                              Failure isolation                              #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_failed_fetch_only_abandons_its_branch(make_config):
    graph = {
        SEED: ["https://a.com/1", "https://a.com/2", "https://a.com/3"],
        "https://a.com/1": [],
        "https://a.com/2": ["https://a.com/2/child"],
        "https://a.com/3": [],
        "https://a.com/2/child": [],
    }
    fetcher = GraphFetcher(graph, failing={"https://a.com/2"})
    crawler, records = await run_crawler(make_config(), fetcher)
    urls = {r.url for r in records}

    assert {"https://a.com/1", "https://a.com/3"} <= urls
    assert "https://a.com/2/child" not in urls
    assert crawler.stats.fetch_failures == 1


@pytest.mark.asyncio()
async def test_parse_error_only_abandons_its_branch(make_config):
    graph = {
        SEED: ["https://a.com/ok", "https://a.com/broken"],
        "https://a.com/ok": ["https://a.com/ok/child"],
        "https://a.com/broken": ["https://a.com/broken/child"],
        "https://a.com/ok/child": [],
        "https://a.com/broken/child": [],
    }

    def extractor(html: str) -> list[str]:
        links = extract_links(html)
        if "https://a.com/broken/child" in links:
            raise ParseError("malformed markup")
        return links

    crawler, records = await run_crawler(make_config(), GraphFetcher(graph), extractor=extractor)
    urls = {r.url for r in records}

    assert "https://a.com/ok/child" in urls
    assert "https://a.com/broken/child" not in urls
    assert crawler.stats.parse_failures == 1


@pytest.mark.asyncio()
async def test_unexpected_error_does_not_stop_the_run(make_config):
    graph = {SEED: ["https://a.com/boom", "https://a.com/fine"], "https://a.com/boom": [], "https://a.com/fine": []}

    class Exploding(GraphFetcher):
        async def fetch(self, url: str) -> str:
            if url.endswith("boom"):
                raise RuntimeError("bug in a collaborator")
            return await super().fetch(url)

    _, records = await run_crawler(make_config(), Exploding(graph))
    assert "https://a.com/fine" in {r.url for r in records}


@pytest.mark.asyncio()
async def test_each_abandoned_branch_logs_one_warning(make_config, caplog):
    graph = {
        SEED: ["https://a.com/down", "https://a.com/broken", "https://b.com/offsite"],
        "https://a.com/broken": ["https://a.com/broken/child"],
    }

    def extractor(html: str) -> list[str]:
        links = extract_links(html)
        if "https://a.com/broken/child" in links:
            raise ParseError("malformed markup")
        return links

    fetcher = GraphFetcher(graph, failing={"https://a.com/down"})
    logger = logging.getLogger("LinkCrawler")
    logger.propagate = True
    try:
        with caplog.at_level(logging.DEBUG, logger="LinkCrawler"):
            await run_crawler(make_config(), fetcher, extractor=extractor)
    finally:
        logger.propagate = False

    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert sum("https://a.com/down" in m for m in warnings) == 1
    assert sum("https://a.com/broken" in m for m in warnings) == 1
    assert not [r for r in caplog.records if r.levelno == logging.DEBUG]
    assert not [r for r in caplog.records if "b.com" in r.getMessage()]


# --------------------------------------------------------------------------- #
#                                 Concurrency                                 #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_global_worker_bound(make_config):
    config = make_config(workers=3, max_visits=40)
    fetcher = GraphFetcher(wide_graph(width=5, depth=3), delay=0.01)
    crawler, records = await run_crawler(config, fetcher)

    assert len(records) == 40
    assert fetcher.peak == 3
    assert crawler.stats.peak_in_flight <= 3


@pytest.mark.asyncio()
async def test_single_worker_fan_out_does_not_stall(make_config):
    config = make_config(workers=1, max_visits=30)
    _, records = await run_crawler(config, GraphFetcher(wide_graph(width=4, depth=3)))
    assert len(records) == 30


@pytest.mark.asyncio()
async def test_records_timestamps_follow_admission_order(make_config):
    _, records = await run_crawler(make_config(), GraphFetcher(wide_graph(width=2, depth=2)))
    stamps = [r.visited_at for r in records]
    assert stamps == sorted(stamps)
    assert records[0].url == SEED


# --------------------------------------------------------------------------- #
#                        Link handling & domain policy                        #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_relative_links_dropped_by_default(make_config):
    graph = {SEED: ["/about", "https://a.com/abs"], "https://a.com/about": [], "https://a.com/abs": []}
    _, records = await run_crawler(make_config(), GraphFetcher(graph))
    assert {r.url for r in records} == {SEED, "https://a.com/abs"}


@pytest.mark.asyncio()
async def test_relative_links_resolved_when_enabled(make_config):
    graph = {SEED: ["/about", "https://a.com/abs"], "https://a.com/about": [], "https://a.com/abs": []}
    config = make_config(resolve_relative_links=True)
    _, records = await run_crawler(config, GraphFetcher(graph))
    assert {r.url for r in records} == {SEED, "https://a.com/about", "https://a.com/abs"}


@pytest.mark.asyncio()
async def test_free_crawl_with_blacklist(make_config):
    graph = {
        SEED: ["https://b.com/", "https://c.com/"],
        "https://b.com/": [],
        "https://c.com/": [],
    }
    config = make_config(permitted_domains=[], free_crawl=True, blacklist_domains=["b.com"])
    crawler, records = await run_crawler(config, GraphFetcher(graph))

    assert {r.url for r in records} == {SEED, "https://c.com/"}
    assert crawler.stats.rejected_links == 1


@pytest.mark.asyncio()
async def test_process_returns_children_for_eligible_links(make_config):
    graph = {SEED: ["https://a.com/x", "https://b.com/y"]}
    crawler = AsyncCrawler(make_config(), fetcher=GraphFetcher(graph))
    children = await crawler.process(CrawlUnit(SEED))

    assert children == [CrawlUnit("https://a.com/x", SEED)]
    assert await crawler.process(CrawlUnit("http://www.a.com")) == []


@pytest.mark.asyncio()
async def test_crawl_requires_fetcher(make_config):
    with pytest.raises(RuntimeError):
        await AsyncCrawler(make_config()).crawl()


@pytest.mark.asyncio()
async def test_process_requires_fetcher(make_config):
    crawler = AsyncCrawler(make_config())
    with pytest.raises(RuntimeError):
        await crawler.process(CrawlUnit(SEED))
    assert len(crawler.registry) == 0
    assert crawler.stats.in_flight == 0


# --------------------------------------------------------------------------- #
#                            End-to-end over HTTP                             #
# --------------------------------------------------------------------------- #


@pytest_asyncio.fixture
async def site() -> AsyncIterator[str]:
    app = web.Application()
    base = {}

    async def root(_):
        return web.Response(
            text=anchors([f"{base['url']}/page1", f"{base['url']}/missing", "/relative"]),
            content_type="text/html",
        )

    async def page1(_):
        return web.Response(text=anchors([f"{base['url']}/page2", base["url"]]), content_type="text/html")

    async def page2(_):
        return web.Response(text="<h1>leaf</h1>", content_type="text/html")

    app.router.add_get("/", root)
    app.router.add_get("/page1", page1)
    app.router.add_get("/page2", page2)

    async for url in serve_app(app):
        base["url"] = url
        yield url


@pytest.mark.asyncio()
async def test_http_crawl(make_config, site: str):
    config = make_config(seed_url=site, permitted_domains=["127.0.0.1"], max_visits=10)
    async with AsyncCrawler(config) as crawler:
        records = await asyncio.wait_for(crawler.crawl(), timeout=10)
    urls = {r.url for r in records}

    assert urls == {site, f"{site}/page1", f"{site}/page2", f"{site}/missing"}
    assert crawler.stats.fetch_failures == 1
    assert crawler.fetcher is None
