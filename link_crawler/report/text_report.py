"""Plain-text rendering of a CrawlReport, in the order pages were visited."""

from __future__ import annotations

from link_crawler.aggregator import CrawlReport


def render_text(report: CrawlReport) -> str:
    """Return the ``referrer -> url`` listing followed by the elapsed time."""
    lines = ["Visited URLs:"]
    lines.extend(f"{visit['referrer']} -> {visit['url']}" for visit in report.visits)
    lines.append(f"Time elapsed in crawl: {report.elapsed:.3f}s")
    return "\n".join(lines)
