# File: link_crawler/aggregator.py
"""link_crawler.aggregator: turns the visit records of a run into a CrawlReport."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Iterable, List, TypedDict

from link_crawler.crawler.models import VisitRecord


class VisitInfo(TypedDict):
    """One line of the report: who linked to which page."""

    referrer: str
    url: str


@dataclass(slots=True)
class CrawlReport:
    """Visits ordered by visit time, plus the wall-clock duration of the run."""

    visits: List[VisitInfo] = field(default_factory=list)
    elapsed: float = 0.0
    seed_url: str = ""

    def __len__(self) -> int:
        return len(self.visits)

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, indent=2 if pretty else None)


def build_report(
    records: Iterable[VisitRecord], elapsed: float, seed_url: str = ""
) -> CrawlReport:
    """Sort *records* by visit timestamp (stable on ties) into a CrawlReport.

    *records* is only read; callers pass a registry snapshot.
    """
    ordered = sorted(records, key=lambda r: r.visited_at)
    visits: List[VisitInfo] = [{"referrer": r.referrer, "url": r.url} for r in ordered]
    return CrawlReport(visits=visits, elapsed=elapsed, seed_url=seed_url)
