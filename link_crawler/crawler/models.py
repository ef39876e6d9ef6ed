# link_crawler/crawler/models.py
"""
Data models for the LinkCrawler crawl engine.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

#: referrer recorded for the seed page
SEED_REFERRER = "STARTING_URL"


@dataclass(frozen=True, slots=True)
class VisitRecord:
    """One admitted page: raw URL, the page that linked to it and a monotonic timestamp."""

    url: str
    referrer: str
    visited_at: float


@dataclass(frozen=True, slots=True)
class CrawlUnit:
    """A page waiting to be processed, with the URL of the page it was found on."""

    target: str
    referrer: str = SEED_REFERRER


class Admission(enum.Enum):
    ADMITTED = "admitted"
    ALREADY_VISITED = "already_visited"
    CAP_REACHED = "cap_reached"


@dataclass(frozen=True, slots=True)
class Registration:
    """Outcome of :meth:`VisitedRegistry.try_register`."""

    outcome: Admission
    record: Optional[VisitRecord] = None

    @property
    def admitted(self) -> bool:
        return self.outcome is Admission.ADMITTED
