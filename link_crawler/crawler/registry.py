# link_crawler/crawler/registry.py
"""
Shared store of visited pages.

Every public method takes the registry lock for its whole body, so a
registration (cap check, membership check, insert) is one critical section.
A :class:`threading.Lock` is used rather than an asyncio one: no method awaits
while holding it, and it keeps the registry safe for callers on other threads.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Iterator, List, Optional

from link_crawler.crawler.models import Admission, Registration, VisitRecord


class VisitedRegistry:
    """Canonical key -> :class:`VisitRecord`, capped at *max_visits* entries."""

    def __init__(self, max_visits: int, clock: Callable[[], float] = time.monotonic) -> None:
        if max_visits < 1:
            raise ValueError("max_visits must be >= 1")
        self.max_visits = max_visits
        self._clock = clock
        self._records: Dict[str, VisitRecord] = {}
        self._lock = threading.Lock()

    def try_register(self, key: str, url: str, referrer: str) -> Registration:
        """Admit *key* unless the cap is reached or it was already admitted.

        The cap is checked before membership: once full, every call reports
        ``CAP_REACHED``, including calls for keys that are already present.
        """
        with self._lock:
            if len(self._records) >= self.max_visits:
                return Registration(Admission.CAP_REACHED)
            if key in self._records:
                return Registration(Admission.ALREADY_VISITED)
            record = VisitRecord(url=url, referrer=referrer, visited_at=self._clock())
            self._records[key] = record
            return Registration(Admission.ADMITTED, record)

    def get(self, key: str) -> Optional[VisitRecord]:
        with self._lock:
            return self._records.get(key)

    def snapshot(self) -> List[VisitRecord]:
        """Copy of all records in insertion order."""
        with self._lock:
            return list(self._records.values())

    @property
    def is_full(self) -> bool:
        with self._lock:
            return len(self._records) >= self.max_visits

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._records)
