"""WorkloadCache — advocate id → number of assignments occupying their capacity.

Derived index over the record store. Scoring asks for the workload of every
candidate on every pass; rebuilding once per mutation and answering lookups
from a dict keeps that linear in the number of assignments.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable

from ctmap.domain.entities.assignment import Assignment

logger = logging.getLogger(__name__)


class WorkloadCache:
    """Lazily rebuilt workload counts.

    `invalidate()` only flips a flag; the next read does one pass over
    `source()`. Rebuilding has no side effects, so a spurious rebuild is
    harmless.
    """

    def __init__(self, source: Callable[[], Iterable[Assignment]]):
        self._source = source
        self._counts: Counter[str] = Counter()
        self._stale = True
        self.rebuilds = 0

    @property
    def is_stale(self) -> bool:
        return self._stale

    def invalidate(self) -> None:
        self._stale = True

    def get(self, advocate_id: str) -> int:
        self._ensure_fresh()
        return self._counts.get(advocate_id, 0)

    def snapshot(self) -> dict[str, int]:
        self._ensure_fresh()
        return dict(self._counts)

    def _ensure_fresh(self) -> None:
        if self._stale:
            self._rebuild()

    def _rebuild(self) -> None:
        counts: Counter[str] = Counter()
        for assignment in self._source():
            if assignment.occupies_capacity():
                counts[assignment.advocate_id] += 1
        self._counts = counts
        self._stale = False
        self.rebuilds += 1
        logger.debug("Workload cache rebuilt: %d busy advocates", len(counts))
