"""AllocateAdvocatesUseCase — deterministic advocate selection.

Ranking for the manual allocation screen, and top-1 automatic allocation for
one assignment, a list, or the whole pending queue. Every commit goes through
AssignmentLifecycle.allocate_advocate, so the status and capacity guards are
re-checked per item.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ctmap.application.record_store import RecordStore
from ctmap.application.use_cases.lifecycle import SYSTEM_ACTOR, AssignmentLifecycle
from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.entities.user import User
from ctmap.domain.errors import DomainError
from ctmap.domain.policies.lifecycle import ensure_status
from ctmap.domain.policies.scoring import (
    BULK,
    DEFAULT_CAPACITY,
    INTERACTIVE,
    ScoredAdvocate,
    WeightSet,
    eligible_advocates,
    in_target_state,
    pick_best,
    rank_advocates,
)
from ctmap.domain.value_objects.enums import AssignmentStatus, MatchStrategy

logger = logging.getLogger(__name__)

PENDING_ONLY = frozenset({AssignmentStatus.PENDING_ALLOCATION})


@dataclass
class AllocationOutcome:
    """Result of one automatic or AI allocation attempt."""

    assignment_id: str
    success: bool
    reason: str
    advocate_id: str | None = None
    advocate_name: str | None = None
    score: int | None = None
    confidence: int | None = None
    factors: list[str] = field(default_factory=list)


@dataclass
class AllocationSummary:
    total: int
    successful: int
    failed: int
    results: list[AllocationOutcome]

    @classmethod
    def from_outcomes(cls, outcomes: list[AllocationOutcome]) -> AllocationSummary:
        successful = sum(1 for o in outcomes if o.success)
        return cls(
            total=len(outcomes),
            successful=successful,
            failed=len(outcomes) - successful,
            results=outcomes,
        )


class AllocateAdvocatesUseCase:
    def __init__(
        self,
        store: RecordStore,
        lifecycle: AssignmentLifecycle,
        capacity: int = DEFAULT_CAPACITY,
    ):
        self._store = store
        self._lifecycle = lifecycle
        self._capacity = capacity

    def rank_advocates(
        self,
        assignment_id: str,
        strategy: MatchStrategy = MatchStrategy.PROPERTY,
        weights: WeightSet = INTERACTIVE,
    ) -> list[ScoredAdvocate]:
        """Eligible advocates in the target state, best match first."""
        assignment = self._store.get_assignment(assignment_id)
        hub = self._store.find_hub(assignment.hub_id)
        candidates = in_target_state(self.candidates(assignment), assignment, strategy, hub)
        return rank_advocates(
            assignment, candidates, strategy, self._store.workload_of,
            hub=hub,
            weights=weights,
            capacity=self._capacity,
        )

    def candidates(self, assignment: Assignment, exclude: Iterable[str] = ()) -> list[User]:
        """Advocates under capacity who never forfeited this assignment."""
        excluded = set(exclude) | set(assignment.previous_advocates)
        return eligible_advocates(
            self._store.advocates(), self._store.workload_of,
            capacity=self._capacity, exclude=excluded,
        )

    def choose(
        self,
        assignment: Assignment,
        strategy: MatchStrategy = MatchStrategy.PROPERTY,
    ) -> ScoredAdvocate:
        """Top-1 under the bulk weights; CapacityViolation if nobody is eligible."""
        return pick_best(
            assignment, self.candidates(assignment), strategy, self._store.workload_of,
            hub=self._store.find_hub(assignment.hub_id),
            weights=BULK,
            capacity=self._capacity,
        )

    def auto_allocate_assignment(
        self,
        assignment_id: str,
        actor_id: str = SYSTEM_ACTOR,
        strategy: MatchStrategy = MatchStrategy.PROPERTY,
    ) -> AllocationOutcome:
        """Allocate the best-scoring advocate to a pending assignment.

        Raises:
            NotFoundError, PreconditionViolation, CapacityViolation
        """
        assignment = self._store.get_assignment(assignment_id)
        ensure_status(assignment, PENDING_ONLY, "auto-allocate")
        best = self.choose(assignment, strategy)
        reason = (
            f"Auto-allocated: score {best.score}, "
            f"workload {best.workload}/{self._capacity}"
        )
        self._lifecycle.allocate_advocate(
            assignment_id, best.advocate.id, actor_id, reason,
            from_statuses=PENDING_ONLY,
        )
        return AllocationOutcome(
            assignment_id=assignment_id,
            success=True,
            reason=reason,
            advocate_id=best.advocate.id,
            advocate_name=best.advocate.name,
            score=best.score,
        )

    def bulk_auto_allocate(
        self,
        assignment_ids: Iterable[str],
        actor_id: str = SYSTEM_ACTOR,
        strategy: MatchStrategy = MatchStrategy.PROPERTY,
    ) -> AllocationSummary:
        """Auto-allocate each id in order; one failure never stops the rest."""
        outcomes = []
        for assignment_id in assignment_ids:
            try:
                outcomes.append(
                    self.auto_allocate_assignment(assignment_id, actor_id, strategy)
                )
            except DomainError as e:
                logger.warning("Auto-allocation of %s failed: %s", assignment_id, e)
                outcomes.append(AllocationOutcome(
                    assignment_id=assignment_id, success=False, reason=str(e),
                ))

        summary = AllocationSummary.from_outcomes(outcomes)
        logger.info(
            "Auto-allocation finished: %d/%d allocated",
            summary.successful, summary.total,
        )
        return summary

    def auto_allocate_all(
        self,
        actor_id: str = SYSTEM_ACTOR,
        strategy: MatchStrategy = MatchStrategy.PROPERTY,
    ) -> AllocationSummary:
        pending = [a.id for a in self._store.assignments(AssignmentStatus.PENDING_ALLOCATION)]
        return self.bulk_auto_allocate(pending, actor_id, strategy)

