"""ForfeitProtocol — an advocate releases an assignment, ops re-allocates it.

Every advocate who has forfeited an assignment lands in its
`previous_advocates` list for good; manual, automatic and AI re-allocation
all refuse them.
"""

from __future__ import annotations

import logging

from ctmap.application.record_store import RecordStore
from ctmap.application.use_cases.ai_allocate import AIAllocationUseCase
from ctmap.application.use_cases.allocate import AllocateAdvocatesUseCase, AllocationOutcome
from ctmap.application.use_cases.lifecycle import SYSTEM_ACTOR, AssignmentLifecycle
from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.errors import DomainError, ExternalCallError, PreconditionViolation
from ctmap.domain.policies.lifecycle import (
    FORFEITABLE,
    ensure_holder,
    ensure_not_forfeiter,
    ensure_status,
)
from ctmap.domain.value_objects.enums import AssignmentStatus, ForfeitReason
from ctmap.domain.value_objects.forfeit_details import ForfeitDetails

logger = logging.getLogger(__name__)

FORFEITED_ONLY = frozenset({AssignmentStatus.FORFEITED})
DEFAULT_MIN_DETAILS = 20
DEFAULT_ALERT_THRESHOLD = 2


class ForfeitProtocol:
    def __init__(
        self,
        store: RecordStore,
        lifecycle: AssignmentLifecycle,
        allocator: AllocateAdvocatesUseCase,
        ai: AIAllocationUseCase | None = None,
        *,
        min_details: int = DEFAULT_MIN_DETAILS,
        alert_threshold: int = DEFAULT_ALERT_THRESHOLD,
    ):
        self._store = store
        self._lifecycle = lifecycle
        self._allocator = allocator
        self._ai = ai
        self._min_details = min_details
        self._alert_threshold = alert_threshold

    def forfeit_assignment(
        self,
        assignment_id: str,
        advocate_id: str,
        reason: ForfeitReason,
        details: str,
    ) -> Assignment:
        """Release the assignment held by *advocate_id*.

        Requires an explanation of at least `min_details` characters.
        """
        assignment = self._store.get_assignment(assignment_id)
        advocate = self._store.get_advocate(advocate_id)
        ensure_status(assignment, FORFEITABLE, "forfeit")
        ensure_holder(assignment, advocate_id, "forfeit")
        details = (details or "").strip()
        if len(details) < self._min_details:
            raise PreconditionViolation(
                f"Forfeit details must be at least {self._min_details} characters"
            )

        now = self._store.now()
        previous_count = assignment.forfeit_details.forfeit_count if assignment.forfeit_details else 0
        assignment.forfeit_details = ForfeitDetails(
            reason=reason,
            details=details,
            forfeited_by=advocate.id,
            forfeited_by_name=advocate.name,
            forfeited_at=now,
            previous_advocate_id=advocate.id,
            forfeit_count=previous_count + 1,
        )
        assignment.status = AssignmentStatus.FORFEITED
        assignment.advocate_id = None
        assignment.allocated_at = None
        if advocate.id not in assignment.previous_advocates:
            assignment.previous_advocates.append(advocate.id)
        assignment.log("FORFEITED", advocate.id, now, f"Reason: {reason.value}. {details}")
        self._store.save_assignment(assignment)

        count = assignment.forfeit_details.forfeit_count
        if count > self._alert_threshold:
            logger.warning(
                "Assignment %s forfeited %d times, needs ops attention", assignment_id, count,
            )
        else:
            logger.info("Assignment %s forfeited by %s", assignment_id, advocate.name)
        return assignment

    def re_allocate_forfeited_assignment(
        self,
        assignment_id: str,
        advocate_id: str,
        ops_user_id: str,
        notes: str | None = None,
    ) -> Assignment:
        """Hand a forfeited assignment to a new advocate with a fresh due date."""
        assignment = self._store.get_assignment(assignment_id)
        advocate = self._store.get_advocate(advocate_id)
        if ops_user_id != SYSTEM_ACTOR:
            self._store.get_user(ops_user_id)
        ensure_status(assignment, FORFEITED_ONLY, "re-allocate")
        ensure_not_forfeiter(assignment, advocate_id)
        self._lifecycle.ensure_capacity(advocate)

        forfeit = assignment.forfeit_details
        superseded = forfeit.forfeited_by_name if forfeit else "unknown advocate"
        details = f"Re-allocated to {advocate.name} after forfeit by {superseded}"
        if notes:
            details += f". Notes: {notes}"

        return self._lifecycle.commit_allocation(
            assignment, advocate,
            actor_id=ops_user_id,
            action="REALLOCATED_AFTER_FORFEIT",
            details=details,
            reset_due_date=True,
        )

    def auto_re_allocate_forfeited_assignment(
        self,
        assignment_id: str,
        actor_id: str = SYSTEM_ACTOR,
    ) -> AllocationOutcome:
        """Best-scoring eligible advocate, previous forfeiters excluded before scoring."""
        try:
            assignment = self._store.get_assignment(assignment_id)
            ensure_status(assignment, FORFEITED_ONLY, "re-allocate")
            best = self._allocator.choose(assignment)
            notes = f"Auto re-allocation, score {best.score}"
            self.re_allocate_forfeited_assignment(assignment_id, best.advocate.id, actor_id, notes)
        except DomainError as e:
            logger.warning("Auto re-allocation of %s failed: %s", assignment_id, e)
            return AllocationOutcome(assignment_id=assignment_id, success=False, reason=str(e))

        return AllocationOutcome(
            assignment_id=assignment_id,
            success=True,
            reason=notes,
            advocate_id=best.advocate.id,
            advocate_name=best.advocate.name,
            score=best.score,
        )

    async def ai_re_allocate_forfeited_assignment(
        self,
        assignment_id: str,
        actor_id: str = SYSTEM_ACTOR,
    ) -> AllocationOutcome:
        """Re-allocate through the recommender; the pick is re-checked against forfeiters."""
        try:
            if self._ai is None:
                raise ExternalCallError("Recommendation service is not configured")
            assignment = self._store.get_assignment(assignment_id)
            ensure_status(assignment, FORFEITED_ONLY, "re-allocate")
            recommendation = await self._ai.recommend(
                assignment_id, exclude=assignment.previous_advocates,
            )
            notes = (
                f"AI re-allocation (confidence {recommendation.confidence}/10): "
                f"{recommendation.reason}"
            )
            self.re_allocate_forfeited_assignment(assignment_id, recommendation.advocate_id, actor_id, notes)
        except DomainError as e:
            logger.warning("AI re-allocation of %s failed: %s", assignment_id, e)
            return AllocationOutcome(assignment_id=assignment_id, success=False, reason=str(e))

        return AllocationOutcome(
            assignment_id=assignment_id,
            success=True,
            reason=notes,
            advocate_id=recommendation.advocate_id,
            advocate_name=recommendation.advocate_name,
            confidence=recommendation.confidence,
            factors=list(recommendation.factors),
        )

    def get_forfeited_assignments(self) -> list[Assignment]:
        """FORFEITED assignments, most recent forfeit first."""
        forfeited = self._store.assignments(AssignmentStatus.FORFEITED)
        return sorted(
            forfeited,
            key=lambda a: a.forfeit_details.forfeited_at if a.forfeit_details else a.created_at,
            reverse=True,
        )

