"""AIAllocationUseCase — allocation driven by a remote recommender.

Per assignment:
1. Build the eligible set (under capacity, never forfeited it)
2. Send assignment + eligible advocates + workload to the recommender
3. Reject a pick outside the eligible set
4. Commit through AssignmentLifecycle, which re-checks every guard

Bulk mode runs fixed-size batches concurrently with asyncio.gather and
sleeps between batches. Each call is wrapped in async_retry, so a failing
item backs off on its own without holding up the rest of its batch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any

from ctmap.application.ports.recommender_port import RecommenderPort
from ctmap.application.record_store import RecordStore
from ctmap.application.retry import RetryConfig, Sleep, async_retry
from ctmap.application.use_cases.allocate import (
    PENDING_ONLY,
    AllocationOutcome,
    AllocationSummary,
)
from ctmap.application.use_cases.lifecycle import SYSTEM_ACTOR, AssignmentLifecycle
from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.entities.user import User
from ctmap.domain.errors import CapacityViolation, DomainError, ExternalCallError
from ctmap.domain.policies.lifecycle import ensure_status
from ctmap.domain.policies.scoring import (
    DEFAULT_CAPACITY,
    NO_ADVOCATES_AVAILABLE,
    eligible_advocates,
)
from ctmap.domain.value_objects.enums import AssignmentStatus
from ctmap.domain.value_objects.recommendation import Recommendation

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]
CANCELLED_REASON = "cancelled before dispatch"


class AIAllocationUseCase:
    def __init__(
        self,
        store: RecordStore,
        lifecycle: AssignmentLifecycle,
        recommender: RecommenderPort,
        *,
        capacity: int = DEFAULT_CAPACITY,
        batch_size: int = 5,
        batch_delay: float = 0.5,
        retry: RetryConfig | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._store = store
        self._lifecycle = lifecycle
        self._recommender = recommender
        self._capacity = capacity
        self._batch_size = batch_size
        self._batch_delay = batch_delay
        self._sleep = sleep
        self._call = async_retry(retry or RetryConfig(), sleep=sleep)(self._recommend_once)

    @property
    def is_available(self) -> bool:
        return self._recommender.is_available

    # ─── Single recommendation ──────────────────────────────────────

    def build_payload(
        self,
        assignment: Assignment,
        candidates: list[User],
    ) -> dict[str, Any]:
        workload = {a.id: self._store.workload_of(a.id) for a in candidates}
        return {
            "assignment": {
                "id": assignment.id,
                "lan": assignment.lan,
                "borrowerName": assignment.borrower_name,
                "propertyAddress": assignment.property_address,
                "state": assignment.state,
                "district": assignment.district,
                "borrowerState": assignment.borrower_state,
                "borrowerDistrict": assignment.borrower_district,
                "productType": assignment.product_type.value,
                "scope": assignment.scope.value,
                "priority": assignment.priority.value,
            },
            "advocates": [
                {
                    "id": a.id,
                    "name": a.name,
                    "firmName": a.firm_name,
                    "states": list(a.states),
                    "districts": list(a.districts),
                    "expertise": [e.value for e in a.expertise],
                    "tags": list(a.tags),
                    "hubId": a.hub_id,
                    "workload": workload[a.id],
                }
                for a in candidates
            ],
            "workload": workload,
            "capacity": self._capacity,
        }

    async def _recommend_once(
        self,
        payload: dict[str, Any],
        eligible_ids: frozenset[str],
    ) -> Recommendation:
        recommendation = await self._recommender.recommend(payload)
        if recommendation.advocate_id not in eligible_ids:
            raise ExternalCallError(
                f"Recommended advocate {recommendation.advocate_id!r} "
                "is not in the eligible set"
            )
        return recommendation

    async def recommend(
        self,
        assignment_id: str,
        exclude: Iterable[str] = (),
    ) -> Recommendation:
        """Ask the recommender, with retries, for an eligible advocate.

        Advocates who forfeited the assignment are always excluded.

        Raises:
            CapacityViolation: nobody is eligible, so no call is made.
            RetryExhausted: every attempt failed or returned an invalid pick.
        """
        if not self.is_available:
            raise ExternalCallError("Recommendation service is not configured")
        assignment = self._store.get_assignment(assignment_id)
        excluded = set(exclude) | set(assignment.previous_advocates)
        candidates = eligible_advocates(
            self._store.advocates(), self._store.workload_of,
            capacity=self._capacity, exclude=excluded,
        )
        if not candidates:
            raise CapacityViolation(NO_ADVOCATES_AVAILABLE)

        payload = self.build_payload(assignment, candidates)
        return await self._call(payload, frozenset(a.id for a in candidates))

    # ─── Allocation ─────────────────────────────────────────────────

    async def allocate_one(
        self,
        assignment_id: str,
        actor_id: str = SYSTEM_ACTOR,
    ) -> AllocationOutcome:
        """Recommend and commit for one pending assignment.

        Never raises: every failure comes back as an unsuccessful
        outcome with the reason.
        """
        try:
            ensure_status(self._store.get_assignment(assignment_id), PENDING_ONLY, "AI-allocate")
            recommendation = await self.recommend(assignment_id)
            reason = (
                f"AI recommendation (confidence {recommendation.confidence}/10): "
                f"{recommendation.reason}"
            )
            # guards re-run here: a human may have allocated it while we waited
            self._lifecycle.allocate_advocate(
                assignment_id, recommendation.advocate_id, actor_id, reason,
                from_statuses=PENDING_ONLY,
            )
        except DomainError as e:
            logger.warning("AI allocation of %s failed: %s", assignment_id, e)
            return AllocationOutcome(assignment_id=assignment_id, success=False, reason=str(e))
        except Exception as e:
            logger.exception("Unexpected error during AI allocation of %s", assignment_id)
            return AllocationOutcome(
                assignment_id=assignment_id,
                success=False,
                reason=str(e) or type(e).__name__,
            )

        return AllocationOutcome(
            assignment_id=assignment_id,
            success=True,
            reason=reason,
            advocate_id=recommendation.advocate_id,
            advocate_name=recommendation.advocate_name,
            confidence=recommendation.confidence,
            factors=list(recommendation.factors),
        )

    async def allocate_batch(
        self,
        assignment_ids: Iterable[str],
        actor_id: str = SYSTEM_ACTOR,
        *,
        on_progress: ProgressCallback | None = None,
        cancel: asyncio.Event | None = None,
    ) -> AllocationSummary:
        """Run allocate_one over *assignment_ids* in concurrent batches.

        Results keep input order whatever the completion order. The progress
        callback fires once per item as it settles. Setting *cancel* stops
        the run before the next batch; undispatched items are reported as
        failed.
        """
        ids = list(assignment_ids)
        total = len(ids)
        results: list[AllocationOutcome | None] = [None] * total
        completed = 0

        def settle(index: int, outcome: AllocationOutcome) -> None:
            nonlocal completed
            results[index] = outcome
            completed += 1
            if on_progress is not None:
                on_progress(completed, total, outcome.assignment_id)

        async def run(index: int, assignment_id: str) -> None:
            settle(index, await self.allocate_one(assignment_id, actor_id))

        for start in range(0, total, self._batch_size):
            if start > 0 and self._batch_delay > 0:
                await self._sleep(self._batch_delay)
            if cancel is not None and cancel.is_set():
                logger.info("AI allocation cancelled with %d items left", total - start)
                for index in range(start, total):
                    settle(index, AllocationOutcome(
                        assignment_id=ids[index], success=False, reason=CANCELLED_REASON,
                    ))
                break

            batch = ids[start:start + self._batch_size]
            logger.info(
                "AI allocation batch %d: %d items",
                start // self._batch_size + 1, len(batch),
            )
            await asyncio.gather(*(
                run(index, assignment_id)
                for index, assignment_id in enumerate(batch, start)
            ))

        summary = AllocationSummary.from_outcomes([r for r in results if r is not None])
        logger.info(
            "AI allocation finished: %d/%d allocated, %d failed",
            summary.successful, summary.total, summary.failed,
        )
        return summary

    async def allocate_all(
        self,
        actor_id: str = SYSTEM_ACTOR,
        *,
        on_progress: ProgressCallback | None = None,
        cancel: asyncio.Event | None = None,
    ) -> AllocationSummary:
        pending = [a.id for a in self._store.assignments(AssignmentStatus.PENDING_ALLOCATION)]
        return await self.allocate_batch(
            pending, actor_id, on_progress=on_progress, cancel=cancel,
        )
