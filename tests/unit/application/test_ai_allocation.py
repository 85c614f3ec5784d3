"""Tests for AIAllocationUseCase with a fake recommender and a recording sleep."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from ctmap.application.ports.recommender_port import RecommenderPort
from ctmap.application.record_store import RecordStore
from ctmap.application.retry import RetryConfig
from ctmap.application.use_cases.ai_allocate import CANCELLED_REASON, AIAllocationUseCase
from ctmap.application.use_cases.allocate import AllocateAdvocatesUseCase
from ctmap.application.use_cases.forfeit import ForfeitProtocol
from ctmap.application.use_cases.lifecycle import AssignmentLifecycle
from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.entities.user import User
from ctmap.domain.errors import ExternalCallError
from ctmap.domain.value_objects.enums import (
    AssignmentStatus,
    ForfeitReason,
    ProductType,
    Scope,
    UserRole,
)
from ctmap.domain.value_objects.recommendation import Recommendation

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)

# ─── Fakes ──────────────────────────────────────────────────────────


class FakeRecommender(RecommenderPort):
    """Round-robins over the advocates it is offered.

    Assignments in *failing* always raise; those in *flaky* raise on their
    first call only.
    """

    def __init__(self, failing=(), flaky=(), pick=None, available=True):
        self.failing = set(failing)
        self.flaky = set(flaky)
        self.pick = pick
        self.available = available
        self.calls: list[dict] = []
        self._turn = 0

    @property
    def is_available(self) -> bool:
        return self.available

    async def recommend(self, payload):
        self.calls.append(payload)
        assignment_id = payload["assignment"]["id"]
        await asyncio.sleep(0)
        if assignment_id in self.failing:
            raise ExternalCallError(f"upstream 503 for {assignment_id}")
        if assignment_id in self.flaky:
            self.flaky.discard(assignment_id)
            raise ExternalCallError("timeout")

        if self.pick is not None:
            advocate_id = self.pick
        else:
            advocates = payload["advocates"]
            advocate_id = advocates[self._turn % len(advocates)]["id"]
            self._turn += 1
        return Recommendation(
            advocate_id=advocate_id,
            advocate_name=advocate_id.upper(),
            confidence=8,
            reason="Location and expertise match",
            factors=("District match",),
        )


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# ─── Builders ───────────────────────────────────────────────────────


def _pending(n: int) -> list[Assignment]:
    return [
        Assignment(
            id=f"a{i:02d}", lan=f"LN{i}", pan=f"PAN{i}", borrower_name=f"B{i}",
            property_address="P", state="Karnataka", district="Bangalore",
            product_type=ProductType.HL, scope=Scope.TSR, created_at=NOW,
            status=AssignmentStatus.PENDING_ALLOCATION, owner_id="u1",
        )
        for i in range(1, n + 1)
    ]


def _advocates(n: int) -> list[User]:
    return [
        User(
            id=f"adv{i}", name=f"Advocate {i}", email=f"adv{i}@x", role=UserRole.ADVOCATE,
            states=["Karnataka"], districts=["Bangalore"], expertise=[ProductType.HL],
        )
        for i in range(1, n + 1)
    ]


def _make_use_case(store, recommender, sleep=None, **kwargs) -> AIAllocationUseCase:
    return AIAllocationUseCase(
        store, AssignmentLifecycle(store), recommender,
        sleep=sleep or RecordingSleep(),
        **kwargs,
    )


# ─── Bulk ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_bulk_twelve_items_one_failure_per_batch():
    store = RecordStore(_pending(12), _advocates(4))
    recommender = FakeRecommender(failing={"a01", "a06", "a11"})
    sleep = RecordingSleep()
    progress = []
    ai = _make_use_case(
        store, recommender, sleep,
        batch_size=5, batch_delay=0.5, retry=RetryConfig(max_attempts=3),
    )

    summary = await ai.allocate_all(on_progress=lambda done, total, aid: progress.append((done, total)))

    assert summary.total == 12
    assert summary.successful == 9
    assert summary.failed == 3
    assert [r.assignment_id for r in summary.results] == [f"a{i:02d}" for i in range(1, 13)]
    failed = [r for r in summary.results if not r.success]
    assert [r.assignment_id for r in failed] == ["a01", "a06", "a11"]
    assert all(r.reason for r in failed)
    assert all("gave up after 3 attempts" in r.reason for r in failed)

    assert len(progress) == 12
    assert progress[-1] == (12, 12)
    # three calls for each failing item, one for the rest
    assert len(recommender.calls) == 3 * 3 + 9
    # two pauses between three batches, backoff 1s then 2s per failing item
    assert sorted(sleep.delays) == sorted([0.5, 0.5] + [1.0, 2.0] * 3)

    assert len(store.assignments(AssignmentStatus.ALLOCATED)) == 9
    assert sum(store.workload.snapshot().values()) == 9


@pytest.mark.asyncio
async def test_transient_failure_is_retried():
    store = RecordStore(_pending(1), _advocates(2))
    sleep = RecordingSleep()
    ai = _make_use_case(store, FakeRecommender(flaky={"a01"}), sleep)

    outcome = await ai.allocate_one("a01")

    assert outcome.success
    assert outcome.confidence == 8
    assert outcome.factors == ["District match"]
    assert sleep.delays == [1.0]


@pytest.mark.asyncio
async def test_pick_outside_eligible_set_fails():
    store = RecordStore(_pending(1), _advocates(2))
    ai = _make_use_case(store, FakeRecommender(pick="ghost"))

    outcome = await ai.allocate_one("a01")

    assert not outcome.success
    assert "not in the eligible set" in outcome.reason
    assert store.get_assignment("a01").status == AssignmentStatus.PENDING_ALLOCATION


@pytest.mark.asyncio
async def test_unexpected_error_fails_only_its_item():
    class TimingOutRecommender(FakeRecommender):
        async def recommend(self, payload):
            if payload["assignment"]["id"] == "a02":
                raise asyncio.TimeoutError("upstream timed out")
            return await super().recommend(payload)

    store = RecordStore(_pending(6), _advocates(3))
    progress = []
    ai = _make_use_case(store, TimingOutRecommender(), batch_size=5)

    summary = await ai.allocate_all(on_progress=lambda done, total, aid: progress.append(aid))

    assert summary.total == 6
    assert summary.successful == 5
    assert summary.failed == 1
    failed = summary.results[1]
    assert failed.assignment_id == "a02"
    assert failed.reason == "upstream timed out"
    assert store.get_assignment("a02").status == AssignmentStatus.PENDING_ALLOCATION
    assert len(progress) == 6


@pytest.mark.asyncio
async def test_full_advocates_are_not_offered():
    store = RecordStore(_pending(3), _advocates(2))
    recommender = FakeRecommender()
    ai = _make_use_case(store, recommender, capacity=1, batch_size=1)

    summary = await ai.allocate_all()

    assert summary.successful == 2
    assert summary.results[2].reason == "no advocates available"
    # the third item never reaches the recommender
    assert len(recommender.calls) == 2


@pytest.mark.asyncio
async def test_concurrent_commits_recheck_capacity():
    """Items of one batch see the same eligible set; the commit guard decides."""
    store = RecordStore(_pending(3), _advocates(2))
    recommender = FakeRecommender()
    ai = _make_use_case(store, recommender, capacity=1, batch_size=5)

    summary = await ai.allocate_all()

    assert len(recommender.calls) == 3
    assert summary.successful == 2
    assert "at capacity" in summary.results[2].reason
    assert store.workload.snapshot() == {"adv1": 1, "adv2": 1}


@pytest.mark.asyncio
async def test_cancel_stops_before_next_batch():
    store = RecordStore(_pending(12), _advocates(4))
    cancel = asyncio.Event()
    progress = []

    def on_progress(done, total, _aid):
        progress.append(done)
        if done == 5:
            cancel.set()

    ai = _make_use_case(store, FakeRecommender(), batch_size=5)
    summary = await ai.allocate_batch(
        [a.id for a in store.assignments()], on_progress=on_progress, cancel=cancel,
    )

    assert summary.successful == 5
    assert summary.failed == 7
    assert all(r.reason == CANCELLED_REASON for r in summary.results[5:])
    assert progress == list(range(1, 13))


@pytest.mark.asyncio
async def test_unavailable_recommender():
    store = RecordStore(_pending(1), _advocates(1))
    recommender = FakeRecommender(available=False)
    ai = _make_use_case(store, recommender)

    outcome = await ai.allocate_one("a01")

    assert not outcome.success
    assert "not configured" in outcome.reason
    assert recommender.calls == []


@pytest.mark.asyncio
async def test_non_pending_assignment_is_skipped():
    store = RecordStore(_pending(1), _advocates(1))
    store.get_assignment("a01").status = AssignmentStatus.DRAFT
    recommender = FakeRecommender()

    outcome = await _make_use_case(store, recommender).allocate_one("a01")

    assert not outcome.success
    assert recommender.calls == []


@pytest.mark.asyncio
async def test_manual_allocation_while_waiting_wins():
    store = RecordStore(_pending(1), _advocates(2))
    lifecycle = AssignmentLifecycle(store)

    class SlowRecommender(FakeRecommender):
        async def recommend(self, payload):
            # an ops user allocates by hand before the reply arrives
            lifecycle.allocate_advocate("a01", "adv2", "ops1")
            return await super().recommend(payload)

    ai = AIAllocationUseCase(store, lifecycle, SlowRecommender(pick="adv1"), sleep=RecordingSleep())
    outcome = await ai.allocate_one("a01")

    assert not outcome.success
    assert store.get_assignment("a01").advocate_id == "adv2"


@pytest.mark.asyncio
async def test_payload_shape():
    store = RecordStore(_pending(1), _advocates(2))
    recommender = FakeRecommender()
    await _make_use_case(store, recommender).allocate_one("a01")

    payload = recommender.calls[0]
    assert payload["assignment"]["productType"] == "Home Loan"
    assert [a["id"] for a in payload["advocates"]] == ["adv1", "adv2"]
    assert payload["workload"] == {"adv1": 0, "adv2": 0}
    assert payload["capacity"] == 5


def test_batch_size_must_be_positive():
    with pytest.raises(ValueError):
        _make_use_case(RecordStore(), FakeRecommender(), batch_size=0)


# ─── Forfeit re-allocation via AI ───────────────────────────────────


@pytest.mark.asyncio
async def test_ai_reallocation_never_offers_forfeiter():
    store = RecordStore(_pending(1), _advocates(2))
    lifecycle = AssignmentLifecycle(store)
    recommender = FakeRecommender()
    ai = AIAllocationUseCase(store, lifecycle, recommender, sleep=RecordingSleep())
    protocol = ForfeitProtocol(store, lifecycle, AllocateAdvocatesUseCase(store, lifecycle), ai)

    lifecycle.allocate_advocate("a01", "adv1", "ops1")
    protocol.forfeit_assignment("a01", "adv1", ForfeitReason.TOO_COMPLEX, "Title chain beyond my expertise")
    outcome = await protocol.ai_re_allocate_forfeited_assignment("a01")

    assert outcome.success
    assert outcome.advocate_id == "adv2"
    offered = [a["id"] for a in recommender.calls[-1]["advocates"]]
    assert offered == ["adv2"]
    a = store.get_assignment("a01")
    assert a.audit_trail[-1].action == "REALLOCATED_AFTER_FORFEIT"


@pytest.mark.asyncio
async def test_ai_reallocation_rejects_forfeiter_pick():
    store = RecordStore(_pending(1), _advocates(2))
    lifecycle = AssignmentLifecycle(store)
    ai = AIAllocationUseCase(store, lifecycle, FakeRecommender(pick="adv1"), sleep=RecordingSleep())
    protocol = ForfeitProtocol(store, lifecycle, AllocateAdvocatesUseCase(store, lifecycle), ai)

    lifecycle.allocate_advocate("a01", "adv1", "ops1")
    protocol.forfeit_assignment("a01", "adv1", ForfeitReason.TOO_COMPLEX, "Title chain beyond my expertise")
    outcome = await protocol.ai_re_allocate_forfeited_assignment("a01")

    assert not outcome.success
    assert store.get_assignment("a01").status == AssignmentStatus.FORFEITED
