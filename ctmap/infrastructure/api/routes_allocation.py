"""Allocation endpoints — ranking, manual, automatic and AI allocation."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ctmap.application.record_store import RecordStore
from ctmap.application.snapshot_codec import assignment_to_dict
from ctmap.application.use_cases.ai_allocate import AIAllocationUseCase
from ctmap.application.use_cases.allocate import AllocateAdvocatesUseCase
from ctmap.application.use_cases.lifecycle import SYSTEM_ACTOR, AssignmentLifecycle
from ctmap.application.use_cases.snapshot import SnapshotService
from ctmap.domain.policies.scoring import WEIGHT_SETS
from ctmap.domain.value_objects.enums import MatchStrategy
from ctmap.infrastructure.api.dependencies import (
    get_ai,
    get_allocator,
    get_lifecycle,
    get_snapshots,
    get_store,
)

router = APIRouter(prefix="/allocation", tags=["allocation"])

# ── Request schemas ─────────────────────────────────────────────────


class AllocateRequest(BaseModel):
    advocate_id: str
    actor_id: str
    reason: str | None = None


class AutoRequest(BaseModel):
    actor_id: str = SYSTEM_ACTOR
    strategy: MatchStrategy = MatchStrategy.PROPERTY


class BulkAutoRequest(AutoRequest):
    assignment_ids: list[str]


class AIRequest(BaseModel):
    actor_id: str = SYSTEM_ACTOR


# ── Endpoints ───────────────────────────────────────────────────────


@router.get("/workload")
async def workload(store: RecordStore = Depends(get_store)):
    """Active assignment count per advocate."""
    counts = store.workload.snapshot()
    return [
        {"advocate_id": a.id, "name": a.name, "workload": counts.get(a.id, 0)}
        for a in store.advocates()
    ]


@router.get("/assignments/{assignment_id}/ranking")
async def ranking(
    assignment_id: str,
    strategy: MatchStrategy = MatchStrategy.PROPERTY,
    weights: str = "interactive",
    allocator: AllocateAdvocatesUseCase = Depends(get_allocator),
):
    weight_set = WEIGHT_SETS.get(weights)
    if weight_set is None:
        raise HTTPException(status_code=400, detail=f"Unknown weight set {weights!r}")
    return [
        {
            "advocate_id": s.advocate.id,
            "name": s.advocate.name,
            "firm_name": s.advocate.firm_name,
            "score": s.score,
            "workload": s.workload,
        }
        for s in allocator.rank_advocates(assignment_id, strategy, weight_set)
    ]


@router.post("/assignments/{assignment_id}/allocate")
async def allocate(
    assignment_id: str,
    body: AllocateRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.allocate_advocate(
        assignment_id, body.advocate_id, body.actor_id, body.reason,
    )
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/assignments/{assignment_id}/auto")
async def auto_allocate(
    assignment_id: str,
    body: AutoRequest,
    allocator: AllocateAdvocatesUseCase = Depends(get_allocator),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    outcome = allocator.auto_allocate_assignment(assignment_id, body.actor_id, body.strategy)
    await snapshots.save()
    return asdict(outcome)


@router.post("/bulk-auto")
async def bulk_auto_allocate(
    body: BulkAutoRequest,
    allocator: AllocateAdvocatesUseCase = Depends(get_allocator),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    summary = allocator.bulk_auto_allocate(body.assignment_ids, body.actor_id, body.strategy)
    await snapshots.save()
    return asdict(summary)


@router.post("/auto-all")
async def auto_allocate_all(
    body: AutoRequest,
    allocator: AllocateAdvocatesUseCase = Depends(get_allocator),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    summary = allocator.auto_allocate_all(body.actor_id, body.strategy)
    await snapshots.save()
    return asdict(summary)


@router.post("/assignments/{assignment_id}/ai")
async def ai_allocate(
    assignment_id: str,
    body: AIRequest,
    ai: AIAllocationUseCase = Depends(get_ai),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    outcome = await ai.allocate_one(assignment_id, body.actor_id)
    await snapshots.save()
    return asdict(outcome)


@router.post("/ai-all")
async def ai_allocate_all(
    body: AIRequest,
    ai: AIAllocationUseCase = Depends(get_ai),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    summary = await ai.allocate_all(body.actor_id)
    await snapshots.save()
    return asdict(summary)
