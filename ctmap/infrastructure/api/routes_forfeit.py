"""Forfeit endpoints — advocate release and the re-allocation queue."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ctmap.application.snapshot_codec import assignment_to_dict
from ctmap.application.use_cases.forfeit import ForfeitProtocol
from ctmap.application.use_cases.lifecycle import SYSTEM_ACTOR
from ctmap.application.use_cases.snapshot import SnapshotService
from ctmap.domain.value_objects.enums import ForfeitReason
from ctmap.infrastructure.api.dependencies import get_forfeit, get_snapshots

router = APIRouter(prefix="/forfeits", tags=["forfeits"])

# ── Request schemas ─────────────────────────────────────────────────


class ForfeitRequest(BaseModel):
    advocate_id: str
    reason: ForfeitReason
    details: str


class ReallocateRequest(BaseModel):
    advocate_id: str
    ops_user_id: str
    notes: str | None = None


class AutoReallocateRequest(BaseModel):
    actor_id: str = SYSTEM_ACTOR


# ── Endpoints ───────────────────────────────────────────────────────


@router.get("")
async def forfeited_queue(forfeit: ForfeitProtocol = Depends(get_forfeit)):
    """FORFEITED assignments, most recent first."""
    return [assignment_to_dict(a) for a in forfeit.get_forfeited_assignments()]


@router.post("/{assignment_id}")
async def forfeit_assignment(
    assignment_id: str,
    body: ForfeitRequest,
    forfeit: ForfeitProtocol = Depends(get_forfeit),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = forfeit.forfeit_assignment(
        assignment_id, body.advocate_id, body.reason, body.details,
    )
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/reallocate")
async def reallocate(
    assignment_id: str,
    body: ReallocateRequest,
    forfeit: ForfeitProtocol = Depends(get_forfeit),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = forfeit.re_allocate_forfeited_assignment(
        assignment_id, body.advocate_id, body.ops_user_id, body.notes,
    )
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/auto-reallocate")
async def auto_reallocate(
    assignment_id: str,
    body: AutoReallocateRequest,
    forfeit: ForfeitProtocol = Depends(get_forfeit),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    outcome = forfeit.auto_re_allocate_forfeited_assignment(assignment_id, body.actor_id)
    await snapshots.save()
    return asdict(outcome)


@router.post("/{assignment_id}/ai-reallocate")
async def ai_reallocate(
    assignment_id: str,
    body: AutoReallocateRequest,
    forfeit: ForfeitProtocol = Depends(get_forfeit),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    outcome = await forfeit.ai_re_allocate_forfeited_assignment(assignment_id, body.actor_id)
    await snapshots.save()
    return asdict(outcome)
