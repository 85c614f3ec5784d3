"""Assignment endpoints — lifecycle transitions and ownership transfer.

Every mutating call names the acting user in its body and returns the full
updated assignment. The store snapshot is persisted after each change.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ctmap.application.record_store import RecordStore
from ctmap.application.snapshot_codec import assignment_to_dict
from ctmap.application.use_cases.lifecycle import AssignmentLifecycle
from ctmap.application.use_cases.snapshot import SnapshotService
from ctmap.application.use_cases.transfer import TransferProtocol
from ctmap.domain.entities.document import DocumentUpload
from ctmap.domain.value_objects.enums import AssignmentStatus, UserRole
from ctmap.infrastructure.api.dependencies import (
    get_lifecycle,
    get_snapshots,
    get_store,
    get_transfer,
)

router = APIRouter(prefix="/assignments", tags=["assignments"])

# ── Request schemas ─────────────────────────────────────────────────


class ActorRequest(BaseModel):
    user_id: str


class DocumentIn(BaseModel):
    name: str
    category: str
    size_bytes: int | None = None
    file_ref: str | None = None


class UploadRequest(BaseModel):
    user_id: str
    documents: list[DocumentIn] = Field(min_length=1)


class ExtractedDataRequest(BaseModel):
    data: dict[str, Any]


class StartWorkRequest(BaseModel):
    advocate_id: str


class RaiseQueryRequest(BaseModel):
    user_id: str
    text: str
    attachments: list[str] = []
    directed_to: UserRole | None = None


class RespondRequest(BaseModel):
    user_id: str
    response: str
    attachments: list[str] = []


class ReworkRequest(BaseModel):
    user_id: str
    text: str


class SubmitReportRequest(BaseModel):
    advocate_id: str
    report_url: str
    remarks: str = ""


class ApproveRequest(BaseModel):
    approver_id: str


class TransferRequestIn(BaseModel):
    requester_id: str


class ResolveTransferRequest(BaseModel):
    actor_id: str
    approved: bool


# ── Queries ─────────────────────────────────────────────────────────


@router.get("")
async def list_assignments(
    status: AssignmentStatus | None = None,
    store: RecordStore = Depends(get_store),
):
    assignments = store.assignments(status)
    return {
        "total": len(assignments),
        "assignments": [assignment_to_dict(a) for a in assignments],
    }


@router.get("/search")
async def search_assignments(q: str = "", store: RecordStore = Depends(get_store)):
    """Exact LAN / PAN or borrower-name substring, across all owners."""
    return [assignment_to_dict(a) for a in store.search_assignments(q)]


@router.get("/{assignment_id}")
async def get_assignment(assignment_id: str, store: RecordStore = Depends(get_store)):
    return assignment_to_dict(store.get_assignment(assignment_id))


# ── Lifecycle ───────────────────────────────────────────────────────


@router.post("/{assignment_id}/claim")
async def claim(
    assignment_id: str,
    body: ActorRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.claim(assignment_id, body.user_id)
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/documents")
async def upload_documents(
    assignment_id: str,
    body: UploadRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    uploads = [DocumentUpload(**d.model_dump()) for d in body.documents]
    assignment = lifecycle.upload_documents(assignment_id, uploads, body.user_id)
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.put("/{assignment_id}/documents/{document_id}/extracted-data")
async def save_extracted_data(
    assignment_id: str,
    document_id: str,
    body: ExtractedDataRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.save_extracted_data(assignment_id, document_id, body.data)
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/submit")
async def submit_for_allocation(
    assignment_id: str,
    body: ActorRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.submit_for_allocation(assignment_id, body.user_id)
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/start")
async def start_work(
    assignment_id: str,
    body: StartWorkRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.start_work(assignment_id, body.advocate_id)
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/queries")
async def raise_query(
    assignment_id: str,
    body: RaiseQueryRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.raise_query(
        assignment_id, body.text, body.user_id,
        attachments=body.attachments, directed_to=body.directed_to,
    )
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/queries/{query_id}/response")
async def respond_to_query(
    assignment_id: str,
    query_id: str,
    body: RespondRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.respond_to_query(
        assignment_id, query_id, body.response, body.user_id, attachments=body.attachments,
    )
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/rework")
async def request_rework(
    assignment_id: str,
    body: ReworkRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.request_rework(assignment_id, body.user_id, body.text)
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/report")
async def submit_report(
    assignment_id: str,
    body: SubmitReportRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.submit_report(
        assignment_id, body.advocate_id, body.report_url, body.remarks,
    )
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/approve")
async def approve_report(
    assignment_id: str,
    body: ApproveRequest,
    lifecycle: AssignmentLifecycle = Depends(get_lifecycle),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = lifecycle.approve_report(assignment_id, body.approver_id)
    await snapshots.save()
    return assignment_to_dict(assignment)


# ── Transfer ────────────────────────────────────────────────────────


@router.post("/{assignment_id}/transfer-request")
async def request_transfer(
    assignment_id: str,
    body: TransferRequestIn,
    transfer: TransferProtocol = Depends(get_transfer),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = transfer.request_transfer(assignment_id, body.requester_id)
    await snapshots.save()
    return assignment_to_dict(assignment)


@router.post("/{assignment_id}/transfer-request/resolve")
async def resolve_transfer_request(
    assignment_id: str,
    body: ResolveTransferRequest,
    transfer: TransferProtocol = Depends(get_transfer),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    assignment = transfer.resolve_transfer_request(assignment_id, body.approved, body.actor_id)
    await snapshots.save()
    return assignment_to_dict(assignment)
