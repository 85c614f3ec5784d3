"""Snapshot codec — domain records ⇄ plain JSON-ready dicts.

Layout of a snapshot:

    {"version": 3, "last_updated": "...",
     "assignments": [...], "users": [...], "hubs": [...]}

The same per-record mappers serialise API responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ctmap.domain.entities.assignment import Assignment, TransferRequest
from ctmap.domain.entities.document import AssignmentDocument
from ctmap.domain.entities.hub import Hub
from ctmap.domain.entities.query import Query
from ctmap.domain.entities.user import User
from ctmap.domain.errors import SnapshotError
from ctmap.domain.value_objects.audit_entry import AuditLogEntry
from ctmap.domain.value_objects.delivery import (
    DeliveryRecipient,
    ReportDelivery,
    ReportVersion,
)
from ctmap.domain.value_objects.enums import (
    AssignmentStatus,
    ForfeitReason,
    Priority,
    ProductType,
    RecipientRole,
    Scope,
    UserRole,
)
from ctmap.domain.value_objects.forfeit_details import ForfeitDetails


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


# ─── Hubs & users ──────────────────────────────────────────────────


def hub_to_dict(h: Hub) -> dict[str, Any]:
    return {
        "id": h.id,
        "code": h.code,
        "name": h.name,
        "email": h.email,
        "state": h.state,
        "district": h.district,
    }


def hub_from_dict(d: dict[str, Any]) -> Hub:
    return Hub(
        id=d["id"],
        code=d["code"],
        name=d["name"],
        email=d["email"],
        state=d["state"],
        district=d["district"],
    )


def user_to_dict(u: User) -> dict[str, Any]:
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role.value,
        "hub_id": u.hub_id,
        "firm_name": u.firm_name,
        "states": list(u.states),
        "districts": list(u.districts),
        "expertise": [e.value for e in u.expertise],
        "tags": list(u.tags),
    }


def user_from_dict(d: dict[str, Any]) -> User:
    return User(
        id=d["id"],
        name=d["name"],
        email=d["email"],
        role=UserRole(d["role"]),
        hub_id=d.get("hub_id"),
        firm_name=d.get("firm_name"),
        states=list(d.get("states") or []),
        districts=list(d.get("districts") or []),
        expertise=[ProductType(e) for e in d.get("expertise") or []],
        tags=list(d.get("tags") or []),
    )


# ─── Assignment parts ──────────────────────────────────────────────


def _document_to_dict(doc: AssignmentDocument) -> dict[str, Any]:
    return {
        "id": doc.id,
        "name": doc.name,
        "category": doc.category,
        "uploaded_by": doc.uploaded_by,
        "date": _iso(doc.date),
        "size_bytes": doc.size_bytes,
        "file_ref": doc.file_ref,
        "extracted_data": doc.extracted_data,
    }


def _document_from_dict(d: dict[str, Any]) -> AssignmentDocument:
    return AssignmentDocument(
        id=d["id"],
        name=d["name"],
        category=d["category"],
        uploaded_by=d["uploaded_by"],
        date=_dt(d["date"]),
        size_bytes=d.get("size_bytes"),
        file_ref=d.get("file_ref"),
        extracted_data=d.get("extracted_data"),
    )


def _query_to_dict(q: Query) -> dict[str, Any]:
    return {
        "id": q.id,
        "text": q.text,
        "raised_by": q.raised_by,
        "raised_at": _iso(q.raised_at),
        "attachments": list(q.attachments),
        "directed_to": q.directed_to.value if q.directed_to else None,
        "response": q.response,
        "responded_by": q.responded_by,
        "responded_at": _iso(q.responded_at),
        "response_attachments": list(q.response_attachments),
    }


def _query_from_dict(d: dict[str, Any]) -> Query:
    return Query(
        id=d["id"],
        text=d["text"],
        raised_by=d["raised_by"],
        raised_at=_dt(d["raised_at"]),
        attachments=list(d.get("attachments") or []),
        directed_to=UserRole(d["directed_to"]) if d.get("directed_to") else None,
        response=d.get("response"),
        responded_by=d.get("responded_by"),
        responded_at=_dt(d.get("responded_at")),
        response_attachments=list(d.get("response_attachments") or []),
    )


def _delivery_to_dict(rd: ReportDelivery) -> dict[str, Any]:
    return {
        "delivered_at": _iso(rd.delivered_at),
        "delivered_by": rd.delivered_by,
        "delivered_by_name": rd.delivered_by_name,
        "report_url": rd.report_url,
        "delivered_to": [
            {"name": r.name, "email": r.email, "role": r.role.value}
            for r in rd.delivered_to
        ],
    }


def _delivery_from_dict(d: dict[str, Any]) -> ReportDelivery:
    return ReportDelivery(
        delivered_at=_dt(d["delivered_at"]),
        delivered_by=d["delivered_by"],
        delivered_by_name=d["delivered_by_name"],
        report_url=d["report_url"],
        delivered_to=tuple(
            DeliveryRecipient(name=r["name"], email=r["email"], role=RecipientRole(r["role"]))
            for r in d.get("delivered_to") or []
        ),
    )


def _forfeit_to_dict(fd: ForfeitDetails) -> dict[str, Any]:
    return {
        "reason": fd.reason.value,
        "details": fd.details,
        "forfeited_by": fd.forfeited_by,
        "forfeited_by_name": fd.forfeited_by_name,
        "forfeited_at": _iso(fd.forfeited_at),
        "previous_advocate_id": fd.previous_advocate_id,
        "forfeit_count": fd.forfeit_count,
    }


def _forfeit_from_dict(d: dict[str, Any]) -> ForfeitDetails:
    return ForfeitDetails(
        reason=ForfeitReason(d["reason"]),
        details=d["details"],
        forfeited_by=d["forfeited_by"],
        forfeited_by_name=d["forfeited_by_name"],
        forfeited_at=_dt(d["forfeited_at"]),
        previous_advocate_id=d["previous_advocate_id"],
        forfeit_count=int(d["forfeit_count"]),
    )


# ─── Assignments ───────────────────────────────────────────────────


def assignment_to_dict(a: Assignment) -> dict[str, Any]:
    tr = a.transfer_request
    return {
        "id": a.id,
        "lan": a.lan,
        "pan": a.pan,
        "borrower_name": a.borrower_name,
        "property_address": a.property_address,
        "state": a.state,
        "district": a.district,
        "pincode": a.pincode,
        "borrower_state": a.borrower_state,
        "borrower_district": a.borrower_district,
        "product_type": a.product_type.value,
        "scope": a.scope.value,
        "priority": a.priority.value,
        "status": a.status.value,
        "owner_id": a.owner_id,
        "hub_id": a.hub_id,
        "advocate_id": a.advocate_id,
        "transfer_request": {
            "requested_by": tr.requested_by,
            "requested_by_name": tr.requested_by_name,
            "requested_at": _iso(tr.requested_at),
        } if tr else None,
        "created_at": _iso(a.created_at),
        "due_date": _iso(a.due_date),
        "claimed_at": _iso(a.claimed_at),
        "allocated_at": _iso(a.allocated_at),
        "completed_at": _iso(a.completed_at),
        "documents": [_document_to_dict(d) for d in a.documents],
        "queries": [_query_to_dict(q) for q in a.queries],
        "final_report_url": a.final_report_url,
        "report_versions": [
            {"url": v.url, "date": _iso(v.date), "remarks": v.remarks}
            for v in a.report_versions
        ],
        "report_delivery": _delivery_to_dict(a.report_delivery) if a.report_delivery else None,
        "audit_trail": [
            {
                "action": e.action,
                "performed_by": e.performed_by,
                "timestamp": _iso(e.timestamp),
                "details": e.details,
            }
            for e in a.audit_trail
        ],
        "forfeit_details": _forfeit_to_dict(a.forfeit_details) if a.forfeit_details else None,
        "previous_advocates": list(a.previous_advocates),
        "advocate_history": list(a.advocate_history),
    }


def assignment_from_dict(d: dict[str, Any]) -> Assignment:
    tr = d.get("transfer_request")
    return Assignment(
        id=d["id"],
        lan=d["lan"],
        pan=d["pan"],
        borrower_name=d["borrower_name"],
        property_address=d["property_address"],
        state=d["state"],
        district=d["district"],
        pincode=d.get("pincode") or "",
        borrower_state=d.get("borrower_state"),
        borrower_district=d.get("borrower_district"),
        product_type=ProductType(d["product_type"]),
        scope=Scope(d["scope"]),
        priority=Priority(d.get("priority") or Priority.STANDARD.value),
        status=AssignmentStatus(d["status"]),
        owner_id=d.get("owner_id"),
        hub_id=d.get("hub_id"),
        advocate_id=d.get("advocate_id"),
        transfer_request=TransferRequest(
            requested_by=tr["requested_by"],
            requested_by_name=tr["requested_by_name"],
            requested_at=_dt(tr["requested_at"]),
        ) if tr else None,
        created_at=_dt(d["created_at"]),
        due_date=_dt(d.get("due_date")),
        claimed_at=_dt(d.get("claimed_at")),
        allocated_at=_dt(d.get("allocated_at")),
        completed_at=_dt(d.get("completed_at")),
        documents=[_document_from_dict(x) for x in d.get("documents") or []],
        queries=[_query_from_dict(x) for x in d.get("queries") or []],
        final_report_url=d.get("final_report_url"),
        report_versions=[
            ReportVersion(url=v["url"], date=_dt(v["date"]), remarks=v.get("remarks") or "")
            for v in d.get("report_versions") or []
        ],
        report_delivery=(
            _delivery_from_dict(d["report_delivery"]) if d.get("report_delivery") else None
        ),
        audit_trail=[
            AuditLogEntry(
                action=e["action"],
                performed_by=e["performed_by"],
                timestamp=_dt(e["timestamp"]),
                details=e.get("details"),
            )
            for e in d.get("audit_trail") or []
        ],
        forfeit_details=(
            _forfeit_from_dict(d["forfeit_details"]) if d.get("forfeit_details") else None
        ),
        previous_advocates=list(d.get("previous_advocates") or []),
        advocate_history=list(d.get("advocate_history") or []),
    )


# ─── Whole snapshot ────────────────────────────────────────────────


def build_snapshot(
    assignments: list[Assignment],
    users: list[User],
    hubs: list[Hub],
    version: int,
    last_updated: datetime | None,
) -> dict[str, Any]:
    return {
        "version": version,
        "last_updated": _iso(last_updated),
        "assignments": [assignment_to_dict(a) for a in assignments],
        "users": [user_to_dict(u) for u in users],
        "hubs": [hub_to_dict(h) for h in hubs],
    }


def parse_snapshot(
    data: Any,
    version: int,
) -> tuple[list[Assignment], list[User], list[Hub]]:
    """Decode a snapshot object.

    Raises:
        SnapshotError: wrong version, or any record is malformed.
    """
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object")
    found = data.get("version")
    if found != version:
        raise SnapshotError(f"Snapshot version {found!r} does not match {version}")

    try:
        assignments = [assignment_from_dict(a) for a in _records(data, "assignments")]
        users = [user_from_dict(u) for u in _records(data, "users")]
        hubs = [hub_from_dict(h) for h in _records(data, "hubs")]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise SnapshotError(f"Malformed snapshot: {e!r}") from e
    return assignments, users, hubs


def _records(data: dict[str, Any], name: str) -> list[dict[str, Any]]:
    records = data.get(name) or []
    if not isinstance(records, list):
        raise SnapshotError(f"Snapshot field {name!r} must be a list")
    for record in records:
        if not isinstance(record, dict):
            raise SnapshotError(f"Snapshot {name} entries must be objects")
    return records
