"""Assignment entity — one due-diligence case tied to a loan and a property."""

from dataclasses import dataclass, field
from datetime import datetime

from ctmap.domain.entities.document import AssignmentDocument
from ctmap.domain.entities.query import Query
from ctmap.domain.value_objects.audit_entry import AuditLogEntry
from ctmap.domain.value_objects.delivery import ReportDelivery, ReportVersion
from ctmap.domain.value_objects.enums import (
    AssignmentStatus,
    Priority,
    ProductType,
    Scope,
)
from ctmap.domain.value_objects.forfeit_details import ForfeitDetails

# Statuses in which an advocate's capacity is taken by the assignment
WORKLOAD_STATUSES = frozenset({
    AssignmentStatus.ALLOCATED,
    AssignmentStatus.IN_PROGRESS,
    AssignmentStatus.QUERY_RAISED,
})


@dataclass(frozen=True)
class TransferRequest:
    requested_by: str
    requested_by_name: str
    requested_at: datetime


@dataclass
class Assignment:
    id: str
    lan: str
    pan: str
    borrower_name: str
    property_address: str
    state: str
    district: str
    product_type: ProductType
    scope: Scope
    created_at: datetime
    pincode: str = ""
    borrower_state: str | None = None
    borrower_district: str | None = None
    priority: Priority = Priority.STANDARD
    status: AssignmentStatus = AssignmentStatus.UNCLAIMED

    owner_id: str | None = None
    hub_id: str | None = None
    advocate_id: str | None = None
    transfer_request: TransferRequest | None = None

    due_date: datetime | None = None
    claimed_at: datetime | None = None
    allocated_at: datetime | None = None
    completed_at: datetime | None = None

    documents: list[AssignmentDocument] = field(default_factory=list)
    queries: list[Query] = field(default_factory=list)
    final_report_url: str | None = None
    report_versions: list[ReportVersion] = field(default_factory=list)
    report_delivery: ReportDelivery | None = None

    audit_trail: list[AuditLogEntry] = field(default_factory=list)

    forfeit_details: ForfeitDetails | None = None
    previous_advocates: list[str] = field(default_factory=list)
    advocate_history: list[str] = field(default_factory=list)

    def has_owner(self) -> bool:
        return self.owner_id is not None

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id is not None and self.owner_id == user_id

    def is_held_by(self, advocate_id: str) -> bool:
        return self.advocate_id is not None and self.advocate_id == advocate_id

    def occupies_capacity(self) -> bool:
        return self.advocate_id is not None and self.status in WORKLOAD_STATUSES

    def has_forfeited(self, advocate_id: str) -> bool:
        return advocate_id in self.previous_advocates

    def log(
        self, action: str, performed_by: str, at: datetime, details: str | None = None
    ) -> AuditLogEntry:
        entry = AuditLogEntry(
            action=action, performed_by=performed_by, timestamp=at, details=details
        )
        self.audit_trail.append(entry)
        return entry

    def find_query(self, query_id: str) -> Query | None:
        return next((q for q in self.queries if q.id == query_id), None)

    def find_document(self, document_id: str) -> AssignmentDocument | None:
        return next((d for d in self.documents if d.id == document_id), None)
