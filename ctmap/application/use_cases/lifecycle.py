"""AssignmentLifecycle — the status state machine for a single assignment.

UNCLAIMED → DRAFT → PENDING_ALLOCATION → ALLOCATED → IN_PROGRESS ⇄ QUERY_RAISED
→ PENDING_APPROVAL → COMPLETED. PENDING_APPROVAL goes back to QUERY_RAISED
when the owner asks for rework; FORFEITED is handled by the forfeit protocol.

Every operation validates all of its guards before touching the record, then
mutates it in one go and saves it through the store. Each status change
appends exactly one audit entry.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from datetime import timedelta
from typing import Any

from ctmap.application.record_store import RecordStore
from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.entities.document import AssignmentDocument, DocumentUpload
from ctmap.domain.entities.query import Query
from ctmap.domain.entities.user import User
from ctmap.domain.errors import (
    CapacityViolation,
    NotFoundError,
    PreconditionViolation,
)
from ctmap.domain.policies.lifecycle import (
    ADVOCATE_HELD,
    ALLOCATABLE,
    PRE_ALLOCATION_QUERY_ROLES,
    QUERYABLE,
    SUBMITTABLE,
    UPLOADABLE,
    ensure_holder,
    ensure_not_forfeiter,
    ensure_owner,
    ensure_status,
)
from ctmap.domain.policies.scoring import DEFAULT_CAPACITY
from ctmap.domain.value_objects.delivery import (
    DeliveryRecipient,
    ReportDelivery,
    ReportVersion,
)
from ctmap.domain.value_objects.enums import AssignmentStatus, RecipientRole, UserRole

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "SYSTEM"
DEFAULT_DUE_DAYS = 7


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:9]}"


class AssignmentLifecycle:
    """Legal transitions and ownership / advocate invariants."""

    def __init__(
        self,
        store: RecordStore,
        due_days: int = DEFAULT_DUE_DAYS,
        capacity: int = DEFAULT_CAPACITY,
    ):
        self._store = store
        self._due_days = due_days
        self._capacity = capacity

    # ─── Claiming & documents ───────────────────────────────────────

    def claim(self, assignment_id: str, user_id: str) -> Assignment:
        """Take ownership of an unclaimed assignment.

        Claiming an assignment the caller already owns is a no-op, so a draft
        can be re-saved safely.
        """
        assignment = self._store.get_assignment(assignment_id)
        user = self._store.get_user(user_id)

        if assignment.is_owned_by(user_id):
            logger.debug("Assignment %s already owned by %s", assignment_id, user_id)
            return assignment
        if assignment.status != AssignmentStatus.UNCLAIMED:
            raise PreconditionViolation(
                f"Assignment {assignment_id} already claimed by another user"
            )

        now = self._store.now()
        assignment.owner_id = user.id
        assignment.hub_id = user.hub_id
        assignment.status = AssignmentStatus.DRAFT
        if assignment.claimed_at is None:
            assignment.claimed_at = now
        assignment.log("CLAIMED", user.id, now, f"Claimed by {user.name}")
        self._store.save_assignment(assignment)

        logger.info("Assignment %s claimed by %s", assignment_id, user.name)
        return assignment

    def upload_documents(
        self,
        assignment_id: str,
        documents: Iterable[DocumentUpload],
        user_id: str,
    ) -> Assignment:
        assignment = self._store.get_assignment(assignment_id)
        ensure_owner(assignment, user_id, "upload documents to")
        ensure_status(assignment, UPLOADABLE, "upload documents to")
        uploads = list(documents)
        if not uploads:
            raise PreconditionViolation("No documents supplied")

        now = self._store.now()
        for upload in uploads:
            assignment.documents.append(AssignmentDocument(
                id=_new_id("doc"),
                name=upload.name,
                category=upload.category,
                uploaded_by=user_id,
                date=now,
                size_bytes=upload.size_bytes,
                file_ref=upload.file_ref,
            ))
        assignment.log(
            "DOCUMENTS_UPLOADED", user_id, now,
            ", ".join(f"{u.name} ({u.category})" for u in uploads),
        )
        self._store.save_assignment(assignment)
        return assignment

    def save_extracted_data(
        self,
        assignment_id: str,
        document_id: str,
        data: Mapping[str, Any],
    ) -> Assignment:
        """Attach data pulled out of a document by the extraction collaborator."""
        assignment = self._store.get_assignment(assignment_id)
        document = assignment.find_document(document_id)
        if document is None:
            raise NotFoundError(
                f"Document {document_id} not found on assignment {assignment_id}"
            )
        document.extracted_data = dict(data)
        self._store.save_assignment(assignment)
        return assignment

    def submit_for_allocation(self, assignment_id: str, user_id: str) -> Assignment:
        assignment = self._store.get_assignment(assignment_id)
        ensure_owner(assignment, user_id, "submit")
        ensure_status(assignment, SUBMITTABLE, "submit")
        if assignment.advocate_id is not None:
            raise PreconditionViolation(
                f"Assignment {assignment_id} is held by an advocate; "
                "answer the open query instead of resubmitting"
            )

        assignment.status = AssignmentStatus.PENDING_ALLOCATION
        assignment.log("SUBMITTED_FOR_ALLOCATION", user_id, self._store.now())
        self._store.save_assignment(assignment)

        logger.info("Assignment %s submitted for allocation", assignment_id)
        return assignment

    # ─── Allocation ─────────────────────────────────────────────────

    def allocate_advocate(
        self,
        assignment_id: str,
        advocate_id: str,
        actor_id: str,
        reason: str | None = None,
        *,
        from_statuses: Iterable[AssignmentStatus] = ALLOCATABLE,
    ) -> Assignment:
        """Allocate (or re-allocate) an advocate.

        Moving the assignment to a different advocate requires a reason.
        Automated callers narrow *from_statuses* to PENDING_ALLOCATION so a
        record allocated by a human in the meantime is not taken over.
        """
        assignment = self._store.get_assignment(assignment_id)
        advocate = self._store.get_advocate(advocate_id)
        ensure_status(assignment, from_statuses, "allocate")
        ensure_not_forfeiter(assignment, advocate_id)

        current = assignment.advocate_id
        is_reallocation = current is not None and current != advocate_id
        if is_reallocation and not (reason and reason.strip()):
            raise PreconditionViolation("Reason is mandatory for re-allocation")
        if not assignment.is_held_by(advocate_id):
            self.ensure_capacity(advocate)

        if is_reallocation:
            previous = self._store.find_user(current)
            previous_name = previous.name if previous else current
            action = "REALLOCATED"
            details = (
                f"Re-allocated from {previous_name} to {advocate.name}. Reason: {reason}"
            )
        else:
            action = "ALLOCATED"
            details = f"Allocated to {advocate.name}"
            if reason:
                details += f". Reason: {reason}"

        return self.commit_allocation(
            assignment, advocate, actor_id=actor_id, action=action, details=details,
        )

    def ensure_capacity(self, advocate: User) -> None:
        workload = self._store.workload_of(advocate.id)
        if workload >= self._capacity:
            raise CapacityViolation(
                f"Advocate {advocate.name} is at capacity ({workload}/{self._capacity})"
            )

    def commit_allocation(
        self,
        assignment: Assignment,
        advocate: User,
        *,
        actor_id: str,
        action: str,
        details: str,
        reset_due_date: bool = False,
    ) -> Assignment:
        """Write an allocation that has already passed its guards."""
        now = self._store.now()
        assignment.status = AssignmentStatus.ALLOCATED
        assignment.advocate_id = advocate.id
        assignment.allocated_at = now
        if reset_due_date or assignment.due_date is None:
            assignment.due_date = now + timedelta(days=self._due_days)
        if advocate.id not in assignment.advocate_history:
            assignment.advocate_history.append(advocate.id)
        assignment.log(action, actor_id, now, details)
        self._store.save_assignment(assignment)

        logger.info("Assignment %s: %s → %s", assignment.id, action, advocate.name)
        return assignment

    def start_work(self, assignment_id: str, advocate_id: str) -> Assignment:
        assignment = self._store.get_assignment(assignment_id)
        ensure_status(assignment, {AssignmentStatus.ALLOCATED}, "start work on")
        ensure_holder(assignment, advocate_id, "start work on")

        assignment.status = AssignmentStatus.IN_PROGRESS
        assignment.log("WORK_STARTED", advocate_id, self._store.now())
        self._store.save_assignment(assignment)
        return assignment

    # ─── Queries ────────────────────────────────────────────────────

    def raise_query(
        self,
        assignment_id: str,
        text: str,
        user_id: str,
        attachments: Iterable[str] = (),
        directed_to: UserRole | None = None,
    ) -> Assignment:
        assignment = self._store.get_assignment(assignment_id)
        user = self._store.get_user(user_id)
        ensure_status(assignment, QUERYABLE, "raise a query on")
        if (
            assignment.status == AssignmentStatus.PENDING_ALLOCATION
            and user.role not in PRE_ALLOCATION_QUERY_ROLES
        ):
            raise PreconditionViolation(
                f"Only ops can query assignment {assignment_id} before allocation"
            )
        if not text or not text.strip():
            raise PreconditionViolation("Query text must not be empty")

        now = self._store.now()
        action = (
            "REWORK_REQUESTED"
            if assignment.status == AssignmentStatus.PENDING_APPROVAL
            else "QUERY_RAISED"
        )
        query = Query(
            id=_new_id("q"),
            text=text.strip(),
            raised_by=user_id,
            raised_at=now,
            attachments=list(attachments),
            directed_to=directed_to,
        )
        assignment.queries.append(query)
        assignment.status = AssignmentStatus.QUERY_RAISED
        assignment.log(action, user_id, now, query.text)
        self._store.save_assignment(assignment)

        logger.info("Assignment %s: %s by %s", assignment_id, action, user_id)
        return assignment

    def request_rework(self, assignment_id: str, user_id: str, text: str) -> Assignment:
        """Send a submitted report back to the advocate."""
        assignment = self._store.get_assignment(assignment_id)
        ensure_status(assignment, {AssignmentStatus.PENDING_APPROVAL}, "request rework on")
        ensure_owner(assignment, user_id, "request rework on")
        return self.raise_query(
            assignment_id, text, user_id, directed_to=UserRole.ADVOCATE,
        )

    def respond_to_query(
        self,
        assignment_id: str,
        query_id: str,
        response: str,
        user_id: str,
        attachments: Iterable[str] = (),
    ) -> Assignment:
        assignment = self._store.get_assignment(assignment_id)
        self._store.get_user(user_id)
        ensure_status(assignment, {AssignmentStatus.QUERY_RAISED}, "respond to a query on")
        query = assignment.find_query(query_id)
        if query is None:
            raise NotFoundError(f"Query {query_id} not found on assignment {assignment_id}")
        if query.is_answered():
            raise PreconditionViolation(f"Query {query_id} already answered")

        now = self._store.now()
        query.response = response
        query.responded_by = user_id
        query.responded_at = now
        query.response_attachments = list(attachments)
        # a pre-allocation query goes back to the allocation queue
        assignment.status = (
            AssignmentStatus.IN_PROGRESS
            if assignment.advocate_id is not None
            else AssignmentStatus.PENDING_ALLOCATION
        )
        assignment.log("QUERY_RESPONDED", user_id, now, f"Query {query_id} answered")
        self._store.save_assignment(assignment)
        return assignment

    # ─── Report ─────────────────────────────────────────────────────

    def submit_report(
        self,
        assignment_id: str,
        advocate_id: str,
        report_url: str,
        remarks: str = "",
    ) -> Assignment:
        assignment = self._store.get_assignment(assignment_id)
        ensure_status(assignment, ADVOCATE_HELD, "submit a report on")
        ensure_holder(assignment, advocate_id, "submit a report on")
        if not report_url:
            raise PreconditionViolation("Report reference must not be empty")

        now = self._store.now()
        assignment.final_report_url = report_url
        assignment.report_versions.append(
            ReportVersion(url=report_url, date=now, remarks=remarks)
        )
        assignment.status = AssignmentStatus.PENDING_APPROVAL
        assignment.log(
            "REPORT_SUBMITTED", advocate_id, now,
            f"Version {len(assignment.report_versions)}",
        )
        self._store.save_assignment(assignment)

        logger.info("Assignment %s: report submitted by %s", assignment_id, advocate_id)
        return assignment

    def approve_report(self, assignment_id: str, approver_id: str) -> Assignment:
        """Complete the assignment and build the delivery record."""
        assignment = self._store.get_assignment(assignment_id)
        ensure_status(assignment, {AssignmentStatus.PENDING_APPROVAL}, "approve")
        ensure_owner(assignment, approver_id, "approve")
        approver = self._store.get_user(approver_id)

        recipients = [
            DeliveryRecipient(name=approver.name, email=approver.email, role=RecipientRole.OWNER)
        ]
        hub = self._store.find_hub(assignment.hub_id)
        if hub is not None:
            recipients.append(
                DeliveryRecipient(name=hub.name, email=hub.email, role=RecipientRole.HUB)
            )

        now = self._store.now()
        assignment.status = AssignmentStatus.COMPLETED
        assignment.completed_at = now
        assignment.report_delivery = ReportDelivery(
            delivered_at=now,
            delivered_by=approver.id,
            delivered_by_name=approver.name,
            report_url=assignment.final_report_url or "",
            delivered_to=tuple(recipients),
        )
        assignment.log(
            "APPROVED", approver.id, now,
            "Report delivered to " + ", ".join(r.name for r in recipients),
        )
        self._store.save_assignment(assignment)

        logger.info("Assignment %s completed", assignment_id)
        return assignment
