"""TransferProtocol — moving ownership of an assignment to another user.

Orthogonal to advocate allocation: status, advocate and due date are never
touched here.
"""

from __future__ import annotations

import logging

from ctmap.application.record_store import RecordStore
from ctmap.domain.entities.assignment import Assignment, TransferRequest
from ctmap.domain.errors import PreconditionViolation
from ctmap.domain.value_objects.enums import UserRole

logger = logging.getLogger(__name__)

# Roles that may resolve a request on an assignment they do not own
RESOLVER_ROLES = frozenset({UserRole.CT_OPS, UserRole.ADMIN})


class TransferProtocol:
    def __init__(self, store: RecordStore):
        self._store = store

    def request_transfer(self, assignment_id: str, requester_id: str) -> Assignment:
        assignment = self._store.get_assignment(assignment_id)
        requester = self._store.get_user(requester_id)

        if not assignment.has_owner():
            raise PreconditionViolation(
                f"Assignment {assignment_id} has no owner; claim it instead"
            )
        if assignment.is_owned_by(requester_id):
            raise PreconditionViolation(
                f"User {requester_id} already owns assignment {assignment_id}"
            )
        if assignment.transfer_request is not None:
            raise PreconditionViolation(
                f"Assignment {assignment_id} already has a pending transfer request"
            )

        now = self._store.now()
        assignment.transfer_request = TransferRequest(
            requested_by=requester.id,
            requested_by_name=requester.name,
            requested_at=now,
        )
        assignment.log("TRANSFER_REQUESTED", requester.id, now, f"Requested by {requester.name}")
        self._store.save_assignment(assignment)

        logger.info("Transfer of %s requested by %s", assignment_id, requester.name)
        return assignment

    def resolve_transfer_request(
        self,
        assignment_id: str,
        approved: bool,
        actor_id: str,
    ) -> Assignment:
        """Approve or reject the pending request.

        The current owner, or an ops / admin user, may resolve it.
        """
        assignment = self._store.get_assignment(assignment_id)
        actor = self._store.get_user(actor_id)
        request = assignment.transfer_request
        if request is None:
            raise PreconditionViolation(
                f"Assignment {assignment_id} has no pending transfer request"
            )
        if not assignment.is_owned_by(actor_id) and actor.role not in RESOLVER_ROLES:
            raise PreconditionViolation(
                f"User {actor_id} may not resolve transfers on assignment {assignment_id}"
            )

        now = self._store.now()
        if approved:
            # requester may have been deleted since asking
            requester = self._store.get_user(request.requested_by)
            previous = self._store.find_user(assignment.owner_id)
            previous_name = previous.name if previous else assignment.owner_id
            assignment.owner_id = requester.id
            assignment.hub_id = requester.hub_id
            assignment.log(
                "TRANSFER_APPROVED", actor.id, now,
                f"Ownership transferred from {previous_name} to {requester.name}",
            )
            logger.info("Assignment %s transferred to %s", assignment_id, requester.name)
        else:
            assignment.log(
                "TRANSFER_REJECTED", actor.id, now,
                f"Request by {request.requested_by_name} rejected",
            )
            logger.info("Transfer of %s rejected", assignment_id)

        assignment.transfer_request = None
        self._store.save_assignment(assignment)
        return assignment
