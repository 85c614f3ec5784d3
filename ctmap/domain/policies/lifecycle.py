"""LifecyclePolicy — which statuses allow which operation, and the guards.

Pure functions: they inspect an Assignment and raise PreconditionViolation,
never mutate anything.
"""

from __future__ import annotations

from collections.abc import Iterable

from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.errors import PreconditionViolation
from ctmap.domain.value_objects.enums import AssignmentStatus, UserRole

S = AssignmentStatus

UPLOADABLE = frozenset({S.DRAFT, S.QUERY_RAISED})
SUBMITTABLE = frozenset({S.DRAFT, S.QUERY_RAISED})
ALLOCATABLE = frozenset({S.PENDING_ALLOCATION, S.ALLOCATED, S.IN_PROGRESS})
ADVOCATE_HELD = frozenset({S.ALLOCATED, S.IN_PROGRESS, S.QUERY_RAISED})
QUERYABLE = frozenset({
    S.PENDING_ALLOCATION,
    S.ALLOCATED,
    S.IN_PROGRESS,
    S.QUERY_RAISED,
    S.PENDING_APPROVAL,
})
# Queries raised before any advocate is allocated
PRE_ALLOCATION_QUERY_ROLES = frozenset({UserRole.CT_OPS, UserRole.ADMIN})
FORFEITABLE = ADVOCATE_HELD

# Statuses in which advocate_id may be non-empty
ADVOCATE_BEARING = frozenset({
    S.ALLOCATED,
    S.IN_PROGRESS,
    S.QUERY_RAISED,
    S.PENDING_APPROVAL,
    S.COMPLETED,
    S.REJECTED,
})


def _names(statuses: Iterable[AssignmentStatus]) -> str:
    return ", ".join(sorted(s.value for s in statuses))


def ensure_status(
    assignment: Assignment,
    allowed: Iterable[AssignmentStatus],
    action: str,
) -> None:
    """Raise unless the assignment is in one of *allowed*."""
    allowed = frozenset(allowed)
    if assignment.status not in allowed:
        raise PreconditionViolation(
            f"Cannot {action} assignment {assignment.id} in status "
            f"{assignment.status.value} (allowed: {_names(allowed)})"
        )


def ensure_owner(assignment: Assignment, user_id: str, action: str) -> None:
    """Raise unless *user_id* owns the assignment."""
    if not assignment.has_owner():
        raise PreconditionViolation(
            f"Cannot {action} assignment {assignment.id}: it has no owner"
        )
    if not assignment.is_owned_by(user_id):
        raise PreconditionViolation(
            f"Cannot {action} assignment {assignment.id}: "
            f"user {user_id} is not the owner"
        )


def ensure_holder(assignment: Assignment, advocate_id: str, action: str) -> None:
    """Raise unless *advocate_id* currently holds the assignment."""
    if not assignment.is_held_by(advocate_id):
        raise PreconditionViolation(
            f"Cannot {action} assignment {assignment.id}: "
            f"advocate {advocate_id} does not hold it"
        )


def ensure_not_forfeiter(assignment: Assignment, advocate_id: str) -> None:
    """Raise if *advocate_id* has ever forfeited this assignment."""
    if assignment.has_forfeited(advocate_id):
        raise PreconditionViolation(
            f"Advocate {advocate_id} previously forfeited assignment "
            f"{assignment.id} and cannot receive it again"
        )
