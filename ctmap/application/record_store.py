"""RecordStore — the in-memory Assignment / User / Hub collections.

One instance is built by the process entry point and handed to every use
case. Every write goes through a `save_*` / `remove_*` method so the workload
cache is invalidated before the next read.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from ctmap.application.workload_cache import WorkloadCache
from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.entities.hub import Hub
from ctmap.domain.entities.user import User
from ctmap.domain.errors import NotFoundError
from ctmap.domain.value_objects.enums import AssignmentStatus, UserRole

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordStore:
    def __init__(
        self,
        assignments: Iterable[Assignment] = (),
        users: Iterable[User] = (),
        hubs: Iterable[Hub] = (),
        clock: Callable[[], datetime] = utcnow,
    ):
        self._assignments: dict[str, Assignment] = {}
        self._users: dict[str, User] = {}
        self._hubs: dict[str, Hub] = {}
        self._clock = clock
        self.workload = WorkloadCache(lambda: self._assignments.values())
        self.last_updated: datetime | None = None
        self.replace_all(assignments, users, hubs)

    def now(self) -> datetime:
        return self._clock()

    # ─── Assignments ────────────────────────────────────────────────

    def assignments(self, status: AssignmentStatus | None = None) -> list[Assignment]:
        if status is None:
            return list(self._assignments.values())
        return [a for a in self._assignments.values() if a.status == status]

    def find_assignment(self, assignment_id: str) -> Assignment | None:
        return self._assignments.get(assignment_id)

    def get_assignment(self, assignment_id: str) -> Assignment:
        assignment = self._assignments.get(assignment_id)
        if assignment is None:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        return assignment

    def save_assignment(self, assignment: Assignment) -> Assignment:
        self._assignments[assignment.id] = assignment
        self._touch()
        return assignment

    def search_assignments(self, query: str) -> list[Assignment]:
        """Exact LAN / PAN match or borrower-name substring, case-insensitive.

        Includes assignments owned by other users so they can request a
        transfer.
        """
        q = query.strip().upper()
        if not q:
            return []
        return [
            a for a in self._assignments.values()
            if a.lan.upper() == q or a.pan.upper() == q or q in a.borrower_name.upper()
        ]

    # ─── Users ──────────────────────────────────────────────────────

    def users(self, role: UserRole | None = None) -> list[User]:
        if role is None:
            return list(self._users.values())
        return [u for u in self._users.values() if u.role == role]

    def advocates(self) -> list[User]:
        return self.users(UserRole.ADVOCATE)

    def find_user(self, user_id: str | None) -> User | None:
        if user_id is None:
            return None
        return self._users.get(user_id)

    def get_user(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def get_advocate(self, advocate_id: str) -> User:
        user = self._users.get(advocate_id)
        if user is None or not user.is_advocate():
            raise NotFoundError(f"Advocate {advocate_id} not found")
        return user

    def save_user(self, user: User) -> User:
        self._users[user.id] = user
        self._touch()
        return user

    def remove_user(self, user_id: str) -> None:
        self._users.pop(user_id, None)
        self._touch()

    # ─── Hubs ───────────────────────────────────────────────────────

    def hubs(self) -> list[Hub]:
        return list(self._hubs.values())

    def find_hub(self, hub_id: str | None) -> Hub | None:
        if hub_id is None:
            return None
        return self._hubs.get(hub_id)

    def get_hub(self, hub_id: str) -> Hub:
        hub = self._hubs.get(hub_id)
        if hub is None:
            raise NotFoundError(f"Hub {hub_id} not found")
        return hub

    def save_hub(self, hub: Hub) -> Hub:
        self._hubs[hub.id] = hub
        self._touch()
        return hub

    def remove_hub(self, hub_id: str) -> None:
        self._hubs.pop(hub_id, None)
        self._touch()

    # ─── Workload ───────────────────────────────────────────────────

    def workload_of(self, advocate_id: str) -> int:
        return self.workload.get(advocate_id)

    # ─── Bulk replacement ───────────────────────────────────────────

    def replace_all(
        self,
        assignments: Iterable[Assignment],
        users: Iterable[User],
        hubs: Iterable[Hub],
    ) -> None:
        self._assignments = {a.id: a for a in assignments}
        self._users = {u.id: u for u in users}
        self._hubs = {h.id: h for h in hubs}
        self._touch()
        logger.info(
            "Store loaded: %d assignments, %d users, %d hubs",
            len(self._assignments), len(self._users), len(self._hubs),
        )

    def clear(self) -> None:
        self.replace_all((), (), ())

    def _touch(self) -> None:
        self.workload.invalidate()
        self.last_updated = self.now()
