"""MasterDataUseCase — hubs and users, with referential checks on delete."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable

from ctmap.application.record_store import RecordStore
from ctmap.domain.entities.hub import Hub
from ctmap.domain.entities.user import User
from ctmap.domain.errors import ReferentialIntegrityError
from ctmap.domain.value_objects.enums import ProductType, UserRole

logger = logging.getLogger(__name__)


class MasterDataUseCase:
    def __init__(self, store: RecordStore):
        self._store = store

    # ─── Hubs ───────────────────────────────────────────────────────

    def add_hub(self, code: str, name: str, email: str, state: str, district: str) -> Hub:
        hub = Hub(
            id=f"h_{uuid.uuid4().hex[:8]}",
            code=code,
            name=name,
            email=email,
            state=state,
            district=district,
        )
        self._store.save_hub(hub)
        logger.info("Hub %s (%s) added", hub.code, hub.id)
        return hub

    def update_hub(self, hub: Hub) -> Hub:
        self._store.get_hub(hub.id)
        return self._store.save_hub(hub)

    def delete_hub(self, hub_id: str) -> None:
        self._store.get_hub(hub_id)
        if any(u.hub_id == hub_id for u in self._store.users()):
            raise ReferentialIntegrityError(
                f"Cannot delete hub {hub_id}: users are mapped to it"
            )
        self._store.remove_hub(hub_id)
        logger.info("Hub %s deleted", hub_id)

    # ─── Users ──────────────────────────────────────────────────────

    def add_user(
        self,
        name: str,
        email: str,
        role: UserRole,
        hub_id: str | None = None,
        firm_name: str | None = None,
        states: Iterable[str] | None = None,
        districts: Iterable[str] | None = None,
        expertise: Iterable[ProductType] | None = None,
        tags: Iterable[str] | None = None,
    ) -> User:
        if hub_id is not None:
            self._store.get_hub(hub_id)
        user = User(
            id=f"u_{uuid.uuid4().hex[:8]}",
            name=name,
            email=email,
            role=role,
            hub_id=hub_id,
            firm_name=firm_name,
            states=list(states or []),
            districts=list(districts or []),
            expertise=list(expertise or []),
            tags=list(tags or []),
        )
        self._store.save_user(user)
        logger.info("User %s (%s) added as %s", user.name, user.id, user.role.value)
        return user

    def update_user(self, user: User) -> User:
        self._store.get_user(user.id)
        if user.hub_id is not None:
            self._store.get_hub(user.hub_id)
        return self._store.save_user(user)

    def delete_user(self, user_id: str) -> None:
        self._store.get_user(user_id)
        referenced = any(
            a.owner_id == user_id or a.advocate_id == user_id
            for a in self._store.assignments()
        )
        if referenced:
            raise ReferentialIntegrityError(
                f"Cannot delete user {user_id}: assignments reference them"
            )
        self._store.remove_user(user_id)
        logger.info("User %s deleted", user_id)
