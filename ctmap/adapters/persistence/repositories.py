"""SQLAlchemy repository implementations."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ctmap.adapters.persistence.models import SnapshotModel
from ctmap.application.ports.snapshot_repo import SnapshotRepository

logger = logging.getLogger(__name__)


class SqlSnapshotRepository(SnapshotRepository):
    """Snapshot slot backed by the `snapshots` table.

    Takes a session factory rather than a session: the store outlives any
    single request, so each load / save runs in its own short transaction.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def load(self, key: str) -> dict[str, Any] | None:
        async with self._session_factory() as s:
            result = await s.execute(select(SnapshotModel).where(SnapshotModel.key == key))
            m = result.scalar_one_or_none()
            return dict(m.payload) if m else None

    async def save(self, key: str, version: int, payload: dict[str, Any]) -> None:
        async with self._session_factory() as s:
            result = await s.execute(select(SnapshotModel).where(SnapshotModel.key == key))
            m = result.scalar_one_or_none()
            if m is None:
                s.add(SnapshotModel(key=key, version=version, payload=payload))
            else:
                m.version = version
                m.payload = payload
            await s.commit()
        logger.debug("Snapshot %s saved (version %d)", key, version)

    async def delete(self, key: str) -> None:
        async with self._session_factory() as s:
            await s.execute(delete(SnapshotModel).where(SnapshotModel.key == key))
            await s.commit()
