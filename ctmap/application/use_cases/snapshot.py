"""SnapshotService — persisting the record store and bulk data administration.

The whole store is written as one versioned snapshot under a single key. On
start the snapshot is reloaded; a missing key, a version mismatch or a
corrupt payload resets the store to the seed dataset.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from ctmap.application.ports.snapshot_repo import SnapshotRepository
from ctmap.application.record_store import RecordStore
from ctmap.application.snapshot_codec import build_snapshot, parse_snapshot
from ctmap.domain.entities.assignment import Assignment
from ctmap.domain.entities.hub import Hub
from ctmap.domain.entities.user import User
from ctmap.domain.errors import SnapshotError

logger = logging.getLogger(__name__)

Records = tuple[list[Assignment], list[User], list[Hub]]
DatasetFactory = Callable[[datetime], Records]


class SnapshotService:
    def __init__(
        self,
        store: RecordStore,
        repo: SnapshotRepository,
        *,
        key: str,
        version: int,
        seed: DatasetFactory,
        bulk: DatasetFactory,
    ):
        self._store = store
        self._repo = repo
        self._key = key
        self._version = version
        self._seed = seed
        self._bulk = bulk

    async def load_or_seed(self) -> bool:
        """Fill the store from the durable slot. Returns False when seeded instead."""
        data = await self._repo.load(self._key)
        if data is None:
            logger.info("No snapshot under %r, loading seed data", self._key)
            await self.reset_to_seed_data()
            return False
        try:
            records = parse_snapshot(data, self._version)
        except SnapshotError as e:
            logger.warning("Discarding snapshot %r: %s", self._key, e)
            await self.reset_to_seed_data()
            return False

        self._store.replace_all(*records)
        return True

    async def save(self) -> None:
        await self._repo.save(self._key, self._version, self.export_data())

    def export_data(self) -> dict[str, Any]:
        return build_snapshot(
            self._store.assignments(),
            self._store.users(),
            self._store.hubs(),
            self._version,
            self._store.last_updated,
        )

    async def import_data(self, data: Any) -> None:
        """Replace every collection from an exported snapshot.

        Raises:
            SnapshotError: wrong version or malformed content; the store is
                left untouched.
        """
        records = parse_snapshot(data, self._version)
        self._store.replace_all(*records)
        await self.save()
        logger.info("Snapshot imported")

    async def reset_to_seed_data(self) -> None:
        self._store.replace_all(*self._seed(self._store.now()))
        await self.save()

    async def clear_all_data(self) -> None:
        self._store.clear()
        await self._repo.delete(self._key)
        logger.info("All data cleared")

    async def load_test_data(self) -> None:
        self._store.replace_all(*self._bulk(self._store.now()))
        await self.save()
