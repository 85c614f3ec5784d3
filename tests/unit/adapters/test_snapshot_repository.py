"""Tests for SqlSnapshotRepository against a throwaway SQLite file."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from ctmap.adapters.persistence import models  # noqa: F401  (registers tables)
from ctmap.adapters.persistence.database import Base
from ctmap.adapters.persistence.repositories import SqlSnapshotRepository


async def _make_repo(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'snapshots.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine, SqlSnapshotRepository(async_sessionmaker(engine, expire_on_commit=False))


@pytest.mark.asyncio
async def test_missing_key_loads_none(tmp_path):
    engine, repo = await _make_repo(tmp_path)
    try:
        assert await repo.load("ctmap-store") is None
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_save_then_overwrite(tmp_path):
    engine, repo = await _make_repo(tmp_path)
    try:
        await repo.save("ctmap-store", 3, {"version": 3, "hubs": [{"id": "h1"}]})
        await repo.save("ctmap-store", 3, {"version": 3, "hubs": []})

        assert await repo.load("ctmap-store") == {"version": 3, "hubs": []}
        assert await repo.load("other") is None
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_delete(tmp_path):
    engine, repo = await _make_repo(tmp_path)
    try:
        await repo.save("ctmap-store", 3, {"version": 3})
        await repo.delete("ctmap-store")
        assert await repo.load("ctmap-store") is None
        # deleting an absent key is a no-op
        await repo.delete("ctmap-store")
    finally:
        await engine.dispose()
