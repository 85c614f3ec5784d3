"""Data administration endpoints — export, import, reset and clear."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from ctmap.application.use_cases.snapshot import SnapshotService
from ctmap.infrastructure.api.dependencies import get_snapshots

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/export")
async def export_data(snapshots: SnapshotService = Depends(get_snapshots)):
    return snapshots.export_data()


@router.post("/import")
async def import_data(
    data: dict[str, Any] = Body(...),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    """Replace every collection. A bad payload leaves the store untouched (422)."""
    await snapshots.import_data(data)
    return {"status": "imported"}


@router.post("/reset")
async def reset_to_seed_data(snapshots: SnapshotService = Depends(get_snapshots)):
    await snapshots.reset_to_seed_data()
    return {"status": "reset"}


@router.post("/clear")
async def clear_all_data(snapshots: SnapshotService = Depends(get_snapshots)):
    await snapshots.clear_all_data()
    return {"status": "cleared"}


@router.post("/test-data")
async def load_test_data(snapshots: SnapshotService = Depends(get_snapshots)):
    await snapshots.load_test_data()
    return {"status": "loaded"}
