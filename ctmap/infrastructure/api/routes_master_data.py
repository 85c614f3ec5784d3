"""Master data endpoints — hubs and users."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ctmap.application.record_store import RecordStore
from ctmap.application.snapshot_codec import hub_to_dict, user_to_dict
from ctmap.application.use_cases.master_data import MasterDataUseCase
from ctmap.application.use_cases.snapshot import SnapshotService
from ctmap.domain.entities.hub import Hub
from ctmap.domain.entities.user import User
from ctmap.domain.value_objects.enums import ProductType, UserRole
from ctmap.infrastructure.api.dependencies import get_master_data, get_snapshots, get_store

router = APIRouter(tags=["master-data"])

# ── Request schemas ─────────────────────────────────────────────────


class HubIn(BaseModel):
    code: str
    name: str
    email: str
    state: str
    district: str


class UserIn(BaseModel):
    name: str
    email: str
    role: UserRole
    hub_id: str | None = None
    firm_name: str | None = None
    states: list[str] = []
    districts: list[str] = []
    expertise: list[ProductType] = []
    tags: list[str] = []


# ── Hubs ────────────────────────────────────────────────────────────


@router.get("/hubs")
async def list_hubs(store: RecordStore = Depends(get_store)):
    return [hub_to_dict(h) for h in store.hubs()]


@router.post("/hubs", status_code=201)
async def add_hub(
    body: HubIn,
    master_data: MasterDataUseCase = Depends(get_master_data),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    hub = master_data.add_hub(**body.model_dump())
    await snapshots.save()
    return hub_to_dict(hub)


@router.put("/hubs/{hub_id}")
async def update_hub(
    hub_id: str,
    body: HubIn,
    master_data: MasterDataUseCase = Depends(get_master_data),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    hub = master_data.update_hub(Hub(id=hub_id, **body.model_dump()))
    await snapshots.save()
    return hub_to_dict(hub)


@router.delete("/hubs/{hub_id}", status_code=204)
async def delete_hub(
    hub_id: str,
    master_data: MasterDataUseCase = Depends(get_master_data),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    master_data.delete_hub(hub_id)
    await snapshots.save()


# ── Users ───────────────────────────────────────────────────────────


@router.get("/users")
async def list_users(role: UserRole | None = None, store: RecordStore = Depends(get_store)):
    return [user_to_dict(u) for u in store.users(role)]


@router.get("/users/{user_id}")
async def get_user(user_id: str, store: RecordStore = Depends(get_store)):
    return user_to_dict(store.get_user(user_id))


@router.post("/users", status_code=201)
async def add_user(
    body: UserIn,
    master_data: MasterDataUseCase = Depends(get_master_data),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    user = master_data.add_user(**body.model_dump())
    await snapshots.save()
    return user_to_dict(user)


@router.put("/users/{user_id}")
async def update_user(
    user_id: str,
    body: UserIn,
    master_data: MasterDataUseCase = Depends(get_master_data),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    user = master_data.update_user(User(id=user_id, **body.model_dump()))
    await snapshots.save()
    return user_to_dict(user)


@router.delete("/users/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    master_data: MasterDataUseCase = Depends(get_master_data),
    snapshots: SnapshotService = Depends(get_snapshots),
):
    master_data.delete_user(user_id)
    await snapshots.save()
