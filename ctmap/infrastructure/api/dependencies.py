"""FastAPI dependency injection — wires the store and adapters into use cases.

The record store is process-wide state: `build_services` is called once by
the application lifespan and the result is kept on `app.state.services`.
Every handler is `async def` and the use cases are synchronous, so the store
has a single writer on the event loop.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from fastapi import Depends, Request

from ctmap.application.ports.recommender_port import RecommenderPort
from ctmap.application.ports.snapshot_repo import SnapshotRepository
from ctmap.application.record_store import RecordStore, utcnow
from ctmap.application.retry import RetryConfig
from ctmap.application.use_cases.ai_allocate import AIAllocationUseCase
from ctmap.application.use_cases.allocate import AllocateAdvocatesUseCase
from ctmap.application.use_cases.forfeit import ForfeitProtocol
from ctmap.application.use_cases.lifecycle import AssignmentLifecycle
from ctmap.application.use_cases.master_data import MasterDataUseCase
from ctmap.application.use_cases.snapshot import SnapshotService
from ctmap.application.use_cases.transfer import TransferProtocol
from ctmap.config import Settings
from ctmap.tools.seed_data import bulk_records, seed_records

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: RecordStore
    lifecycle: AssignmentLifecycle
    transfer: TransferProtocol
    allocator: AllocateAdvocatesUseCase
    ai: AIAllocationUseCase
    forfeit: ForfeitProtocol
    master_data: MasterDataUseCase
    snapshots: SnapshotService


def build_services(
    settings: Settings,
    snapshot_repo: SnapshotRepository,
    recommender: RecommenderPort,
    clock: Callable[[], datetime] = utcnow,
) -> Services:
    store = RecordStore(clock=clock)
    capacity = settings.advocate_capacity
    lifecycle = AssignmentLifecycle(
        store, due_days=settings.allocation_due_days, capacity=capacity,
    )
    allocator = AllocateAdvocatesUseCase(store, lifecycle, capacity=capacity)
    ai = AIAllocationUseCase(
        store, lifecycle, recommender,
        capacity=capacity,
        batch_size=settings.ai_batch_size,
        batch_delay=settings.ai_batch_delay_ms / 1000,
        retry=RetryConfig(
            max_attempts=settings.ai_max_attempts,
            base_delay=settings.ai_backoff_base_s,
            max_delay=settings.ai_backoff_cap_s,
        ),
    )
    if not ai.is_available:
        logger.info("Recommendation service not configured, AI allocation disabled")

    return Services(
        store=store,
        lifecycle=lifecycle,
        transfer=TransferProtocol(store),
        allocator=allocator,
        ai=ai,
        forfeit=ForfeitProtocol(
            store, lifecycle, allocator, ai,
            min_details=settings.forfeit_min_details,
            alert_threshold=settings.forfeit_alert_threshold,
        ),
        master_data=MasterDataUseCase(store),
        snapshots=SnapshotService(
            store, snapshot_repo,
            key=settings.snapshot_key,
            version=settings.snapshot_version,
            seed=seed_records,
            bulk=bulk_records,
        ),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_store(services: Services = Depends(get_services)) -> RecordStore:
    return services.store


def get_lifecycle(services: Services = Depends(get_services)) -> AssignmentLifecycle:
    return services.lifecycle


def get_transfer(services: Services = Depends(get_services)) -> TransferProtocol:
    return services.transfer


def get_allocator(services: Services = Depends(get_services)) -> AllocateAdvocatesUseCase:
    return services.allocator


def get_ai(services: Services = Depends(get_services)) -> AIAllocationUseCase:
    return services.ai


def get_forfeit(services: Services = Depends(get_services)) -> ForfeitProtocol:
    return services.forfeit


def get_master_data(services: Services = Depends(get_services)) -> MasterDataUseCase:
    return services.master_data


def get_snapshots(services: Services = Depends(get_services)) -> SnapshotService:
    return services.snapshots
