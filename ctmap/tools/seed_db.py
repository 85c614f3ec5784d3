"""Seed or administer the persisted record store.

Usage:
    python -m ctmap.tools.seed_db                 # seed dataset
    python -m ctmap.tools.seed_db --test-data     # generated bulk dataset
    python -m ctmap.tools.seed_db --clear         # delete the snapshot
    python -m ctmap.tools.seed_db --export out.json
    python -m ctmap.tools.seed_db --import in.json
    python -m ctmap.tools.seed_db --verify-only
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections import Counter
from pathlib import Path

from ctmap.adapters.persistence import models  # noqa: F401  (registers tables)
from ctmap.adapters.persistence.database import Base, async_session_factory, engine
from ctmap.adapters.persistence.repositories import SqlSnapshotRepository
from ctmap.application.record_store import RecordStore
from ctmap.application.use_cases.snapshot import SnapshotService
from ctmap.config import settings
from ctmap.domain.errors import SnapshotError
from ctmap.tools.seed_data import bulk_records, seed_records

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


def _service(store: RecordStore) -> SnapshotService:
    return SnapshotService(
        store,
        SqlSnapshotRepository(async_session_factory),
        key=settings.snapshot_key,
        version=settings.snapshot_version,
        seed=seed_records,
        bulk=bulk_records,
    )


async def _verify_data() -> None:
    """Print sanity checks for the persisted snapshot."""
    store = RecordStore()
    restored = await _service(store).load_or_seed()

    print(f"\n{'='*50}")
    print("SNAPSHOT VERIFICATION")
    print(f"{'='*50}")
    print(f"Key:         {settings.snapshot_key} (version {settings.snapshot_version})")
    print(f"Restored:    {restored}")
    print(f"Hubs:        {len(store.hubs())}")
    print(f"Users:       {len(store.users())}")
    print(f"Advocates:   {len(store.advocates())}")
    print(f"Assignments: {len(store.assignments())}")

    statuses = Counter(a.status.value for a in store.assignments())
    print(f"Status distribution: {dict(statuses)}")

    busy = {adv_id: n for adv_id, n in store.workload.snapshot().items() if n}
    print(f"Advocate workload: {busy}")
    print(f"{'='*50}\n")


async def run(args: argparse.Namespace) -> int:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    service = _service(RecordStore())
    try:
        if args.clear:
            await service.clear_all_data()
        elif args.test_data:
            await service.load_test_data()
            logger.info("Loaded generated test dataset")
        elif args.import_path:
            data = json.loads(Path(args.import_path).read_text(encoding="utf-8"))
            await service.import_data(data)
        elif args.export_path:
            await service.load_or_seed()
            Path(args.export_path).write_text(
                json.dumps(service.export_data(), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            logger.info("Snapshot exported to %s", args.export_path)
        elif not args.verify_only:
            await service.reset_to_seed_data()
            logger.info("Seed dataset written under %r", settings.snapshot_key)
    except SnapshotError as e:
        logger.error("Import rejected: %s", e)
        return 1

    if not args.clear:
        await _verify_data()
    await engine.dispose()
    return 0


def main():
    parser = argparse.ArgumentParser(description="Seed or administer the CTMAP record store")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--test-data", action="store_true",
        help="Write the generated bulk dataset instead of the seed dataset",
    )
    group.add_argument(
        "--clear", action="store_true",
        help="Delete the persisted snapshot",
    )
    group.add_argument(
        "--import", dest="import_path", type=str,
        help="Replace all data from an exported JSON snapshot",
    )
    group.add_argument(
        "--export", dest="export_path", type=str,
        help="Write the current snapshot to a JSON file",
    )
    group.add_argument(
        "--verify-only", action="store_true",
        help="Only run verification, don't write anything",
    )
    args = parser.parse_args()

    if args.import_path and not Path(args.import_path).exists():
        logger.error("Import file not found: %s", args.import_path)
        sys.exit(1)

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
