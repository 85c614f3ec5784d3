"""Health check endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ctmap.adapters.persistence.database import get_session
from ctmap.application.record_store import RecordStore
from ctmap.infrastructure.api.dependencies import get_store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    session: AsyncSession = Depends(get_session),
    store: RecordStore = Depends(get_store),
):
    """Check API and database connectivity."""
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {e}"

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "service": "CT-MAP - Assignment Lifecycle & Allocation Engine",
        "counts": {
            "assignments": len(store.assignments()),
            "users": len(store.users()),
            "hubs": len(store.hubs()),
        },
    }
