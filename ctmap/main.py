"""CTMAP — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ctmap.adapters.llm.openai_recommender import OpenAIRecommender
from ctmap.adapters.persistence import models  # noqa: F401  (registers tables)
from ctmap.adapters.persistence.database import Base, async_session_factory, engine
from ctmap.adapters.persistence.repositories import SqlSnapshotRepository
from ctmap.config import settings
from ctmap.domain.errors import (
    CapacityViolation,
    DomainError,
    ExternalCallError,
    NotFoundError,
    PreconditionViolation,
    ReferentialIntegrityError,
    SnapshotError,
)
from ctmap.infrastructure.api.dependencies import build_services
from ctmap.infrastructure.api.routes_admin import router as admin_router
from ctmap.infrastructure.api.routes_allocation import router as allocation_router
from ctmap.infrastructure.api.routes_assignments import router as assignments_router
from ctmap.infrastructure.api.routes_forfeit import router as forfeit_router
from ctmap.infrastructure.api.routes_health import router as health_router
from ctmap.infrastructure.api.routes_master_data import router as master_data_router

logger = logging.getLogger(__name__)

# Most specific first; the handler walks the MRO of the raised error.
ERROR_STATUS: dict[type[DomainError], int] = {
    NotFoundError: 404,
    PreconditionViolation: 409,
    CapacityViolation: 409,
    ExternalCallError: 502,
    ReferentialIntegrityError: 409,
    SnapshotError: 422,
}


def status_for(error: DomainError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database connection established")

    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(
            settings,
            SqlSnapshotRepository(async_session_factory),
            OpenAIRecommender(),
        )
    restored = await app.state.services.snapshots.load_or_seed()
    logger.info("Record store %s", "restored from snapshot" if restored else "seeded")
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="CTMAP — Assignment Lifecycle & Allocation Engine",
        description="Legal due-diligence assignments, advocate allocation and forfeit handling",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS for the web frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainError, domain_error_handler)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(assignments_router, prefix="/api")
    app.include_router(allocation_router, prefix="/api")
    app.include_router(forfeit_router, prefix="/api")
    app.include_router(master_data_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    return app


app = create_app()
