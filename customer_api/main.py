"""FastAPI application for the customer API."""

from __future__ import annotations

import enum
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import AsyncIterator, List, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from .database import RecordStore, StorageUnavailable, open_storage
from .models import Customer, HealthReport
from .seeder import Seeder

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Application configuration."""

    database_url: str
    seed_on_startup: bool
    host: str
    port: int
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings loaded from environment variables."""

    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite://"),
        seed_on_startup=_env_flag("SEED_ON_STARTUP", True),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8080")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


class LifecycleState(str, enum.Enum):
    """Startup progress of the service."""

    UNINITIALIZED = "UNINITIALIZED"
    SCHEMA_READY = "SCHEMA_READY"
    SEEDED = "SEEDED"
    SERVING = "SERVING"


def customer_router(store: RecordStore) -> APIRouter:
    """Build the routes that read from ``store``."""

    router = APIRouter(tags=["customers"])

    @router.get("/customers", response_model=List[Customer])
    def list_customers() -> List[Customer]:
        """Return every stored customer."""

        try:
            return store.list_all()
        except StorageUnavailable as exc:
            logger.error("Customer listing failed: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Customer store unavailable",
            ) from exc

    return router


def health_router(store: RecordStore) -> APIRouter:
    """Build the readiness probe for ``store``."""

    router = APIRouter(tags=["health"])

    @router.get("/actuator/health", response_model=HealthReport)
    def health(request: Request) -> JSONResponse:
        """Report UP only once startup finished and the store answers."""

        state = request.app.state.lifecycle
        if state is not LifecycleState.SERVING:
            report = HealthReport(status="DOWN", state=state.value)
            return JSONResponse(report.model_dump(exclude_none=True), status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        try:
            count = store.count()
        except StorageUnavailable as exc:
            logger.error("Health check failed: %s", exc)
            report = HealthReport(status="DOWN", state=state.value)
            return JSONResponse(report.model_dump(exclude_none=True), status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        return JSONResponse(HealthReport(status="UP", state=state.value, customers=count).model_dump())

    return router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Wire the store, seeder and routes into a FastAPI application."""

    settings = settings or get_settings()
    store = RecordStore(open_storage(settings.database_url))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.lifecycle = LifecycleState.UNINITIALIZED
        try:
            store.create_schema()
            app.state.lifecycle = LifecycleState.SCHEMA_READY
            logger.info("Schema ready")

            if settings.seed_on_startup:
                Seeder(store).run()
            else:
                logger.info("Seeding disabled")
            app.state.lifecycle = LifecycleState.SEEDED

            app.state.lifecycle = LifecycleState.SERVING
            logger.info("Serving customers")
            yield
        except StorageUnavailable as exc:
            logger.error("Startup aborted in state %s: %s", app.state.lifecycle.value, exc)
            raise
        finally:
            store.close()
            logger.info("Customer store closed")

    app = FastAPI(title="Customer API", version="0.1.0", lifespan=lifespan)
    app.state.lifecycle = LifecycleState.UNINITIALIZED
    app.state.store = store
    app.include_router(customer_router(store))
    app.include_router(health_router(store))
    return app


app = create_app()


def run() -> None:
    """Configure logging and serve the application with Uvicorn."""

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    logger.info("Starting customer API on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
