from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.logging_utils import configure_logging
from app.services.audit_runtime import AuditRuntime, build_audit_runtime

logger = logging.getLogger(__name__)


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle. Provider API keys are
    optional: a missing key only disables that provider, and fallback mode
    compensates when enabled.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    if not os.getenv("DATABASE_URL", "").strip():
        errors.append("No database URL configured. Set DATABASE_URL.")

    for name in ("PROVIDER_RETRIES", "PROVIDER_BACKOFF_MS"):
        raw = os.getenv(name)
        if raw is not None and not raw.strip().lstrip("-").isdigit():
            errors.append(f"{name}='{raw}' is not an integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed: missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    missing_keys = [
        name
        for name in ("PAGESPEED_API_KEY", "OPEN_PAGERANK_API_KEY", "SERPAPI_KEY")
        if not os.getenv(name, "").strip()
    ]
    if missing_keys:
        logger.warning("Provider keys not set: %s", ", ".join(missing_keys))


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _build_lifespan(runtime: AuditRuntime, *, verify_database: bool):
    @asynccontextmanager
    async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
        """Confirm the store is reachable and run dispatcher consumers for the app's lifetime."""
        if verify_database:
            _check_db()
            logger.info("Database connectivity confirmed")

        consumers_started = False
        if runtime.queue_settings.enabled:
            runtime.dispatcher.start(consumers=runtime.queue_settings.consumers)
            consumers_started = True
        else:
            logger.warning("AUDIT_QUEUE_ENABLED is false; audits will stay queued")
        try:
            yield
        finally:
            if consumers_started:
                runtime.dispatcher.stop(wait=True, timeout=30.0)

    return _lifespan


def create_app(
    *,
    runtime: AuditRuntime | None = None,
    verify_database: bool = True,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Serve with ``uvicorn app.main:create_app --factory``.
    """

    if runtime is None:
        _validate_env()
        runtime = build_audit_runtime()
    configure_logging()

    application = FastAPI(
        title="Page Audit API",
        version="0.1.0",
        lifespan=_build_lifespan(runtime, verify_database=verify_database),
    )
    application.state.audit_runtime = runtime

    from app.api.routers import audits_router, providers_router

    application.include_router(audits_router)
    application.include_router(providers_router)

    @application.get("/health")
    def healthcheck() -> dict[str, object]:
        return {
            "ok": True,
            "service": "audit-api",
            "dispatcher_running": runtime.dispatcher.is_running,
            "pending_jobs": runtime.dispatcher.pending_jobs,
        }

    return application
