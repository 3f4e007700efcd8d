"""
Code Corps API Server

Entry point for the FastAPI application.
"""

import asyncio

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from codecorps.api.auth import router as auth_router
from codecorps.api.v1 import router as api_v1_router
from codecorps.core.changeset import ValidationFailed
from codecorps.core.config import Settings, get_settings
from codecorps.core.redis import close_redis, redis_available
from codecorps.core.storage import S3ImageStore, get_image_store
from codecorps_shared.schemas.common import APIError, ErrorBody, FieldErrorItem

settings = get_settings()
log = structlog.get_logger()


def configure_logging(settings: Settings) -> None:
    """structlog setup: JSON lines in production, console output when
    ``log_format`` is "text". Events below ``log_level`` are dropped."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if settings.log_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.debug))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level.lower()),
    )


async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    """Render changeset errors as a 422 with one entry per field error."""
    body = APIError(
        error=ErrorBody(
            code="VALIDATION_FAILED",
            message="The submitted attributes are invalid.",
            status=422,
            fields=[
                FieldErrorItem(field=e.field, message=e.render(), meta=e.meta)
                for e in exc.changeset.errors
            ],
        )
    )
    return JSONResponse(status_code=422, content=body.model_dump())


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings)

    app = FastAPI(
        title="Code Corps",
        description="Code Corps API: user accounts and organization payment accounts.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(ValidationFailed, validation_failed_handler)

    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint for startup probes."""
        if not await redis_available():
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("Code Corps API starting", debug=settings.debug, image_store=settings.image_store)
        store = get_image_store()
        if isinstance(store, S3ImageStore):
            await asyncio.to_thread(store.ensure_bucket)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("Code Corps API shutting down")
        await close_redis()

    return app


app = create_app()
