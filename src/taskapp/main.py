"""ASGI entry point: builds the FastAPI app and wires routers and handlers."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from taskapp.api.routes import tasks, users
from taskapp.config import get_settings
from taskapp.core.logging import setup_logging
from taskapp.database import create_tables, init_db
from taskapp.telemetry import TelemetryManager

settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)

telemetry = TelemetryManager(settings)
telemetry.setup()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup, flush telemetry on shutdown."""
    logger.info(f"Starting {settings.app_name} ({settings.environment})")

    init_db(settings)
    if settings.is_sqlite:
        # SQLite deployments are not migrated with Alembic
        create_tables()
    logger.info("Database initialized")

    yield

    telemetry.shutdown()
    logger.info(f"Stopped {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    description="Multi-user task tracking API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.otel_enabled:
    FastAPIInstrumentor.instrument_app(app)
    logger.info("FastAPI instrumented with OpenTelemetry")

app.include_router(users.router)
app.include_router(tasks.router)


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report invalid input as 400 rather than FastAPI's default 422.

    The rejected values are left out so credentials are never echoed back.
    """
    errors = [
        {key: value for key, value in error.items() if key != "input"} for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"detail": errors}),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything unexpected becomes a bare 500; details stay in the log."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "taskapp.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )
