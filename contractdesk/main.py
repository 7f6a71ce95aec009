"""Contract Desk API: FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contractdesk.core.config import settings
from contractdesk.core.exceptions import register_exception_handlers
from contractdesk.core.normalize import utc_now
from contractdesk.db.base import dispose_engines
from contractdesk.middleware.request_log import RequestLogMiddleware
from contractdesk.routers.auth import router as auth_router
from contractdesk.routers.contracts import router as contracts_router
from contractdesk.routers.employees import router as employees_router
from contractdesk.routers.integrations import router as integrations_router
from contractdesk.schemas.common import HealthResponse


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await dispose_engines()


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )

    # --- CORS: bearer header only, so no credentials ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=list(settings.cors_allow_methods),
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_middleware(RequestLogMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(integrations_router)
    app.include_router(contracts_router)
    app.include_router(employees_router)

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(now=utc_now())

    return app


app = create_app()
