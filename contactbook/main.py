"""FastAPI application wiring for the contactbook service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.auth import router as auth_router
from .api.contacts import router as contacts_router
from .config import Settings, get_settings
from .domain.contacts import ContactService
from .domain.service import AccountService
from .errors import ConfigError, register_error_handlers
from .repository import AccountRepository, ContactRepository, apply_schema
from .security.passwords import PasswordHasher
from .security.tokens import TokenService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    """Install the root handler once; repeated calls only adjust the level."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    settings: Settings = app.state.settings
    if not settings.jwt_secret:
        logger.critical("JWT_SECRET is not set; refusing to start without a signing secret")
        raise ConfigError("JWT_SECRET must be set")

    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    if settings.auto_migrate:
        apply_schema(pool)
    app.state.pool = pool
    app.state.account_service = AccountService(
        AccountRepository(pool),
        PasswordHasher(),
        app.state.token_service,
        token_ttl_hours=settings.token_ttl_hours,
    )
    app.state.contact_service = ContactService(ContactRepository(pool))
    logger.info("%s %s ready", settings.app_name, settings.version)
    try:
        yield
    finally:
        pool.close()


def create_app(settings: Settings | None = None, *, with_datastore: bool = True) -> FastAPI:
    """Build the application.

    With ``with_datastore=False`` no lifespan is attached and the caller is
    responsible for placing services on ``app.state``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        lifespan=lifespan if with_datastore else None,
    )
    app.state.settings = settings
    app.state.token_service = TokenService(settings.jwt_secret)

    # CORS for local frontend dev; credentials are needed for the session cookie
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )
    register_error_handlers(app)

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, str]:
        """Return a minimal readiness indicator used by orchestration systems."""
        return {"status": "ok"}

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(auth_router)
    app.include_router(contacts_router)
    return app


app = create_app()
