"""
Credential linkage service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_exception_handlers, register_middleware
from api.routes import router as api_router
from auth.jwt import SessionVerifier
from config.settings import Settings, config
from connectors.connection_service import ConnectionService
from connectors.encryption import TokenCipher
from connectors.registry import ConnectorRegistry
from connectors.routes import router as oauth_router
from connectors.state import StateSigner
from connectors.store import ConnectionStore
from core.api_keys import ApiKeyService
from core.orchestrator import OAuthOrchestrator
from database.session import build_engine, build_session_factory, create_tables

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "aiosqlite"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[ConnectorRegistry] = None,
) -> FastAPI:
    """
    Build the application and its services.

    Everything stateful is constructed here once and shared through
    ``app.state``; route handlers receive it via dependencies.
    """
    settings = settings or config
    registry = registry or ConnectorRegistry.from_settings(settings)

    engine = build_engine(settings.database_url)
    store = ConnectionStore(
        build_session_factory(engine),
        TokenCipher(settings.encryption_keys()),
    )
    connection_service = ConnectionService(store)
    orchestrator = OAuthOrchestrator(
        connection_service,
        StateSigner(settings.oauth_state_secret, settings.oauth_state_ttl),
        registry.ordered(settings.provider_chain()),
    )

    app = FastAPI(
        title="Credential Linkage Service",
        version="1.0.0",
        description="Links monday.com users to third-party credentials.",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.connection_service = connection_service
    app.state.orchestrator = orchestrator
    app.state.api_key_service = ApiKeyService(connection_service)
    app.state.session_verifier = SessionVerifier(settings.monday_signing_secret)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(oauth_router)
    app.include_router(api_router)

    @app.on_event("startup")
    async def on_startup():
        logger.info("Ensuring database tables…")
        await create_tables(engine)
        logger.info(
            "OAuth chain: %s",
            " → ".join(p.provider_name for p in orchestrator.providers),
        )
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await engine.dispose()

    return app


if __name__ == "__main__":
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
