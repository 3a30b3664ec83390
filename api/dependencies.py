"""
FastAPI dependencies (shared across routes).

Services are built once in ``main.create_app`` and kept on ``app.state``;
these providers hand them to route handlers.
"""

from __future__ import annotations

from fastapi import Request

from config.settings import Settings
from connectors.connection_service import ConnectionService
from core.api_keys import ApiKeyService
from core.orchestrator import OAuthOrchestrator


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_connection_service(request: Request) -> ConnectionService:
    return request.app.state.connection_service


def get_orchestrator(request: Request) -> OAuthOrchestrator:
    return request.app.state.orchestrator


def get_api_key_service(request: Request) -> ApiKeyService:
    return request.app.state.api_key_service
