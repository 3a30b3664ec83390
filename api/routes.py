"""
REST API routes — API-key credentials, account unlink, health.
"""

from __future__ import annotations

import logging
import pathlib
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse

from api.dependencies import get_api_key_service, get_connection_service
from auth.dependencies import get_current_user_id
from connectors.connection_service import ConnectionService
from core.api_keys import ApiKeyService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["credentials"])

_AUTHORIZE_PAGE = pathlib.Path(__file__).resolve().parent.parent / "frontend" / "authorize.html"


@router.get("/monday/authorize")
async def authorize_key_entry(
    user_id: str = Depends(get_current_user_id),
) -> FileResponse:
    """Serve the page where the user enters their API key."""
    logger.info("Rendering authorization page for user %s", user_id)
    return FileResponse(_AUTHORIZE_PAGE, media_type="text/html")


@router.get("/get-api-key")
async def get_api_key_status(
    user_id: str = Depends(get_current_user_id),
    api_keys: ApiKeyService = Depends(get_api_key_service),
) -> Dict[str, Any]:
    """
    200 with a masked key when one is stored, 404 otherwise.

    monday.com treats the 404 as "not connected" and opens the
    authorization page.
    """
    return await api_keys.get_status(user_id)


@router.post("/save-api-key")
async def save_api_key(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    api_keys: ApiKeyService = Depends(get_api_key_service),
) -> Dict[str, str]:
    try:
        body = await request.json()
    except ValueError:
        body = {}
    api_key = body.get("apiKey") if isinstance(body, dict) else None
    await api_keys.save(user_id, api_key)
    return {"message": "API Key saved successfully"}


@router.post("/delete-api-key")
async def delete_api_key(
    user_id: str = Depends(get_current_user_id),
    api_keys: ApiKeyService = Depends(get_api_key_service),
) -> Dict[str, str]:
    await api_keys.delete(user_id)
    return {"message": "API Key deleted successfully"}


@router.post("/unlink")
async def unlink_account(
    user_id: str = Depends(get_current_user_id),
    connections: ConnectionService = Depends(get_connection_service),
) -> Dict[str, Any]:
    """Remove every stored credential for the user."""
    removed = await connections.delete(user_id)
    return {"message": "Connection removed", "removed": removed}


@router.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "ok"}
