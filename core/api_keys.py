"""
API-key credentials — for services that use a static key instead of OAuth.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from connectors.connection_service import ConnectionService
from connectors.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

KEY_MASK = "••••••••"
_VISIBLE = 4


def mask_key(api_key: str) -> str:
    """
    First and last four characters around a constant-width mask.

    Keys too short to keep anything hidden are rendered as the mask alone.
    """
    if len(api_key) <= 2 * _VISIBLE:
        return KEY_MASK
    return f"{api_key[:_VISIBLE]}{KEY_MASK}{api_key[-_VISIBLE:]}"


class ApiKeyService:
    def __init__(self, connections: ConnectionService):
        self._connections = connections

    async def get_status(self, user_id: str) -> Dict[str, Any]:
        connection = await self._connections.get_by_user_id(user_id)
        if connection is None or not connection.api_key:
            logger.info("API key not found for user %s", user_id)
            raise NotFoundError("API Key not found.")
        logger.info("API key found for user %s", user_id)
        return {"connected": True, "maskedKey": mask_key(connection.api_key)}

    async def save(self, user_id: str, api_key: Optional[str]) -> None:
        if not isinstance(api_key, str) or not api_key.strip():
            raise ValidationError("API key is required.")
        await self._connections.upsert(user_id, api_key=api_key.strip())
        logger.info("API key saved for user %s", user_id)

    async def delete(self, user_id: str) -> None:
        await self._connections.remove_fields(user_id, "api_key")
        logger.info("API key deleted for user %s", user_id)
