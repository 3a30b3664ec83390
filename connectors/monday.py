"""
MondayConnector — OAuth2 for the monday.com API.
"""

from __future__ import annotations

import logging
from typing import List
from urllib.parse import urlencode

from connectors.base import BaseConnector

logger = logging.getLogger(__name__)

_MONDAY_AUTH_URL = "https://auth.monday.com/oauth2/authorize"
_MONDAY_TOKEN_URL = "https://auth.monday.com/oauth2/token"


class MondayConnector(BaseConnector):
    """OAuth2 connector for monday.com."""

    @property
    def provider_name(self) -> str:
        return "monday"

    @property
    def display_name(self) -> str:
        return "monday.com"

    @property
    def scopes(self) -> List[str]:
        return ["me:read", "boards:read", "boards:write"]

    def get_auth_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri(),
            "scope": " ".join(self.scopes),
            "state": state,
        }
        return f"{_MONDAY_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        async with self._client_factory() as client:
            resp = await client.post(
                _MONDAY_TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                    "redirect_uri": self.redirect_uri(),
                },
            )
            resp.raise_for_status()
            data = resp.json()

        access_token = data.get("access_token")
        if not access_token:
            raise ValueError(f"monday.com OAuth error: {data.get('error', 'no access_token')}")
        return access_token
