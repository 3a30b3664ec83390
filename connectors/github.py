"""
GitHubConnector — OAuth2 for GitHub API access.

Classic OAuth App flow: the user authorizes, GitHub redirects back with a
code, and the code is exchanged for a non-expiring access token.
"""

from __future__ import annotations

import logging
from typing import List
from urllib.parse import urlencode

from connectors.base import BaseConnector

logger = logging.getLogger(__name__)

# GitHub OAuth2 endpoints
_GH_AUTH_URL = "https://github.com/login/oauth/authorize"
_GH_TOKEN_URL = "https://github.com/login/oauth/access_token"


class GitHubConnector(BaseConnector):
    """OAuth2 connector for GitHub."""

    @property
    def provider_name(self) -> str:
        return "github"

    @property
    def display_name(self) -> str:
        return "GitHub"

    @property
    def scopes(self) -> List[str]:
        return ["repo", "read:user"]

    def get_auth_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri(),
            "scope": " ".join(self.scopes),
            "state": state,
        }
        return f"{_GH_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> str:
        async with self._client_factory() as client:
            token_resp = await client.post(
                _GH_TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                    "redirect_uri": self.redirect_uri(),
                },
                headers={"Accept": "application/json"},
            )
            token_resp.raise_for_status()
            token_data = token_resp.json()

        # GitHub reports OAuth errors with a 200 status
        if "error" in token_data:
            raise ValueError(
                f"GitHub OAuth error: {token_data.get('error_description', token_data['error'])}"
            )
        if not token_data.get("access_token"):
            raise ValueError("GitHub OAuth response has no access_token")
        return token_data["access_token"]
