"""
BaseConnector — abstract interface for all OAuth2 connectors.

Every provider (monday.com, GitHub, …) subclasses this and implements the
authorization URL and the code-for-token exchange.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import httpx

ClientFactory = Callable[[], httpx.AsyncClient]


class BaseConnector(ABC):
    """Abstract base for all OAuth2 connectors."""

    def __init__(
        self,
        client_id: str = "",
        client_secret: str = "",
        redirect_base: str = "",
        client_factory: Optional[ClientFactory] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_base = redirect_base.rstrip("/")
        self._client_factory = client_factory or (lambda: httpx.AsyncClient(timeout=10))

    # ── Identity ────────────────────────────────────────────────────────
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique slug: 'monday', 'github'."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable: 'monday.com', 'GitHub'."""
        ...

    @property
    @abstractmethod
    def scopes(self) -> List[str]:
        """OAuth scopes required by this connector."""
        ...

    @property
    def token_field(self) -> str:
        """Connection attribute the access token is stored under."""
        return f"{self.provider_name}_token"

    # ── OAuth flow ──────────────────────────────────────────────────────

    def redirect_uri(self) -> str:
        return f"{self.redirect_base}/oauth-callback/{self.provider_name}"

    @abstractmethod
    def get_auth_url(self, state: str) -> str:
        """
        Build the provider's OAuth2 authorization URL.

        Parameters
        ----------
        state : str
            Signed state token (user id, return URL, provider).

        Returns
        -------
        The full URL to redirect the user to.
        """
        ...

    @abstractmethod
    async def exchange_code(self, code: str) -> str:
        """
        Exchange the authorization code for an access token.

        Raises on any transport error or provider-reported error.
        """
        ...

    # ── Helpers ─────────────────────────────────────────────────────────

    def is_configured(self) -> bool:
        """Return True if client id and secret are both set."""
        return bool(self.client_id and self.client_secret)
