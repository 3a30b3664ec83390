"""
ConnectorRegistry — holds the OAuth connectors available to this process.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from config.settings import Settings
from connectors.base import BaseConnector, ClientFactory
from connectors.github import GitHubConnector
from connectors.monday import MondayConnector

logger = logging.getLogger(__name__)


class ConnectorRegistry:
    """Registry of OAuth connectors, built once at startup."""

    def __init__(self, connectors: Iterable[BaseConnector] = ()):
        self._connectors: Dict[str, BaseConnector] = {}
        for conn in connectors:
            self.register(conn)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client_factory: Optional[ClientFactory] = None,
    ) -> "ConnectorRegistry":
        """Build the monday.com and GitHub connectors from configuration."""
        return cls([
            MondayConnector(
                settings.monday_client_id,
                settings.monday_client_secret,
                settings.oauth_redirect_base,
                client_factory,
            ),
            GitHubConnector(
                settings.github_client_id,
                settings.github_client_secret,
                settings.oauth_redirect_base,
                client_factory,
            ),
        ])

    def register(self, conn: BaseConnector) -> None:
        if not conn.is_configured():
            logger.warning(
                "Connector %s registered without client_id/secret; exchanges will fail",
                conn.provider_name,
            )
        self._connectors[conn.provider_name] = conn
        logger.info("Connector registered: %s (%s)", conn.display_name, conn.provider_name)

    def ordered(self, providers: Iterable[str]) -> List[BaseConnector]:
        """Return connectors for ``providers`` in the given order."""
        providers = list(providers)
        missing = [p for p in providers if p not in self._connectors]
        if missing:
            raise ValueError(f"Unknown OAuth providers: {missing}")
        return [self._connectors[p] for p in providers]
