"""
OAuth handoff orchestrator — drives the chained authorization flow.

The chain is derived from stored data, never from session-local progress:
every step looks at the user's Connection record, finds the first provider
whose token is still missing, and sends the user there with a freshly
signed state.  An abandoned chain therefore resumes wherever it stopped.

    start ──► provider 1 ──► callback 1 ──► provider 2 ──► callback 2 ──► backToUrl
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel

from connectors.base import BaseConnector
from connectors.connection_service import ConnectionService
from connectors.errors import UpstreamExchangeError, ValidationError
from connectors.models import Connection, ConnectionUpdate
from connectors.state import StatePayload, StateSigner

logger = logging.getLogger(__name__)


class AuthorizationStep(BaseModel):
    """Where to send the browser next."""

    redirect_url: str
    provider: Optional[str] = None   # next provider, None once the chain is complete

    @property
    def done(self) -> bool:
        return self.provider is None


class OAuthOrchestrator:
    def __init__(
        self,
        connections: ConnectionService,
        signer: StateSigner,
        providers: List[BaseConnector],
    ):
        if not providers:
            raise ValueError("At least one OAuth provider is required")
        self._connections = connections
        self._signer = signer
        self._providers = list(providers)
        self._by_name = {p.provider_name: p for p in self._providers}

    @property
    def providers(self) -> List[BaseConnector]:
        return list(self._providers)

    def pending_providers(self, connection: Optional[Connection]) -> List[BaseConnector]:
        """Providers without a stored token, in chain order."""
        if connection is None:
            return list(self._providers)
        return [p for p in self._providers if not connection.has(p.token_field)]

    def _redirect_to(
        self,
        provider: BaseConnector,
        user_id: str,
        back_to_url: str,
        extra: Dict[str, str],
    ) -> AuthorizationStep:
        state = self._signer.issue(
            StatePayload(
                user_id=user_id,
                back_to_url=back_to_url,
                provider=provider.provider_name,
                extra=extra,
            )
        )
        logger.info("Redirecting user %s to %s authorization", user_id, provider.provider_name)
        return AuthorizationStep(
            redirect_url=provider.get_auth_url(state),
            provider=provider.provider_name,
        )

    async def start(
        self,
        user_id: str,
        back_to_url: str,
        extra: Optional[Dict[str, str]] = None,
    ) -> AuthorizationStep:
        """Begin (or resume) authorization for ``user_id``."""
        if not user_id:
            raise ValidationError("User id is required.")
        if not back_to_url:
            raise ValidationError("backToUrl is required.")

        connection = await self._connections.get_by_user_id(user_id)
        pending = self.pending_providers(connection)
        if not pending:
            logger.info("User %s already authorized with all providers", user_id)
            return AuthorizationStep(redirect_url=back_to_url)
        return self._redirect_to(pending[0], user_id, back_to_url, dict(extra or {}))

    async def handle_callback(
        self,
        provider: str,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
        path_user_id: Optional[str] = None,
    ) -> AuthorizationStep:
        """
        Complete one hop of the chain.

        The state is verified before anything else happens; it is the only
        identity carrier that survives a third-party redirect.
        """
        connector = self._by_name.get(provider)
        payload = self._signer.verify(state, provider=provider)
        user_id = payload.user_id
        if connector is None:
            raise ValidationError(f"Unknown OAuth provider: {provider}")
        if path_user_id is not None and path_user_id != user_id:
            logger.warning(
                "Callback path user %s differs from state user %s; using state",
                path_user_id,
                user_id,
            )

        if error or not code:
            logger.error(
                "%s authorization for user %s returned no code (error=%s)",
                provider,
                user_id,
                error,
            )
            raise UpstreamExchangeError(f"{provider} authorization failed: {error or 'missing code'}")

        try:
            token = await connector.exchange_code(code)
        except Exception as exc:
            logger.error("Token exchange with %s failed for user %s: %s", provider, user_id, exc)
            raise UpstreamExchangeError(f"{provider} token exchange failed: {exc}") from exc

        connection = await self._connections.upsert(
            user_id, ConnectionUpdate(**{connector.token_field: token})
        )

        pending = self.pending_providers(connection)
        if pending:
            return self._redirect_to(pending[0], user_id, payload.back_to_url, payload.extra)

        logger.info("Authorization chain complete for user %s", user_id)
        return AuthorizationStep(redirect_url=payload.back_to_url)
