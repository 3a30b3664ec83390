"""
Signed OAuth state tokens.

The state parameter is the only value a provider echoes back to us, so it
carries everything the callback needs (who the user is, where to send them
afterwards, which provider the hop belongs to).  It is base64url JSON signed
with HMAC-SHA256, so no server-side session table is needed.

Format::

    <base64url(envelope JSON)>.<hex HMAC-SHA256 of the encoded part>
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Dict, Optional

from pydantic import BaseModel, Field

from connectors.errors import InvalidStateError

logger = logging.getLogger(__name__)


class StatePayload(BaseModel):
    user_id: str
    back_to_url: str
    provider: Optional[str] = None
    extra: Dict[str, str] = Field(default_factory=dict)


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).decode().rstrip("=")


def _b64decode(data: str) -> bytes:
    return urlsafe_b64decode(data + "=" * (-len(data) % 4))


class StateSigner:
    """Issues and verifies state tokens with a process-wide secret."""

    def __init__(self, secret: str, ttl_seconds: int = 600):
        if not secret:
            raise ValueError("OAuth state secret must not be empty")
        self._secret = secret.encode()
        self._ttl = ttl_seconds

    def _sign(self, encoded: str) -> str:
        return hmac.new(self._secret, encoded.encode(), hashlib.sha256).hexdigest()

    def issue(self, payload: StatePayload) -> str:
        """Serialize and sign ``payload``."""
        now = int(time.time())
        envelope = {
            "p": payload.model_dump(),
            "iat": now,
            "exp": now + self._ttl,
        }
        raw = json.dumps(envelope, separators=(",", ":"), sort_keys=True).encode()
        encoded = _b64encode(raw)
        return f"{encoded}.{self._sign(encoded)}"

    def verify(self, token: Optional[str], provider: Optional[str] = None) -> StatePayload:
        """
        Verify ``token`` and return its payload.

        Raises ``InvalidStateError`` on a malformed token, bad signature,
        undecodable payload, expiry, or (when ``provider`` is given) a state
        issued for another provider.
        """
        try:
            if not token or token.count(".") != 1:
                raise ValueError("bad format")
            encoded, signature = token.split(".", 1)
            if not hmac.compare_digest(signature, self._sign(encoded)):
                raise ValueError("bad signature")
            envelope = json.loads(_b64decode(encoded))
            if int(envelope.get("exp", 0)) < time.time():
                raise ValueError("state expired")
            payload = StatePayload.model_validate(envelope["p"])
            if provider is not None and payload.provider != provider:
                raise ValueError(f"state issued for {payload.provider!r}, not {provider!r}")
        except Exception as exc:
            logger.warning("Rejected OAuth state: %s", exc)
            raise InvalidStateError(str(exc)) from exc
        return payload
