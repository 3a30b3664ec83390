"""
monday.com session tokens.

monday signs a JWT (HS256, the app's signing secret) for every request it
sends to the app, either in the ``Authorization`` header or as the ``token``
query parameter of an authorization URL.  Regular session tokens carry
``userId``/``accountId``/``backToUrl``; short-lived tokens nest the ids under
``dat``.
"""

from __future__ import annotations

import logging
from typing import Optional

import jwt as pyjwt
from pydantic import BaseModel

from connectors.errors import AuthenticationError

logger = logging.getLogger(__name__)


class MondaySession(BaseModel):
    user_id: str
    account_id: Optional[str] = None
    back_to_url: Optional[str] = None


class SessionVerifier:
    def __init__(self, signing_secret: str):
        self._secret = signing_secret

    def verify(self, token: Optional[str]) -> MondaySession:
        """Decode ``token`` and return the session; raises ``AuthenticationError``."""
        if not token:
            raise AuthenticationError("Missing session token.")
        if not self._secret:
            logger.error("MONDAY_SIGNING_SECRET is not configured; rejecting session token")
            raise AuthenticationError("Unauthorized")
        try:
            payload = pyjwt.decode(
                token,
                self._secret,
                algorithms=["HS256"],
                options={"verify_aud": False},
            )
        except pyjwt.ExpiredSignatureError:
            logger.info("Session token expired")
            raise AuthenticationError("Session token has expired.")
        except pyjwt.InvalidTokenError as exc:
            logger.warning("Invalid session token: %s", exc)
            raise AuthenticationError("Invalid session token.")

        dat = payload.get("dat") or {}
        user_id = payload.get("userId") or dat.get("user_id")
        if user_id is None or user_id == "":
            raise AuthenticationError("Session token has no user id.")
        account_id = payload.get("accountId") or dat.get("account_id")
        return MondaySession(
            user_id=str(user_id),
            account_id=str(account_id) if account_id is not None else None,
            back_to_url=payload.get("backToUrl"),
        )
