"""
FastAPI dependencies for authentication.

Provides ``get_session`` and ``get_current_user_id``, used across all
session-protected routes.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Query, Request

from auth.jwt import MondaySession, SessionVerifier


def _session_verifier(request: Request) -> SessionVerifier:
    return request.app.state.session_verifier


async def get_session(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    token: Optional[str] = Query(None),
    verifier: SessionVerifier = Depends(_session_verifier),
) -> MondaySession:
    """
    Verify the monday session token from the ``Authorization`` header
    (raw or ``Bearer``) or the ``token`` query parameter.
    """
    raw = authorization or token
    if raw and raw.lower().startswith("bearer "):
        raw = raw[7:]
    return verifier.verify(raw)


async def get_current_user_id(
    session: MondaySession = Depends(get_session),
) -> str:
    return session.user_id
