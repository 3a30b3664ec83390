"""
OAuth routes — begin authorization and provider callbacks.

The callbacks need no session: the signed ``state`` query parameter is the
identity carrier across the provider redirect.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from api.dependencies import get_orchestrator, get_settings
from auth.dependencies import get_session
from auth.jwt import MondaySession
from config.settings import Settings
from connectors.errors import ValidationError
from core.orchestrator import AuthorizationStep, OAuthOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"])


def _redirect(step: AuthorizationStep) -> RedirectResponse:
    return RedirectResponse(step.redirect_url, status_code=302)


@router.get("/authorize")
async def begin_authorization(
    back_to_url: Optional[str] = Query(None, alias="backToUrl"),
    session: MondaySession = Depends(get_session),
    orchestrator: OAuthOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> RedirectResponse:
    """
    Start (or resume) the OAuth chain.

    Redirects straight back to ``backToUrl`` when every provider is
    already authorized.
    """
    destination = session.back_to_url or back_to_url or settings.default_back_to_url
    if not destination:
        raise ValidationError("backToUrl is required.")
    extra = {"accountId": session.account_id} if session.account_id else {}
    step = await orchestrator.start(session.user_id, destination, extra)
    return _redirect(step)


@router.get("/oauth-callback/{provider}")
async def oauth_callback(
    provider: str,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    orchestrator: OAuthOrchestrator = Depends(get_orchestrator),
) -> RedirectResponse:
    """Provider redirects here after consent."""
    step = await orchestrator.handle_callback(provider, code, state, error=error)
    return _redirect(step)


@router.get("/oauth-callback/{provider}/{user_id}")
async def oauth_callback_for_user(
    provider: str,
    user_id: str,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    orchestrator: OAuthOrchestrator = Depends(get_orchestrator),
) -> RedirectResponse:
    """Same as ``oauth_callback``; the path user id is informational only."""
    step = await orchestrator.handle_callback(
        provider, code, state, error=error, path_user_id=user_id
    )
    return _redirect(step)
