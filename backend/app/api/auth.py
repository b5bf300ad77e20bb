# backend/app/api/auth.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from backend.app.deps import get_oauth_flows, get_settings, get_token_store
from backend.app.schemas import AuthStatusResponse, AuthUrlResponse
from gmail_inbox.auth.oauth import OAuthFlowRegistry
from gmail_inbox.auth.tokens import TokenStore
from gmail_inbox.config.settings import Settings
from gmail_inbox.errors import OAuthNotConfiguredError

logger = logging.getLogger(__name__)

router = APIRouter()


def _start(settings: Settings, flows: OAuthFlowRegistry) -> str:
    try:
        return flows.start(settings)
    except OAuthNotConfiguredError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/auth/url", response_model=AuthUrlResponse)
def auth_url(
    settings: Settings = Depends(get_settings),
    flows: OAuthFlowRegistry = Depends(get_oauth_flows),
) -> AuthUrlResponse:
    return AuthUrlResponse(url=_start(settings, flows))


@router.get("/auth/google")
def auth_google(
    settings: Settings = Depends(get_settings),
    flows: OAuthFlowRegistry = Depends(get_oauth_flows),
) -> RedirectResponse:
    # Same-page flow: send the browser straight to Google.
    return RedirectResponse(_start(settings, flows))


@router.get("/auth/status", response_model=AuthStatusResponse)
def auth_status(
    settings: Settings = Depends(get_settings),
    store: TokenStore = Depends(get_token_store),
) -> AuthStatusResponse:
    return AuthStatusResponse(configured=settings.oauth_configured, authenticated=store.exists())


@router.get("/oauth2callback")
def oauth_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    flows: OAuthFlowRegistry = Depends(get_oauth_flows),
    store: TokenStore = Depends(get_token_store),
) -> RedirectResponse:
    if not code:
        raise HTTPException(status_code=400, detail="No code provided")

    if not settings.oauth_configured:
        raise HTTPException(
            status_code=500,
            detail="OAuth client not configured. Please check your .env file and restart the server.",
        )

    try:
        creds = flows.finish(settings, code=code, state=state)
    except Exception as exc:
        logger.error("Error retrieving access token: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error retrieving access token: {exc}") from exc

    store.save(creds)
    logger.info("Tokens acquired, saved to %s", store.path)

    # Back to the inbox UI instead of a success page.
    return RedirectResponse(settings.frontend_url)
