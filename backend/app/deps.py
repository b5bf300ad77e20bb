from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException

from gmail_inbox.auth.oauth import OAuthFlowRegistry
from gmail_inbox.auth.tokens import TokenStore
from gmail_inbox.config.settings import Settings, load_settings
from gmail_inbox.errors import GmailAPIError
from gmail_inbox.gmail.client import GmailClient

_oauth_flows = OAuthFlowRegistry()


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def get_oauth_flows() -> OAuthFlowRegistry:
    return _oauth_flows


def get_token_store(settings: Settings = Depends(get_settings)) -> TokenStore:
    return TokenStore(settings.token_path)


def get_gmail_client(store: TokenStore = Depends(get_token_store)) -> GmailClient:
    # Credentials are loaded per request and passed into the client explicitly.
    try:
        creds = store.load()
    except GmailAPIError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    if creds is None:
        raise HTTPException(status_code=401, detail="Not authenticated. Go to /auth/url first.")
    return GmailClient(creds)
