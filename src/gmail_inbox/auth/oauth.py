from __future__ import annotations

import logging
from collections import OrderedDict
from threading import Lock
from typing import Any, Dict, Optional

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from gmail_inbox.config.settings import Settings
from gmail_inbox.errors import OAuthNotConfiguredError

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/userinfo.email",
]

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

# Abandoned logins beyond this many are dropped, oldest first.
MAX_PENDING_FLOWS = 100


def client_config(settings: Settings) -> Dict[str, Any]:
    """Client config in the shape of a downloaded 'web' client secrets file."""
    return {
        "web": {
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
            "auth_uri": GOOGLE_AUTH_URI,
            "token_uri": GOOGLE_TOKEN_URI,
            "redirect_uris": [settings.redirect_uri],
        }
    }


def build_flow(settings: Settings, state: Optional[str] = None) -> Flow:
    # Env credentials win over a credentials.json in the secrets dir.
    if settings.client_id and settings.client_secret:
        flow = Flow.from_client_config(client_config(settings), scopes=SCOPES, state=state)
    elif settings.client_secrets_path.exists():
        flow = Flow.from_client_secrets_file(
            str(settings.client_secrets_path),
            scopes=SCOPES,
            state=state,
        )
    else:
        raise OAuthNotConfiguredError("OAuth client not configured")

    flow.redirect_uri = settings.redirect_uri
    return flow


class OAuthFlowRegistry:
    """Pending authorization flows keyed by OAuth state."""

    def __init__(self, max_pending: int = MAX_PENDING_FLOWS) -> None:
        self._lock = Lock()
        self._max_pending = max(1, max_pending)
        self._flows: "OrderedDict[str, Flow]" = OrderedDict()

    def start(self, settings: Settings) -> str:
        """Create a flow and return the Google consent URL."""
        flow = build_flow(settings)
        auth_url, state = flow.authorization_url(access_type="offline")
        # Keep the flow so the callback reuses its PKCE verifier.
        with self._lock:
            self._flows[state] = flow
            while len(self._flows) > self._max_pending:
                self._flows.popitem(last=False)
        return auth_url

    def finish(self, settings: Settings, code: str, state: Optional[str] = None) -> Credentials:
        """Exchange an authorization code for credentials."""
        flow = None
        if state:
            with self._lock:
                flow = self._flows.pop(state, None)
        if flow is None:
            logger.info("No pending flow for state %r, building a fresh one", state)
            flow = build_flow(settings, state=state)

        flow.fetch_token(code=code)
        return flow.credentials

