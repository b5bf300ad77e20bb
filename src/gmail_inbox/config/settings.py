from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from gmail_inbox.config.paths import resolve_dir

DEFAULT_PORT = 3001
DEFAULT_FRONTEND_URL = "http://localhost:5173/"


@dataclass(frozen=True)
class Settings:
    # OAuth client registered in Google Cloud Console.
    client_id: Optional[str]
    client_secret: Optional[str]
    redirect_uri: str
    # Where the OAuth callback sends the browser after login.
    frontend_url: str
    port: int
    secrets_dir: Path
    cors_origins: Tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    @property
    def token_path(self) -> Path:
        return self.secrets_dir / "gmail_token.json"

    @property
    def client_secrets_path(self) -> Path:
        return self.secrets_dir / "credentials.json"

    @property
    def oauth_configured(self) -> bool:
        return bool(self.client_id and self.client_secret) or self.client_secrets_path.exists()


def _parse_port(value: Optional[str]) -> int:
    try:
        return int(value) if value else DEFAULT_PORT
    except ValueError:
        return DEFAULT_PORT


def load_settings() -> Settings:
    """Build settings from the environment (.env is loaded by config.paths)."""
    port = _parse_port(os.getenv("PORT"))
    origins = tuple(
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    )
    return Settings(
        client_id=os.getenv("GOOGLE_CLIENT_ID") or None,
        client_secret=os.getenv("GOOGLE_CLIENT_SECRET") or None,
        redirect_uri=os.getenv("REDIRECT_URI") or f"http://localhost:{port}/oauth2callback",
        frontend_url=os.getenv("FRONTEND_URL") or DEFAULT_FRONTEND_URL,
        port=port,
        secrets_dir=resolve_dir("GMAIL_INBOX_SECRETS_DIR", "secrets"),
        cors_origins=origins or ("*",),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
