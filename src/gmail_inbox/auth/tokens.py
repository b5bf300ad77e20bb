from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from google.auth.exceptions import GoogleAuthError, RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from gmail_inbox.auth.oauth import SCOPES
from gmail_inbox.errors import GmailAPIError

logger = logging.getLogger(__name__)


class TokenStore:
    """
    File-backed cache for the user's OAuth token.

    Credentials are read per call and handed to the caller explicitly;
    nothing is kept in process-wide state.
    """

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def save(self, creds: Credentials) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(creds.to_json(), encoding="utf-8")

    def load(self) -> Optional[Credentials]:
        """
        Return valid credentials, refreshing and re-saving them if expired.
        Revoked tokens yield None; a refresh that fails in transit raises GmailAPIError.
        """
        if not self._path.exists():
            return None

        try:
            creds = Credentials.from_authorized_user_file(str(self._path), SCOPES)
        except (ValueError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable token file %s: %s", self._path, exc)
            return None

        if creds.valid:
            return creds

        if not creds.refresh_token:
            return None

        try:
            creds.refresh(Request())
        except RefreshError as exc:
            logger.warning("Token refresh failed: %s", exc)
            return None
        except GoogleAuthError as exc:
            # Network or transport failure, the stored token may still be good.
            logger.error("Token refresh failed: %s", exc)
            raise GmailAPIError(f"Token refresh failed: {exc}", status_code=502) from exc

        self.save(creds)
        logger.info("Refreshed Gmail access token")
        return creds
