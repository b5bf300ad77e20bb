from __future__ import annotations


class GmailInboxError(Exception):
    """Base class for errors raised by gmail_inbox."""


class GmailAPIError(GmailInboxError):
    """An upstream Gmail API call failed."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class NotAuthenticatedError(GmailInboxError):
    """No usable OAuth credentials are stored."""


class OAuthNotConfiguredError(GmailInboxError):
    """Neither client id/secret nor a client secrets file is available."""
