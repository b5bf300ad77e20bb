from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence

from google.auth.exceptions import GoogleAuthError, RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gmail_inbox.errors import GmailAPIError
from gmail_inbox.models import MessagePage, MessageStub, UNREAD_LABEL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GmailClientConfig:
    # Gmail userId, "me" refers to the authenticated user.
    user_id: str = "me"
    # Sub-requests per batch HTTP call; Gmail throttles large batches.
    batch_size: int = 50


def _status_of(exc: HttpError) -> int:
    status = getattr(exc, "status_code", None) or getattr(exc.resp, "status", None)
    try:
        return int(status) if status else 500
    except (TypeError, ValueError):
        return 500


def _reason_of(exc: HttpError) -> str:
    return getattr(exc, "reason", None) or str(exc)


def _to_api_error(exc: Exception, action: str) -> GmailAPIError:
    if isinstance(exc, HttpError):
        return GmailAPIError(f"{action} failed: {_reason_of(exc)}", status_code=_status_of(exc))
    if isinstance(exc, RefreshError):
        return GmailAPIError(f"{action} failed: {exc}", status_code=401)
    return GmailAPIError(f"{action} failed: {exc}", status_code=500)


@contextmanager
def _gmail_errors(action: str) -> Iterator[None]:
    try:
        yield
    except (HttpError, GoogleAuthError, OSError) as exc:
        logger.error("Gmail %s failed: %s", action, exc)
        raise _to_api_error(exc, action) from exc


class GmailClient:
    """
    Gmail API wrapper bound to one user's credentials.

    The credentials are passed in by the caller per request, so several
    clients for different accounts can live side by side.
    """

    def __init__(
        self,
        credentials: Optional[Credentials],
        cfg: Optional[GmailClientConfig] = None,
        service: Any = None,
    ):
        self._cfg = cfg or GmailClientConfig()
        self._creds = credentials
        self._service = service

    @property
    def service(self):
        if self._service is None:
            if self._creds is None:
                raise RuntimeError("GmailClient has no credentials.")
            self._service = build("gmail", "v1", credentials=self._creds, cache_discovery=False)
        return self._service

    def list_messages(
        self,
        query: str = "",
        max_results: int = 20,
        page_token: Optional[str] = None,
    ) -> MessagePage:
        """
        List message stubs matching a Gmail search query.
        Example query: 'newer_than:7d in:inbox -category:promotions'
        """
        params: Dict[str, Any] = {
            "userId": self._cfg.user_id,
            "q": query,
            "maxResults": max_results,
        }
        if page_token:
            params["pageToken"] = page_token

        with _gmail_errors("list messages"):
            resp = self.service.users().messages().list(**params).execute()

        stubs = [
            MessageStub(id=m["id"], thread_id=m.get("threadId"))
            for m in resp.get("messages") or []
        ]
        logger.debug("Listed %d messages (query=%r)", len(stubs), query)
        return MessagePage(messages=stubs, next_page_token=resp.get("nextPageToken") or None)

    def get_message(self, message_id: str, fmt: str = "full") -> Dict[str, Any]:
        """
        Fetch a full message resource.
        fmt: 'full' | 'metadata' | 'minimal' | 'raw'
        """
        with _gmail_errors(f"fetch message {message_id}"):
            return (
                self.service.users()
                .messages()
                .get(userId=self._cfg.user_id, id=message_id, format=fmt)
                .execute()
            )

    def get_messages(self, message_ids: Sequence[str], fmt: str = "full") -> List[Dict[str, Any]]:
        """
        Fetch many messages through batch HTTP requests.

        Returns resources in the order of message_ids. Any failed fetch
        fails the whole call.
        """
        ids = list(message_ids)
        results: List[Optional[Dict[str, Any]]] = [None] * len(ids)
        failures: List[Exception] = []

        def on_response(request_id: str, response: Dict[str, Any], exception: Exception) -> None:
            if exception is not None:
                failures.append(exception)
                return
            results[int(request_id)] = response

        size = max(1, self._cfg.batch_size)
        for start in range(0, len(ids), size):
            batch = self.service.new_batch_http_request(callback=on_response)
            for index in range(start, min(start + size, len(ids))):
                request = self.service.users().messages().get(
                    userId=self._cfg.user_id,
                    id=ids[index],
                    format=fmt,
                )
                batch.add(request, request_id=str(index))

            with _gmail_errors("fetch messages"):
                batch.execute()

            if failures:
                logger.error("Gmail fetch messages failed: %s", failures[0])
                raise _to_api_error(failures[0], "fetch messages") from failures[0]

        missing = [ids[i] for i, r in enumerate(results) if r is None]
        if missing:
            raise GmailAPIError(f"fetch messages failed: no response for {missing[0]}")
        return [r for r in results if r is not None]

    def modify_labels(
        self,
        message_id: str,
        add: Sequence[str] = (),
        remove: Sequence[str] = (),
    ) -> Dict[str, Any]:
        body: Dict[str, List[str]] = {}
        if add:
            body["addLabelIds"] = list(add)
        if remove:
            body["removeLabelIds"] = list(remove)
        with _gmail_errors(f"modify message {message_id}"):
            return (
                self.service.users()
                .messages()
                .modify(userId=self._cfg.user_id, id=message_id, body=body)
                .execute()
            )

    def mark_as_read(self, message_id: str) -> None:
        self.modify_labels(message_id, remove=[UNREAD_LABEL])

    def get_profile(self) -> Dict[str, Any]:
        """Get the Gmail profile of the authenticated user."""
        with _gmail_errors("get profile"):
            return self.service.users().getProfile(userId=self._cfg.user_id).execute()
