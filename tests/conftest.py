from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import pytest


def b64url(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def make_message(
    message_id: str = "m1",
    *,
    sender: str = '"Jane Doe" <jane@example.com>',
    subject: str = "Hello",
    date: str = "Mon, 01 Jan 2024 10:00:00 +0000",
    snippet: str = "Hello there",
    label_ids: Optional[List[str]] = None,
    extra_headers: Optional[Dict[str, str]] = None,
    text: Optional[str] = "Hello",
    html: Optional[str] = "<p>Hello</p>",
    internal_date: Optional[str] = None,
) -> Dict[str, Any]:
    """Gmail users.messages.get(format=full) resource with a multipart/alternative body."""
    headers = [
        {"name": "From", "value": sender},
        {"name": "Subject", "value": subject},
        {"name": "Date", "value": date},
    ]
    for name, value in (extra_headers or {}).items():
        headers.append({"name": name, "value": value})

    parts = []
    if text is not None:
        parts.append({"mimeType": "text/plain", "body": {"data": b64url(text)}})
    if html is not None:
        parts.append({"mimeType": "text/html", "body": {"data": b64url(html)}})

    message: Dict[str, Any] = {
        "id": message_id,
        "threadId": f"t-{message_id}",
        "snippet": snippet,
        "labelIds": label_ids if label_ids is not None else ["INBOX", "UNREAD"],
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": headers,
            "body": {"size": 0},
            "parts": parts,
        },
    }
    if internal_date is not None:
        message["internalDate"] = internal_date
    return message


@pytest.fixture
def sample_message() -> Dict[str, Any]:
    return make_message()


@pytest.fixture
def message_factory():
    return make_message


@pytest.fixture
def encode():
    return b64url


@pytest.fixture
def settings(tmp_path):
    from gmail_inbox.config.settings import Settings

    return Settings(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost:3001/oauth2callback",
        frontend_url="http://localhost:5173/",
        port=3001,
        secrets_dir=tmp_path / "secrets",
    )
