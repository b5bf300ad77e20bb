from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Category(str, Enum):
    PRIMARY = "Primary"
    SOCIAL = "Social"
    PROMOTION = "Promotion"
    UPDATE = "Update"


UNREAD_LABEL = "UNREAD"
STARRED_LABEL = "STARRED"


@dataclass(frozen=True)
class Header:
    name: str
    value: str


@dataclass(frozen=True)
class MessagePart:
    """One node of the Gmail MIME tree."""
    mime_type: str = ""
    headers: Tuple[Header, ...] = ()
    # base64url payload, only set on leaves that carry content
    body_data: Optional[str] = None
    parts: Tuple["MessagePart", ...] = ()

    @property
    def has_body(self) -> bool:
        return bool(self.body_data)

    @property
    def has_parts(self) -> bool:
        return len(self.parts) > 0

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> "MessagePart":
        if not data:
            return cls()

        headers: List[Header] = []
        for entry in data.get("headers") or []:
            name = entry.get("name")
            if name is None:
                continue
            headers.append(Header(name=str(name), value=str(entry.get("value") or "")))

        body = data.get("body") or {}
        body_data = body.get("data") if isinstance(body, dict) else None

        return cls(
            mime_type=str(data.get("mimeType") or ""),
            headers=tuple(headers),
            body_data=body_data or None,
            parts=tuple(cls.from_api(p) for p in data.get("parts") or []),
        )


@dataclass(frozen=True)
class RawMessage:
    """
    Typed view over a Gmail `users.messages.get(format="full")` resource.
    Missing fields are explicit None / empty values instead of KeyErrors.
    """
    id: str
    thread_id: Optional[str] = None
    snippet: str = ""
    label_ids: Tuple[str, ...] = ()
    internal_date_ms: Optional[int] = None
    payload: Optional[MessagePart] = None

    @property
    def headers(self) -> Tuple[Header, ...]:
        if self.payload is None:
            return ()
        return self.payload.headers

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RawMessage":
        internal_date = data.get("internalDate")
        try:
            internal_date_ms = int(internal_date) if internal_date is not None else None
        except (TypeError, ValueError):
            internal_date_ms = None

        payload = data.get("payload")
        return cls(
            id=str(data.get("id") or ""),
            thread_id=data.get("threadId"),
            snippet=str(data.get("snippet") or ""),
            label_ids=tuple(str(x) for x in (data.get("labelIds") or [])),
            internal_date_ms=internal_date_ms,
            payload=MessagePart.from_api(payload) if payload is not None else None,
        )


@dataclass(frozen=True)
class NormalizedEmail:
    id: str
    thread_id: Optional[str]
    sender_name: str
    sender_email: str
    subject: str
    snippet: str
    body_text: str
    body_html: str
    # ISO-8601 UTC, None when neither the Date header nor internalDate parse
    date: Optional[str]
    timestamp: int
    category: Category
    is_unread: bool = False
    is_starred: bool = False
    labels: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MessageStub:
    id: str
    thread_id: Optional[str] = None


@dataclass(frozen=True)
class MessagePage:
    messages: List[MessageStub] = field(default_factory=list)
    next_page_token: Optional[str] = None

    @property
    def message_ids(self) -> List[str]:
        return [m.id for m in self.messages]


@dataclass(frozen=True)
class EmailPage:
    emails: List[NormalizedEmail] = field(default_factory=list)
    next_page_token: Optional[str] = None
