from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from gmail_inbox.models import NormalizedEmail, RawMessage, STARRED_LABEL, UNREAD_LABEL
from gmail_inbox.parsing.parser import (
    date_from_epoch_ms,
    extract_body,
    get_header,
    parse_address,
    parse_date,
)
from gmail_inbox.rules.classification import categorize

logger = logging.getLogger(__name__)

RawInput = Union[RawMessage, Dict[str, Any]]


def _resolve_date(raw: RawMessage, date_header: str) -> Tuple[Optional[str], int]:
    parsed = parse_date(date_header)
    if parsed is not None:
        return parsed

    # Fall back to Gmail's receive time, then to the epoch with no ISO string.
    if raw.internal_date_ms is not None:
        logger.warning(
            "Unparseable Date header %r on message %s, using internalDate",
            date_header,
            raw.id,
        )
        return date_from_epoch_ms(raw.internal_date_ms)

    logger.warning("Unparseable Date header %r on message %s", date_header, raw.id)
    return None, 0


def parse_message(message: RawInput, *, body_policy: str = "last") -> NormalizedEmail:
    """Turn one Gmail message resource into a flat, UI-ready record."""
    raw = message if isinstance(message, RawMessage) else RawMessage.from_api(message)
    headers = raw.headers

    sender = parse_address(get_header(headers, "From"))
    body = extract_body(raw.payload, policy=body_policy)
    date, timestamp = _resolve_date(raw, get_header(headers, "Date"))
    labels = list(raw.label_ids)

    return NormalizedEmail(
        id=raw.id,
        thread_id=raw.thread_id,
        sender_name=sender.name,
        sender_email=sender.email,
        subject=get_header(headers, "Subject"),
        snippet=raw.snippet,
        body_text=body.text,
        body_html=body.html,
        date=date,
        timestamp=timestamp,
        category=categorize(headers, raw.snippet),
        is_unread=UNREAD_LABEL in labels,
        is_starred=STARRED_LABEL in labels,
        labels=labels,
    )


def sort_newest_first(emails: Iterable[NormalizedEmail]) -> List[NormalizedEmail]:
    # sorted() is stable with reverse=True, so ties keep input order.
    return sorted(emails, key=lambda e: e.timestamp, reverse=True)


def normalize(raw_messages: Iterable[RawInput], *, body_policy: str = "last") -> List[NormalizedEmail]:
    """Parse every message and return them newest first."""
    return sort_newest_first(parse_message(m, body_policy=body_policy) for m in raw_messages)


def filter_emails(emails: Iterable[NormalizedEmail], query: str | None) -> List[NormalizedEmail]:
    """Keep emails whose subject or sender name contains query (case-insensitive)."""
    needle = (query or "").lower()
    if not needle:
        return list(emails)
    return [
        e for e in emails
        if needle in e.subject.lower() or needle in e.sender_name.lower()
    ]
