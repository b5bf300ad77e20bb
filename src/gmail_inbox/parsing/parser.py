from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, Optional, Tuple

from gmail_inbox.models import Header, MessagePart

logger = logging.getLogger(__name__)

TEXT_PLAIN = "text/plain"
TEXT_HTML = "text/html"

# "last": the last matching part in depth-first order wins, "first": the first one does.
BODY_POLICIES = ("last", "first")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_ADDRESS_RE = re.compile(r"(.*?)\s*<(.+)>")
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", flags=re.IGNORECASE | re.DOTALL)
_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", flags=re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")

# Only these entities are decoded; anything else is left untouched.
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&rsquo;", "'"),
    ("&ldquo;", '"'),
    ("&rdquo;", '"'),
)


@dataclass(frozen=True)
class BodyContent:
    text: str = ""
    html: str = ""


@dataclass(frozen=True)
class Sender:
    name: str
    email: str


def get_header(headers: Iterable[Header], name: str) -> str:
    """Return the first header value matching name (case-insensitive), or ""."""
    wanted = name.lower()
    for header in headers:
        if header.name.lower() == wanted:
            return header.value
    return ""


def decode_base64url(data: str) -> str:
    """
    Decode a Gmail base64url body into text.
    Malformed input is returned unchanged.
    """
    if not data:
        return ""

    # Gmail omits padding and some senders use the standard alphabet.
    normalized = data.strip().replace("+", "-").replace("/", "_")
    normalized += "=" * (-len(normalized) % 4)
    try:
        raw = base64.b64decode(normalized, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError):
        logger.debug("Could not decode base64url body (%d chars), keeping raw value", len(data))
        return data
    return raw.decode("utf-8", errors="replace")


def encode_base64url(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def _take(acc: BodyContent, slot: str, value: str, policy: str) -> BodyContent:
    if policy == "first" and getattr(acc, slot):
        return acc
    return replace(acc, **{slot: value})


def _fold_part(part: MessagePart, acc: BodyContent, policy: str) -> BodyContent:
    # Depth-first, children in order.
    if part.mime_type == TEXT_PLAIN and part.has_body:
        acc = _take(acc, "text", decode_base64url(part.body_data or ""), policy)
    if part.mime_type == TEXT_HTML and part.has_body:
        acc = _take(acc, "html", decode_base64url(part.body_data or ""), policy)
    for child in part.parts:
        acc = _fold_part(child, acc, policy)
    return acc


def extract_body(payload: Optional[MessagePart], policy: str = "last") -> BodyContent:
    """
    Flatten a (possibly nested) multipart payload into plain-text and HTML bodies.

    Child parts are walked depth first and fill the slots according to
    `policy`. The root's own inline body only fills a slot that no part
    filled, so parts always take precedence over it.
    """
    if policy not in BODY_POLICIES:
        raise ValueError(f"Unknown body policy: {policy!r}")
    if payload is None:
        return BodyContent()

    root = BodyContent()
    if payload.has_body:
        decoded = decode_base64url(payload.body_data or "")
        if payload.mime_type == TEXT_PLAIN:
            root = BodyContent(text=decoded)
        elif payload.mime_type == TEXT_HTML:
            root = BodyContent(html=decoded)

    if not payload.has_parts:
        return root

    acc = BodyContent()
    for child in payload.parts:
        acc = _fold_part(child, acc, policy)
    return BodyContent(text=acc.text or root.text, html=acc.html or root.html)


def parse_address(value: str) -> Sender:
    """Split a From header like '"Jane Doe" <jane@x.com>' into name and address."""
    match = _ADDRESS_RE.search(value or "")
    if not match:
        return Sender(name=value, email=value)

    email = match.group(2)
    name = match.group(1).replace('"', "").strip()
    return Sender(name=name or email, email=email)


def strip_html(html: Optional[str]) -> str:
    if not html:
        return ""

    text = _STYLE_RE.sub("", html)
    text = _SCRIPT_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)

    for entity, char in _ENTITIES:
        text = text.replace(entity, char)

    # The blank-line pass runs after the single-space collapse and is kept in this order.
    text = re.sub(r"\s+", " ", text)
    text = re.sub(r"\n\s*\n", "\n\n", text)
    return text.strip()


def _to_iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond // 1000:03d}Z"


def _to_epoch_ms(dt: datetime) -> int:
    return (dt - _EPOCH) // timedelta(milliseconds=1)


def parse_date(value: str) -> Optional[Tuple[str, int]]:
    """
    Parse an RFC 2822 (or ISO-8601) date into (ISO-8601 UTC string, epoch ms).
    Returns None when the value cannot be parsed.
    """
    value = (value or "").strip()
    if not value:
        return None

    dt: Optional[datetime] = None
    try:
        dt = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None

    if dt is None:
        return None
    # Naive datetimes ("-0000" zone) are treated as UTC.
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    try:
        dt = dt.astimezone(timezone.utc)
    except OverflowError:
        return None
    return _to_iso(dt), _to_epoch_ms(dt)


def date_from_epoch_ms(ms: int) -> Tuple[str, int]:
    return _to_iso(_EPOCH + timedelta(milliseconds=ms)), ms
