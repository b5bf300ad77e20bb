# src/gmail_inbox/app/inbox.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from gmail_inbox.gmail.client import GmailClient
from gmail_inbox.models import EmailPage, NormalizedEmail
from gmail_inbox.pipeline.normalizer import filter_emails, normalize, parse_message

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
# Gmail's maxResults ceiling for messages.list
MAX_PAGE_SIZE = 500


def parse_limit(raw: Any) -> int:
    """Missing, non-numeric or zero limits fall back to the default page size."""
    try:
        limit = int(str(raw).strip())
    except (TypeError, ValueError):
        return DEFAULT_PAGE_SIZE
    if limit == 0:
        return DEFAULT_PAGE_SIZE
    return max(1, min(limit, MAX_PAGE_SIZE))


def list_emails(
    client: GmailClient,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    query: str = "",
    page_token: Optional[str] = None,
    search: str = "",
) -> EmailPage:
    """
    Fetch one page of messages and return them normalized, newest first.

    Args:
        client: Gmail client bound to the caller's credentials.
        limit: Page size passed to Gmail as maxResults.
        query: Gmail search query (same syntax as the Gmail search box).
        page_token: Opaque cursor from a previous page.
        search: Substring matched against subject and sender name after normalizing.

    Returns:
        EmailPage with the emails and the cursor for the next page (None on the last page).
    """
    page = client.list_messages(query=query, max_results=limit, page_token=page_token)
    if not page.messages:
        return EmailPage(emails=[], next_page_token=None)

    raw_messages = client.get_messages(page.message_ids)
    emails = filter_emails(normalize(raw_messages), search)
    logger.debug("Normalized %d emails (next page: %s)", len(emails), bool(page.next_page_token))
    return EmailPage(emails=emails, next_page_token=page.next_page_token)


def get_email(client: GmailClient, message_id: str) -> NormalizedEmail:
    return parse_message(client.get_message(message_id, fmt="full"))


def mark_as_read(client: GmailClient, message_id: str) -> None:
    client.mark_as_read(message_id)


def get_profile(client: GmailClient) -> Dict[str, Any]:
    return client.get_profile()
