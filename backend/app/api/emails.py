# backend/app/api/emails.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.app.deps import get_gmail_client
from backend.app.schemas import EmailListResponse, EmailOut, SuccessResponse
from gmail_inbox.app import inbox
from gmail_inbox.errors import GmailAPIError
from gmail_inbox.gmail.client import GmailClient

router = APIRouter()


def _upstream_error(exc: GmailAPIError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))


@router.get("/gmail/profile")
def profile(client: GmailClient = Depends(get_gmail_client)) -> Dict[str, Any]:
    try:
        return inbox.get_profile(client)
    except GmailAPIError as exc:
        raise _upstream_error(exc) from exc


@router.get("/emails", response_model=EmailListResponse)
def list_emails(
    limit: Optional[str] = None,
    q: str = "",
    search: str = "",
    page_token: Optional[str] = Query(default=None, alias="pageToken"),
    client: GmailClient = Depends(get_gmail_client),
) -> EmailListResponse:
    try:
        page = inbox.list_emails(
            client,
            limit=inbox.parse_limit(limit),
            query=q,
            page_token=page_token,
            search=search,
        )
    except GmailAPIError as exc:
        raise _upstream_error(exc) from exc

    return EmailListResponse(
        emails=[EmailOut.model_validate(e) for e in page.emails],
        next_page_token=page.next_page_token,
    )


@router.get("/emails/{message_id}", response_model=EmailOut)
def get_email(message_id: str, client: GmailClient = Depends(get_gmail_client)) -> EmailOut:
    try:
        email = inbox.get_email(client, message_id)
    except GmailAPIError as exc:
        raise _upstream_error(exc) from exc
    return EmailOut.model_validate(email)


@router.post("/emails/{message_id}/read", response_model=SuccessResponse)
def mark_read(message_id: str, client: GmailClient = Depends(get_gmail_client)) -> SuccessResponse:
    try:
        inbox.mark_as_read(client, message_id)
    except GmailAPIError as exc:
        raise _upstream_error(exc) from exc
    return SuccessResponse(success=True)
