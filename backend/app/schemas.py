from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from gmail_inbox.models import Category


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class EmailOut(CamelModel):
    id: str
    thread_id: Optional[str] = None
    sender_name: str
    sender_email: str
    subject: str
    snippet: str
    body_html: str
    body_text: str
    date: Optional[str] = None
    timestamp: int
    category: Category
    is_unread: bool
    is_starred: bool
    labels: List[str]


class EmailListResponse(CamelModel):
    emails: List[EmailOut]
    next_page_token: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True


class AuthUrlResponse(BaseModel):
    url: str


class AuthStatusResponse(BaseModel):
    configured: bool
    authenticated: bool
