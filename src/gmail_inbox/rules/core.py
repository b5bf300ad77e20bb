from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol, Tuple

from gmail_inbox.models import Category, Header


@dataclass(frozen=True)
class MailItem:
    headers: Tuple[Header, ...]  # e.g. (Header("From", "..."), Header("Subject", "..."))
    snippet: str = ""


class Rule(Protocol):
    name: str
    category: Category

    def match(self, mail: MailItem) -> bool: ...
