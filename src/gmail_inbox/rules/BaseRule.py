from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from gmail_inbox.models import Category
from gmail_inbox.parsing.parser import get_header
from gmail_inbox.rules.core import MailItem


class BaseRule(ABC):
    """
    Base class for category rules.

    Matching is plain lower-cased substring search: no tokenization and no
    word boundaries, so "dealership" contains "deal".
    """

    # Human-/debug-friendly unique name
    name: str = "base_rule"

    # Category assigned when the rule matches
    category: Category = Category.PRIMARY

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, category={self.category.value!r})"

    # --- Helpers (None-safe, case-insensitive) ---

    def norm(self, s: str | None) -> str:
        """Normalize text for matching (None-safe, lowercased)."""
        return (s or "").lower()

    def header(self, mail: MailItem, name: str) -> str:
        """Get a header value normalized (lowercased)."""
        return self.norm(get_header(mail.headers, name))

    def subject(self, mail: MailItem) -> str:
        return self.header(mail, "Subject")

    def sender(self, mail: MailItem) -> str:
        # Whole From value, display name included.
        return self.header(mail, "From")

    def snippet(self, mail: MailItem) -> str:
        return self.norm(mail.snippet)

    def contains_any(self, text: str | None, needles: Sequence[str]) -> bool:
        """True if any needle is a substring of text (case-insensitive)."""
        t = self.norm(text)
        return any(n.lower() in t for n in needles)

    # --- Rule API ---

    @abstractmethod
    def match(self, mail: MailItem) -> bool:
        raise NotImplementedError
