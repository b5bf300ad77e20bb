from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from gmail_inbox.models import Category, Header
from gmail_inbox.rules.core import MailItem, Rule
from gmail_inbox.rules.rules import PrimaryRule, PromotionRule, SocialRule, UpdateRule

# Evaluated in this order, first match wins. PrimaryRule always matches.
CATEGORY_RULES: Tuple[Rule, ...] = (
    SocialRule(),
    PromotionRule(),
    UpdateRule(),
    PrimaryRule(),
)


def first_match(mail: MailItem, rules: Sequence[Rule] = CATEGORY_RULES) -> Optional[Rule]:
    for rule in rules:
        if rule.match(mail):
            return rule
    return None


def categorize(headers: Iterable[Header], snippet: str | None) -> Category:
    """Assign exactly one category from headers and the provider snippet."""
    mail = MailItem(headers=tuple(headers), snippet=snippet or "")
    rule = first_match(mail)
    if rule is None:
        return Category.PRIMARY
    return rule.category
