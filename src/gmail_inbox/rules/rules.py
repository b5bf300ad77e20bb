from __future__ import annotations

from gmail_inbox.models import Category
from gmail_inbox.rules.BaseRule import BaseRule
from gmail_inbox.rules.core import MailItem


class SocialRule(BaseRule):
    name = "social"
    category = Category.SOCIAL

    SENDER_MARKERS = (
        "linkedin",
        "twitter",
        "facebook",
        "instagram",
        "github",
    )

    def match(self, mail: MailItem) -> bool:
        return self.contains_any(self.sender(mail), self.SENDER_MARKERS)


class PromotionRule(BaseRule):
    name = "promotion"
    category = Category.PROMOTION

    SUBJECT_MARKERS = (
        "offer",
        "sale",
        "discount",
        "deal",
    )
    SNIPPET_MARKERS = ("unsubscribe",)

    def match(self, mail: MailItem) -> bool:
        # Any List-Unsubscribe value marks bulk mail.
        if self.header(mail, "List-Unsubscribe"):
            return True
        return (
            self.contains_any(self.subject(mail), self.SUBJECT_MARKERS)
            or self.contains_any(self.snippet(mail), self.SNIPPET_MARKERS)
        )


class UpdateRule(BaseRule):
    name = "update"
    category = Category.UPDATE

    SUBJECT_MARKERS = (
        "update",
        "newsletter",
        "notification",
    )
    SENDER_MARKERS = ("noreply", "no-reply")

    def match(self, mail: MailItem) -> bool:
        return (
            self.contains_any(self.subject(mail), self.SUBJECT_MARKERS)
            or self.contains_any(self.sender(mail), self.SENDER_MARKERS)
        )


class PrimaryRule(BaseRule):
    name = "primary"
    category = Category.PRIMARY

    def match(self, mail: MailItem) -> bool:
        return True
