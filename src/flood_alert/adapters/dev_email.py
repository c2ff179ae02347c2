"""
Dev Email Adapter.

Logs emails instead of sending. Used when no Mailgun credentials are
configured, and in tests.

Key behaviors:
- Logs recipient, subject and a body preview
- Returns SKIPPED status (not SENT); callers treat it as accepted
- Stores emails in memory for test assertions
- Can be told to fail for chosen recipients to exercise error paths
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from flood_alert.core.ports.email import (
    EmailMessage,
    EmailResult,
    EmailSendError,
    EmailStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    sender: str | None
    headers: dict[str, str]
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """
    Dev email adapter that logs instead of sending.

    Implements EmailPort.
    """

    sent_emails: list[SentEmail] = field(default_factory=list)
    failing_recipients: set[str] = field(default_factory=set)

    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100

    def send(self, message: EmailMessage) -> EmailResult:
        """Log a structured email message; SKIPPED unless told to fail."""
        recipient = message.recipient.email
        if recipient in self.failing_recipients:
            logger.log(self.log_level, "EMAIL (dev): simulated failure for %s", recipient)
            return EmailResult.failed(recipient, "Simulated transport failure")

        message_id = f"dev-{uuid4().hex[:12]}"
        sender_str = str(message.sender) if message.sender else None

        self.sent_emails.append(
            SentEmail(
                id=message_id,
                recipient=recipient,
                subject=message.subject,
                body_html=message.body_html,
                body_text=message.body_text,
                sender=sender_str,
                headers=dict(message.headers),
                logged_at=datetime.now(UTC),
            )
        )
        self._log_email(recipient, message.subject, message.body_text, message_id, sender_str)

        return EmailResult(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error="Dev mode - email logged, not sent",
        )

    def _log_email(
        self,
        recipient: str,
        subject: str,
        body: str,
        message_id: str,
        sender: str | None = None,
    ) -> None:
        parts = [f"EMAIL (dev): To={recipient}", f"Subject={subject}"]
        if sender:
            parts.append(f"From={sender}")
        if self.log_body and body:
            preview = body[: self.body_preview_length]
            if len(body) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview}")
        parts.append(f"MessageID={message_id}")
        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        """Get the most recently logged email."""
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        """Get all emails logged to a specific recipient."""
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)


@dataclass
class DevMailingList:
    """In-memory MailingListPort for dev and tests."""

    members: list[str] = field(default_factory=list)
    fail: bool = False

    def add_to_list(self, email: str) -> None:
        if self.fail:
            raise EmailSendError(email, "Simulated mailing list failure", retriable=True)
        if email not in self.members:
            self.members.append(email)
        logger.info("MAILING LIST (dev): added %s", email)
