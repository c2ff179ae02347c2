"""
Email Adapter Interface.

Protocol-based interface for sending transactional emails.
Used for verification emails on signup and for flood notifications.

Key requirements:
- One structured message per recipient (no shared "to" lists)
- HTML and plain text body
- Custom headers (List-Unsubscribe, List-Unsubscribe-Post)
- Stateless send operation

Implementation strategies:
1. DevEmailAdapter: Logs emails to console (dev/test)
2. MailgunEmailAdapter: Sends via the Mailgun HTTP API

Both strategies implement the same EmailPort interface.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    QUEUED = "queued"  # Accepted by provider, not delivered yet
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter or dry-run


@dataclass(frozen=True)
class EmailAddress:
    """
    Email address with optional display name.

    Examples:
        EmailAddress("user@example.com")
        EmailAddress("no-reply@example.com", "Bike Path Flood Alert")
    """

    email: str
    name: str | None = None

    def __str__(self) -> str:
        """Format as RFC 5322 address."""
        if self.name:
            safe_name = self.name.replace('"', '\\"')
            return f'"{safe_name}" <{self.email}>'
        return self.email


@dataclass(frozen=True)
class EmailMessage:
    """
    Email message to be sent.

    Supports both HTML and plain text body for maximum compatibility.
    """

    recipient: EmailAddress
    subject: str
    body_html: str
    body_text: str
    sender: EmailAddress | None = None  # None = use adapter default
    reply_to: EmailAddress | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate email message."""
        if not self.recipient.email:
            raise ValueError("Recipient email is required")
        if not self.subject:
            raise ValueError("Subject is required")
        if not self.body_html and not self.body_text:
            raise ValueError("At least one of body_html or body_text is required")


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None  # Provider's message ID
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""

    @property
    def ok(self) -> bool:
        """Whether the transport accepted (or deliberately skipped) the message."""
        return self.status is not EmailStatus.FAILED

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        """Create a successful send result."""
        return cls(
            status=EmailStatus.SENT,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def skipped(cls, recipient: str, reason: str = "Dev mode") -> EmailResult:
        """Create a skipped result (dev adapter)."""
        return cls(
            status=EmailStatus.SKIPPED,
            recipient=recipient,
            error=reason,
        )

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        """Create a failed result."""
        return cls(
            status=EmailStatus.FAILED,
            recipient=recipient,
            error=error,
        )


class EmailPort(Protocol):
    """
    Email sending interface.

    Implementations:
    - DevEmailAdapter: Logs to console (dev/test)
    - MailgunEmailAdapter: Mailgun HTTP API
    """

    def send(self, message: EmailMessage) -> EmailResult:
        """
        Send an email message with full options.

        Args:
            message: Complete email message with all options

        Returns:
            EmailResult with send outcome

        Notes:
            - Should not raise for provider failures; return failed status instead
        """
        ...


class MailingListPort(Protocol):
    """
    Provider-side mailing list projection.

    Some deployments mirror verified subscribers into a provider list.
    """

    def add_to_list(self, email: str) -> None:
        """
        Upsert an address into the mailing list as subscribed.

        Raises:
            EmailSendError: If the provider rejects the request
        """
        ...


# --- Error Types ---


class EmailError(Exception):
    """Base exception for email-related errors."""

    pass


class EmailSendError(EmailError):
    """Failed to send email."""

    def __init__(self, recipient: str, error: str, retriable: bool = True) -> None:
        self.recipient = recipient
        self.error = error
        self.retriable = retriable
        super().__init__(f"Failed to send email to {recipient}: {error}")
