"""
Subscribers component models.

Data models for the double opt-in subscription lifecycle.

Lifecycle:
- signup       → unverified (is_verified = False, is_subscribed = False)
- verify       → active     (is_verified = True,  is_subscribed = True)
- unsubscribe  → inactive   (is_verified = True,  is_subscribed = False)
- re-signup of any non-active record restarts verification with a new token
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

# --- Entity ---


@dataclass(frozen=True)
class Subscriber:
    """
    Subscriber entity.

    The id is a UUIDv7 string so that ordering by id follows signup order.
    """

    id: str
    email: str
    verification_token: str
    is_verified: bool = False
    is_subscribed: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_active(self) -> bool:
        """Eligible for flood notifications."""
        return self.is_verified and self.is_subscribed


# --- Input Models ---


@dataclass(frozen=True)
class SignupInput:
    """Input for a signup (or re-signup) request."""

    email: str


@dataclass(frozen=True)
class VerifyInput:
    """Input for verifying an email address."""

    token: str


@dataclass(frozen=True)
class UnsubscribeInput:
    """Input for unsubscribing via a signed link."""

    subscriber_id: str
    token: str


# --- Output Models ---


@dataclass(frozen=True)
class ErrorDetail:
    """Error detail carried by component outputs."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ValidateEmailOutput:
    """Output from email validation."""

    is_valid: bool
    normalized_email: str | None = None  # Lowercase, trimmed
    errors: list[ErrorDetail] = field(default_factory=list)


@dataclass(frozen=True)
class SignupOutput:
    """Output from a signup attempt."""

    success: bool
    subscriber_id: str | None = None
    errors: list[ErrorDetail] = field(default_factory=list)
    already_subscribed: bool = False  # True if email is already active


@dataclass(frozen=True)
class VerifyOutput:
    """Output from a verification attempt."""

    success: bool
    subscriber_id: str | None = None
    email: str | None = None
    errors: list[ErrorDetail] = field(default_factory=list)


@dataclass(frozen=True)
class UnsubscribeOutput:
    """Output from an unsubscribe attempt."""

    success: bool
    errors: list[ErrorDetail] = field(default_factory=list)
    already_unsubscribed: bool = False  # Idempotent success


# --- Error Types ---


class SubscriberError(Exception):
    """Base subscriber error."""

    pass


class SubscriberConflictError(SubscriberError):
    """Email is already verified and subscribed."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email '{email}' is already registered and verified")


class SubscriberNotFoundError(SubscriberError):
    """
    No pending subscriber matches the token.

    Deliberately covers "never existed" and "already used" alike.
    """

    def __init__(self) -> None:
        super().__init__("Invalid or already used verification token")
