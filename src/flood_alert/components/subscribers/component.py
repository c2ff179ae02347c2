"""
Subscribers component.

Functional core for the subscriber lifecycle. Implements double opt-in with
single-use verification tokens and signed unsubscribe links.

Key behaviors:
- Email format validation and normalization (trim + lowercase)
- Time-ordered subscriber ids (UUIDv7)
- Cryptographic verification tokens (secrets.token_urlsafe)
- Re-signup of a non-active address restarts verification
- Re-signup of an active address is rejected (409), never downgraded
- Unsubscribe authorized by HMAC token, idempotent

Invariants:
- Only the verify transition sets is_verified
- A verification token matches at most once
- Unsubscribe clears is_subscribed and keeps the row
"""

from __future__ import annotations

import html
import logging
import re
import secrets
from datetime import UTC, datetime
from urllib.parse import urlencode
from uuid import UUID

from flood_alert.components.subscribers.models import (
    ErrorDetail,
    SignupInput,
    SignupOutput,
    SubscriberConflictError,
    SubscriberNotFoundError,
    UnsubscribeInput,
    UnsubscribeOutput,
    ValidateEmailOutput,
    VerifyInput,
    VerifyOutput,
)
from flood_alert.components.subscribers.ports import SubscriberRepoPort
from flood_alert.components.tokens import verify_unsubscribe_token
from flood_alert.core.config import AlertConfig
from flood_alert.core.ports.db import StoreError
from flood_alert.core.ports.email import (
    EmailAddress,
    EmailError,
    EmailMessage,
    EmailPort,
    EmailResult,
    MailingListPort,
)

logger = logging.getLogger(__name__)

# --- Email Validation Regex (RFC 5322 simplified) ---

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

MAX_EMAIL_LENGTH = 254

VERIFICATION_SUBJECT = "Please verify your email"


# --- Pure Functions (Functional Core) ---


def validate_email(email: str | None) -> ValidateEmailOutput:
    """
    Validate email address format.

    Args:
        email: Raw email address from the request

    Returns:
        ValidateEmailOutput with the normalized address when valid
    """
    normalized = email.strip().lower() if email else ""

    if not normalized:
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ErrorDetail("EMPTY_EMAIL", "Email address is required", "email")],
        )

    if len(normalized) > MAX_EMAIL_LENGTH:
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ErrorDetail("EMAIL_TOO_LONG", "Email address is too long", "email")],
        )

    if not EMAIL_REGEX.match(normalized):
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ErrorDetail("INVALID_FORMAT", "Invalid email format", "email")],
        )

    return ValidateEmailOutput(is_valid=True, normalized_email=normalized)


def generate_token(length: int = 32) -> str:
    """
    Generate a cryptographically secure URL-safe token.

    Args:
        length: Number of random bytes (will be base64-encoded)
    """
    return secrets.token_urlsafe(length)


def new_subscriber_id(now: datetime | None = None) -> str:
    """
    Generate a UUIDv7 string.

    48-bit unix millisecond timestamp, version and variant bits, 74 random
    bits. String order follows creation time at millisecond resolution.
    """
    if now is None:
        now = datetime.now(UTC)

    unix_ms = int(now.timestamp() * 1000) & ((1 << 48) - 1)
    rand = secrets.randbits(74)
    value = (
        (unix_ms << 80)
        | (0x7 << 76)
        | ((rand >> 62) << 64)
        | (0b10 << 62)
        | (rand & ((1 << 62) - 1))
    )
    return str(UUID(int=value))


def build_verification_url(base_url: str, token: str, path: str = "/verify") -> str:
    """Build the verification link sent on signup."""
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'token': token})}"


def build_unsubscribe_url(
    base_url: str,
    subscriber_id: str,
    token: str,
    path: str = "/unsubscribe",
) -> str:
    """Build the per-recipient unsubscribe link embedded in notifications."""
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'id': subscriber_id, 'token': token})}"


def build_verification_email(
    email: str,
    verification_url: str,
    config: AlertConfig,
) -> EmailMessage:
    """Compose the double opt-in email."""
    body_text = (
        "Welcome! Please verify your email address to start receiving flood "
        f"predictions for the bike path: {verification_url}"
    )
    safe_url = html.escape(verification_url, quote=True)
    body_html = (
        "<html><body>"
        f"<h1>{html.escape(config.site_name)}</h1>"
        "<p>Welcome! Please verify your email address to start receiving flood "
        "predictions for the bike path.</p>"
        f'<p><a href="{safe_url}">Verify my email</a></p>'
        "<p>If you did not sign up, you can ignore this message.</p>"
        "</body></html>"
    )
    return EmailMessage(
        recipient=EmailAddress(email),
        subject=VERIFICATION_SUBJECT,
        body_html=body_html,
        body_text=body_text,
        sender=config.sender,
    )


# --- Run Handlers (Functional Core) ---


def run_signup(
    inp: SignupInput,
    repo: SubscriberRepoPort,
    *,
    email_sender: EmailPort,
    config: AlertConfig,
) -> SignupOutput:
    """
    Handle a signup request.

    Validates the address, creates or restarts the pending record and sends
    the verification email.
    """
    validation = validate_email(inp.email)
    if not validation.is_valid or validation.normalized_email is None:
        return SignupOutput(success=False, errors=validation.errors)

    email = validation.normalized_email

    try:
        subscriber = repo.upsert_pending_signup(email)
    except SubscriberConflictError:
        return SignupOutput(
            success=False,
            already_subscribed=True,
            errors=[
                ErrorDetail(
                    "ALREADY_SUBSCRIBED",
                    "Email already registered and verified",
                    "email",
                )
            ],
        )
    except StoreError as e:
        logger.error("Signup could not be stored: %s", e)
        return SignupOutput(
            success=False,
            errors=[ErrorDetail("STORE_FAILED", "Internal server error")],
        )

    url = build_verification_url(config.base_url, subscriber.verification_token, config.verify_path)
    message = build_verification_email(email, url, config)

    try:
        result = email_sender.send(message)
    except EmailError as e:
        result = EmailResult.failed(email, str(e))

    if not result.ok:
        logger.error("Verification email to %s failed: %s", email, result.error)
        return SignupOutput(
            success=False,
            subscriber_id=subscriber.id,
            errors=[ErrorDetail("EMAIL_FAILED", "Failed to send verification email")],
        )

    logger.info("Verification email sent to %s (subscriber %s)", email, subscriber.id)
    return SignupOutput(success=True, subscriber_id=subscriber.id)


def run_verify(
    inp: VerifyInput,
    repo: SubscriberRepoPort,
    *,
    mailing_list: MailingListPort | None = None,
) -> VerifyOutput:
    """
    Handle a verification link.

    The store consumes the token atomically; a second click with the same
    token reports INVALID_TOKEN, exactly like an unknown token.
    """
    if not inp.token:
        return VerifyOutput(
            success=False,
            errors=[ErrorDetail("MISSING_TOKEN", "Verification token is required")],
        )

    try:
        subscriber = repo.verify(inp.token)
    except SubscriberNotFoundError:
        return VerifyOutput(
            success=False,
            errors=[ErrorDetail("INVALID_TOKEN", "Invalid or already used verification token")],
        )
    except StoreError as e:
        logger.error("Verification could not be stored: %s", e)
        return VerifyOutput(
            success=False,
            errors=[ErrorDetail("STORE_FAILED", "Internal server error")],
        )

    if mailing_list is not None:
        # The store stays authoritative; a list sync failure is only logged
        try:
            mailing_list.add_to_list(subscriber.email)
        except EmailError as e:
            logger.warning("Mailing list sync failed for %s: %s", subscriber.email, e)

    logger.info("Subscriber %s verified", subscriber.id)
    return VerifyOutput(success=True, subscriber_id=subscriber.id, email=subscriber.email)


def run_unsubscribe(
    inp: UnsubscribeInput,
    repo: SubscriberRepoPort,
    *,
    config: AlertConfig,
) -> UnsubscribeOutput:
    """
    Handle an unsubscribe confirmation.

    Token is checked before the store is touched. Repeat clicks succeed with
    already_unsubscribed=True.
    """
    if not verify_unsubscribe_token(inp.subscriber_id, inp.token, config.unsubscribe_secret):
        return UnsubscribeOutput(
            success=False,
            errors=[ErrorDetail("INVALID_TOKEN", "Invalid unsubscribe link")],
        )

    try:
        changed = repo.unsubscribe(inp.subscriber_id)
    except StoreError as e:
        logger.error("Unsubscribe could not be stored: %s", e)
        return UnsubscribeOutput(
            success=False,
            errors=[ErrorDetail("STORE_FAILED", "Internal server error")],
        )

    if not changed:
        return UnsubscribeOutput(success=True, already_unsubscribed=True)

    logger.info("Subscriber %s unsubscribed", inp.subscriber_id)
    return UnsubscribeOutput(success=True)


def run(
    inp: SignupInput | VerifyInput | UnsubscribeInput,
    *,
    repo: SubscriberRepoPort,
    config: AlertConfig,
    email_sender: EmailPort | None = None,
    mailing_list: MailingListPort | None = None,
) -> SignupOutput | VerifyOutput | UnsubscribeOutput:
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Input command
        repo: Repository port (Required)
        config: Alert configuration (Required)
        email_sender: Email sender port (Required for signup)
        mailing_list: Provider mailing list (Optional)

    Returns:
        Operation result
    """
    if isinstance(inp, SignupInput):
        if email_sender is None:
            raise ValueError("email_sender is required for signup")
        return run_signup(inp, repo, email_sender=email_sender, config=config)
    elif isinstance(inp, VerifyInput):
        return run_verify(inp, repo, mailing_list=mailing_list)
    elif isinstance(inp, UnsubscribeInput):
        return run_unsubscribe(inp, repo, config=config)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
