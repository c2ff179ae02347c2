"""
Email port data class tests.
"""

from __future__ import annotations

import pytest

from flood_alert.core.ports.email import (
    EmailAddress,
    EmailError,
    EmailMessage,
    EmailResult,
    EmailSendError,
    EmailStatus,
)


class TestEmailAddress:
    def test_plain_address(self) -> None:
        assert str(EmailAddress("rider@example.com")) == "rider@example.com"

    def test_display_name_is_quoted(self) -> None:
        addr = EmailAddress("no-reply@example.com", 'Bike "Path" Alert')
        assert str(addr) == '"Bike \\"Path\\" Alert" <no-reply@example.com>'


class TestEmailMessage:
    def test_requires_recipient(self) -> None:
        with pytest.raises(ValueError, match="Recipient"):
            EmailMessage(EmailAddress(""), "Subject", "<p>x</p>", "x")

    def test_requires_subject(self) -> None:
        with pytest.raises(ValueError, match="Subject"):
            EmailMessage(EmailAddress("a@example.com"), "", "<p>x</p>", "x")

    def test_requires_a_body(self) -> None:
        with pytest.raises(ValueError, match="body"):
            EmailMessage(EmailAddress("a@example.com"), "Subject", "", "")

    def test_headers_default_empty(self) -> None:
        msg = EmailMessage(EmailAddress("a@example.com"), "Subject", "", "text")
        assert msg.headers == {}


class TestEmailResult:
    @pytest.mark.parametrize(
        ("result", "ok"),
        [
            (EmailResult.success("a@example.com", "id-1"), True),
            (EmailResult(status=EmailStatus.QUEUED, recipient="a@example.com"), True),
            (EmailResult.skipped("a@example.com"), True),
            (EmailResult.failed("a@example.com", "boom"), False),
        ],
    )
    def test_ok(self, result: EmailResult, ok: bool) -> None:
        assert result.ok is ok

    def test_success_sets_timestamp(self) -> None:
        assert EmailResult.success("a@example.com").sent_at is not None


def test_send_error_message() -> None:
    err = EmailSendError("a@example.com", "mailbox full", retriable=False)
    assert isinstance(err, EmailError)
    assert str(err) == "Failed to send email to a@example.com: mailbox full"
    assert err.retriable is False
