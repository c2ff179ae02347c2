"""
Mailgun Email Adapter.

Implements EmailPort and MailingListPort over the Mailgun HTTP API.

- send: POST {api_base}/{domain}/messages (form fields from, to, subject,
  text, html; custom headers as "h:<Name>")
- add_to_list: POST {api_base}/lists/{list_id}@{domain}/members with
  upsert=yes

Both authenticate with HTTP basic auth ("api", api_key). Provider
failures from send() come back as a FAILED EmailResult; add_to_list()
raises EmailSendError.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import httpx

from flood_alert.core.ports.email import (
    EmailAddress,
    EmailMessage,
    EmailResult,
    EmailSendError,
    EmailStatus,
)

logger = logging.getLogger(__name__)

MAILGUN_API_BASE = "https://api.mailgun.net/v3"


class MailgunClientBase:
    """Shared Mailgun credentials and HTTP client."""

    def __init__(
        self,
        api_key: str,
        domain: str,
        *,
        http_client: httpx.Client | None = None,
        api_base: str = MAILGUN_API_BASE,
        timeout: float = 10.0,
    ) -> None:
        self._auth = ("api", api_key)
        self.domain = domain
        self.api_base = api_base.rstrip("/")
        self._client = http_client or httpx.Client(timeout=timeout)

    def _post(self, url: str, data: dict[str, str]) -> httpx.Response:
        response = self._client.post(url, auth=self._auth, data=data)
        response.raise_for_status()
        return response

    def close(self) -> None:
        self._client.close()


class MailgunEmailAdapter(MailgunClientBase):
    """EmailPort backed by the Mailgun messages endpoint."""

    def __init__(
        self,
        api_key: str,
        domain: str,
        default_sender: EmailAddress,
        **kwargs,
    ) -> None:
        super().__init__(api_key, domain, **kwargs)
        self.default_sender = default_sender

    def send(self, message: EmailMessage) -> EmailResult:
        recipient = message.recipient.email
        sender = message.sender or self.default_sender

        data = {
            "from": str(sender),
            "to": str(message.recipient),
            "subject": message.subject,
            "text": message.body_text,
            "html": message.body_html,
        }
        if message.reply_to:
            data["h:Reply-To"] = str(message.reply_to)
        for name, value in message.headers.items():
            data[f"h:{name}"] = value

        try:
            response = self._post(f"{self.api_base}/{self.domain}/messages", data)
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Mailgun rejected message to %s: HTTP %d", recipient, e.response.status_code
            )
            return EmailResult.failed(recipient, f"Mailgun HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning("Mailgun request for %s failed: %s", recipient, e)
            return EmailResult.failed(recipient, str(e) or type(e).__name__)

        message_id = None
        try:
            payload = response.json()
        except ValueError:
            logger.debug("Mailgun response for %s had no JSON body", recipient)
        else:
            if isinstance(payload, dict):
                message_id = payload.get("id")

        return EmailResult(
            status=EmailStatus.QUEUED,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
        )


class MailgunMailingList(MailgunClientBase):
    """MailingListPort backed by a Mailgun mailing list."""

    def __init__(self, api_key: str, domain: str, list_id: str, **kwargs) -> None:
        super().__init__(api_key, domain, **kwargs)
        self.list_id = list_id

    @property
    def list_address(self) -> str:
        return f"{self.list_id}@{self.domain}"

    def add_to_list(self, email: str) -> None:
        data = {"address": email, "subscribed": "yes", "upsert": "yes"}
        try:
            self._post(f"{self.api_base}/lists/{self.list_address}/members", data)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise EmailSendError(email, f"Mailgun HTTP {status}", retriable=status >= 500) from e
        except httpx.HTTPError as e:
            raise EmailSendError(email, str(e) or type(e).__name__) from e
