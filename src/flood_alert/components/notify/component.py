"""
Notify component.

Notification dispatcher ("notify" job). Turns archived flood forecasts into
one personalized email per active subscriber.

Key behaviors:
- Quiet cycle (no flood events) sends nothing
- One message per recipient, sent sequentially in store order
- Each message carries its own signed unsubscribe link and
  List-Unsubscribe / List-Unsubscribe-Post headers
- A failed send is recorded and the cycle moves on to the next recipient;
  the caller gets sent/failed counts and the failing addresses
- No retries within a cycle

Store failures while reading events or recipients propagate as StoreError.
"""

from __future__ import annotations

import html
import logging

from flood_alert.components.notify.models import (
    DeliveryFailure,
    NotificationReport,
    NotifyInput,
)
from flood_alert.components.notify.ports import RecipientSourcePort
from flood_alert.components.subscribers.component import build_unsubscribe_url
from flood_alert.components.subscribers.models import Subscriber
from flood_alert.components.tides.component import query_flood_events
from flood_alert.components.tides.models import FLOOD_THRESHOLD_FT, FORECAST_DAYS, FloodEvent
from flood_alert.components.tides.ports import TideRepoPort
from flood_alert.components.tokens import issue_unsubscribe_token
from flood_alert.core.config import AlertConfig
from flood_alert.core.ports.email import (
    EmailAddress,
    EmailError,
    EmailMessage,
    EmailPort,
    EmailResult,
)

logger = logging.getLogger(__name__)


def build_subject(events: list[FloodEvent]) -> str:
    noun = "tide" if len(events) == 1 else "tides"
    return f"Bike path flood alert: {len(events)} flood {noun} forecast"


def build_notification_email(
    recipient: Subscriber,
    events: list[FloodEvent],
    unsubscribe_url: str,
    config: AlertConfig,
) -> EmailMessage:
    """
    Compose the flood notification for one recipient.

    Content is identical for everyone except the unsubscribe link.
    """
    intro = (
        f"High tides at or above {FLOOD_THRESHOLD_FT} ft are forecast for the "
        f"Mill Valley - Sausalito bike path in the next {FORECAST_DAYS} days:"
    )
    lines = [f"- {e.display_time}: {e.display_height} ft" for e in events]
    body_text = "\n".join(
        [intro, "", *lines, "", f"Unsubscribe: {unsubscribe_url}"]
    )

    rows = "".join(
        f"<tr><td>{html.escape(e.display_time)}</td>"
        f"<td>{html.escape(e.display_height)} ft</td></tr>"
        for e in events
    )
    safe_url = html.escape(unsubscribe_url, quote=True)
    body_html = (
        "<html><body>"
        f"<h1>{html.escape(config.site_name)}</h1>"
        f"<p>{html.escape(intro)}</p>"
        f"<table><tr><th>When</th><th>Height</th></tr>{rows}</table>"
        f'<p><a href="{safe_url}">Unsubscribe</a></p>'
        "</body></html>"
    )

    return EmailMessage(
        recipient=EmailAddress(recipient.email),
        subject=build_subject(events),
        body_html=body_html,
        body_text=body_text,
        sender=config.sender,
        headers={
            "List-Unsubscribe": f"<{unsubscribe_url}>",
            "List-Unsubscribe-Post": "List-Unsubscribe=One-Click",
        },
    )


def run_notification_cycle(
    inp: NotifyInput,
    *,
    recipients: RecipientSourcePort,
    tides: TideRepoPort,
    email_sender: EmailPort,
    config: AlertConfig,
) -> NotificationReport:
    """
    Run one notification cycle.

    Args:
        inp: Cycle input (current station-local time)
        recipients: Subscriber store
        tides: Tide archive
        email_sender: Email transport
        config: Alert configuration (base URL, secret, sender)

    Returns:
        NotificationReport with per-recipient outcomes

    Raises:
        StoreError: If events or recipients cannot be read
    """
    events = query_flood_events(inp.now_local, repo=tides)
    if not events:
        logger.info("No flood events forecast; nothing to send")
        return NotificationReport()

    active = recipients.list_active_recipients()
    logger.info("%d flood events forecast, notifying %d recipients", len(events), len(active))

    sent = 0
    failures: list[DeliveryFailure] = []

    for recipient in active:
        token = issue_unsubscribe_token(recipient.id, config.unsubscribe_secret)
        url = build_unsubscribe_url(config.base_url, recipient.id, token, config.unsubscribe_path)
        message = build_notification_email(recipient, events, url, config)

        try:
            result = email_sender.send(message)
        except EmailError as e:
            result = EmailResult.failed(recipient.email, str(e))

        if result.ok:
            sent += 1
            continue

        # Record and continue with the next recipient
        error = result.error or "unknown transport error"
        logger.error("Notification to %s (%s) failed: %s", recipient.email, recipient.id, error)
        failures.append(DeliveryFailure(recipient.id, recipient.email, error))

    logger.info("Notification cycle finished: %d sent, %d failed", sent, len(failures))
    return NotificationReport(events=events, sent_count=sent, failures=failures)
