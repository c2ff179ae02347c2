"""
Notify component.

Batch flood notifications to active subscribers.
"""

from flood_alert.components.notify.component import (
    build_notification_email,
    build_subject,
    run_notification_cycle,
)
from flood_alert.components.notify.models import (
    DeliveryFailure,
    NotificationReport,
    NotifyInput,
)
from flood_alert.components.notify.ports import RecipientSourcePort

__all__ = [
    "run_notification_cycle",
    "build_notification_email",
    "build_subject",
    "NotifyInput",
    "NotificationReport",
    "DeliveryFailure",
    "RecipientSourcePort",
]
