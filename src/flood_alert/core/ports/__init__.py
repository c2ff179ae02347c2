# Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from flood_alert.core.ports.email import (
    EmailAddress,
    EmailError,
    EmailMessage,
    EmailPort,
    EmailResult,
    EmailSendError,
    EmailStatus,
    MailingListPort,
)
from flood_alert.core.ports.time import TimePort

__all__ = [
    # Email
    "EmailAddress",
    "EmailError",
    "EmailMessage",
    "EmailPort",
    "EmailResult",
    "EmailSendError",
    "EmailStatus",
    "MailingListPort",
    # Time
    "TimePort",
]
