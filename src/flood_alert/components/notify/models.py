"""
Notify component models.

Input and aggregate report for one notification cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from flood_alert.components.tides.models import FloodEvent


@dataclass(frozen=True)
class NotifyInput:
    """Input for a notification cycle."""

    now_local: datetime  # Station-local, naive


@dataclass(frozen=True)
class DeliveryFailure:
    """A recipient whose notification could not be handed to the transport."""

    subscriber_id: str
    email: str
    error: str


@dataclass(frozen=True)
class NotificationReport:
    """
    Aggregate outcome of a notification cycle.

    Every recipient is attempted; failures are collected rather than
    aborting the cycle.
    """

    events: list[FloodEvent] = field(default_factory=list)
    sent_count: int = 0
    failures: list[DeliveryFailure] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def failed_recipients(self) -> list[str]:
        return [f.email for f in self.failures]

    @property
    def success(self) -> bool:
        return not self.failures
