"""
Notify component ports.
"""

from __future__ import annotations

from typing import Protocol

from flood_alert.components.subscribers.models import Subscriber


class RecipientSourcePort(Protocol):
    """Source of notification recipients (the subscriber store)."""

    def list_active_recipients(self) -> list[Subscriber]:
        """Verified and subscribed subscribers, in signup order."""
        ...
