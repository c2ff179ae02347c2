"""
Subscribers component ports.

Protocol interfaces for subscriber persistence.
"""

from __future__ import annotations

from typing import Protocol

from flood_alert.components.subscribers.models import Subscriber


class SubscriberRepoPort(Protocol):
    """
    Subscriber repository interface.

    Every conditional transition is a single storage-level operation; callers
    never read-then-write. Implementations raise StoreError on storage
    failures.
    """

    def upsert_pending_signup(self, email: str) -> Subscriber:
        """
        Create or restart a pending signup.

        Unknown email: new subscriber with a fresh verification token.
        Known, not active: new token, verification flags reset, same id.

        Raises:
            SubscriberConflictError: If the email is verified and subscribed
        """
        ...

    def verify(self, token: str) -> Subscriber:
        """
        Consume a verification token.

        Raises:
            SubscriberNotFoundError: If no unverified subscriber holds the token
        """
        ...

    def unsubscribe(self, subscriber_id: str) -> bool:
        """Clear the subscription; True if anything changed."""
        ...

    def list_active_recipients(self) -> list[Subscriber]:
        """Verified and subscribed subscribers, in signup order."""
        ...

    def get_by_id(self, subscriber_id: str) -> Subscriber | None:
        """Get subscriber by ID."""
        ...

    def get_by_email(self, email: str) -> Subscriber | None:
        """Get subscriber by normalized email address."""
        ...
