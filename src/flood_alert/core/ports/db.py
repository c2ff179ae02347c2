"""
Database Adapter Interfaces.

Repository protocols live with the components that consume them
(subscribers/ports.py, tides/ports.py). This module holds what the
storage adapters share.
"""

from __future__ import annotations


class StoreError(Exception):
    """
    Relational store failure (connectivity, constraint, transaction).

    Callers log it and surface a generic failure; the message is never
    shown to end users.
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store operation '{operation}' failed: {reason}")
