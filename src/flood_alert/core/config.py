"""
Immutable application configuration.

Built once by the shell (API deps or CLI) from rules.yaml and the process
environment, then passed explicitly to components. Component code never
reads the environment itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flood_alert.core.ports.email import EmailAddress


@dataclass(frozen=True)
class AlertConfig:
    """Configuration shared by the signup, unsubscribe and notify flows."""

    unsubscribe_secret: str = field(repr=False)  # Never rendered in logs
    base_url: str = "http://127.0.0.1:3000"
    site_name: str = "Bike Path Flood Alert"
    sender: EmailAddress = EmailAddress("no-reply@localhost", "Bike Path Flood Alert")
    verify_path: str = "/verify"
    unsubscribe_path: str = "/unsubscribe"
