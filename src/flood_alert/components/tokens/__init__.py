"""
Tokens component.

Secret-derived unsubscribe tokens.
"""

from flood_alert.components.tokens.component import (
    TOKEN_HEX_LENGTH,
    issue_unsubscribe_token,
    verify_unsubscribe_token,
)

__all__ = [
    "TOKEN_HEX_LENGTH",
    "issue_unsubscribe_token",
    "verify_unsubscribe_token",
]
