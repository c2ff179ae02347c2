"""
Unsubscribe token component.

Derives and verifies per-subscriber unsubscribe tokens from a shared secret.

Key behaviors:
- Token = hex(HMAC-SHA256(key=secret, msg=subscriber_id))
- Deterministic: never stored, recomputed on demand
- Constant-time comparison on verify
- Malformed input never raises, it simply fails verification

Invariants:
- Knowing a subscriber id (it appears in URLs) is not enough to forge a token
- Rotating the secret revokes every issued token at once
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Any

TOKEN_HEX_LENGTH = hashlib.sha256().digest_size * 2


def issue_unsubscribe_token(subscriber_id: str, secret: str) -> str:
    """
    Compute the unsubscribe token for a subscriber.

    Args:
        subscriber_id: Subscriber id (not secret)
        secret: Shared process-wide secret

    Returns:
        64-character lower-case hex string
    """
    mac = hmac.new(secret.encode("utf-8"), subscriber_id.encode("utf-8"), hashlib.sha256)
    return mac.hexdigest()


def verify_unsubscribe_token(subscriber_id: Any, token: Any, secret: str) -> bool:
    """
    Check an unsubscribe token against the expected value.

    Returns False for any mismatch, including tokens of the wrong type or
    length. Never raises on caller-supplied input.
    """
    if not isinstance(subscriber_id, str) or not isinstance(token, str):
        return False
    if len(token) != TOKEN_HEX_LENGTH or not token.isascii():
        return False

    try:
        expected = issue_unsubscribe_token(subscriber_id, secret)
    except UnicodeEncodeError:
        # Lone surrogates cannot be encoded, so no token was ever issued for them
        return False
    return hmac.compare_digest(expected, token)
