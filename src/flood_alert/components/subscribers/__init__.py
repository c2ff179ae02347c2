"""
Subscribers component.

Double opt-in subscriber lifecycle: signup, verify, unsubscribe.
"""

from flood_alert.components.subscribers.component import (
    EMAIL_REGEX,
    build_unsubscribe_url,
    build_verification_email,
    build_verification_url,
    generate_token,
    new_subscriber_id,
    run,
    run_signup,
    run_unsubscribe,
    run_verify,
    validate_email,
)
from flood_alert.components.subscribers.models import (
    ErrorDetail,
    SignupInput,
    SignupOutput,
    Subscriber,
    SubscriberConflictError,
    SubscriberError,
    SubscriberNotFoundError,
    UnsubscribeInput,
    UnsubscribeOutput,
    ValidateEmailOutput,
    VerifyInput,
    VerifyOutput,
)
from flood_alert.components.subscribers.ports import SubscriberRepoPort

__all__ = [
    # Component
    "run",
    "run_signup",
    "run_verify",
    "run_unsubscribe",
    # Pure functions
    "validate_email",
    "generate_token",
    "new_subscriber_id",
    "build_verification_url",
    "build_unsubscribe_url",
    "build_verification_email",
    # Constants
    "EMAIL_REGEX",
    # Models
    "Subscriber",
    "SignupInput",
    "SignupOutput",
    "VerifyInput",
    "VerifyOutput",
    "UnsubscribeInput",
    "UnsubscribeOutput",
    "ValidateEmailOutput",
    "ErrorDetail",
    # Errors
    "SubscriberError",
    "SubscriberConflictError",
    "SubscriberNotFoundError",
    # Ports
    "SubscriberRepoPort",
]
