"""
Public subscription endpoints.

Endpoints:
- POST /signup - Start double opt-in (JSON)
- GET /verify - Consume a verification token (HTML)
- GET /unsubscribe - Confirmation form (HTML)
- POST /unsubscribe - Perform unsubscribe (HTML); also the RFC 8058
  one-click target named in List-Unsubscribe-Post
"""

from __future__ import annotations

import html
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from flood_alert.adapters.sqlite_db import SQLiteSubscriberRepo
from flood_alert.api.deps import (
    get_alert_config,
    get_email_sender,
    get_mailing_list,
    get_subscriber_repo,
)
from flood_alert.api.pages import message_page, render_page
from flood_alert.components.subscribers import (
    SignupInput,
    UnsubscribeInput,
    VerifyInput,
    run_signup,
    run_unsubscribe,
    run_verify,
)
from flood_alert.components.tokens import verify_unsubscribe_token
from flood_alert.core.config import AlertConfig
from flood_alert.core.ports.email import EmailPort, MailingListPort

router = APIRouter()

VALIDATION_CODES = ("EMPTY_EMAIL", "INVALID_FORMAT", "EMAIL_TOO_LONG")


# --- Request/Response Models ---


class SignupRequest(BaseModel):
    """Request body for signup."""

    email: str = Field(..., description="Email address to subscribe")


class SignupResponse(BaseModel):
    """Response for a signup request."""

    success: bool
    message: str


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str


# --- Signup ---


@router.post(
    "/signup",
    response_model=SignupResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email"},
        409: {"model": ErrorResponse, "description": "Email already subscribed"},
        500: {"model": ErrorResponse, "description": "Store or email failure"},
    },
    summary="Sign up for flood alerts",
)
def signup(
    request_body: SignupRequest,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    email_sender: EmailPort = Depends(get_email_sender),
    config: AlertConfig = Depends(get_alert_config),
) -> SignupResponse:
    """
    Start the double opt-in flow.

    A pending or previously unsubscribed address gets a fresh verification
    email; an active address is rejected with 409.
    """
    result = run_signup(
        SignupInput(email=request_body.email),
        repo,
        email_sender=email_sender,
        config=config,
    )

    if not result.success:
        for error in result.errors:
            if error.code in VALIDATION_CODES:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
            if error.code == "ALREADY_SUBSCRIBED":
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.message)

        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        )

    return SignupResponse(
        success=True,
        message="Thanks! Check your inbox for a verification link.",
    )


# --- Verify ---


@router.get("/verify", response_class=HTMLResponse)
def verify(
    token: str = "",
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    mailing_list: MailingListPort | None = Depends(get_mailing_list),
) -> HTMLResponse:
    result = run_verify(VerifyInput(token=token), repo, mailing_list=mailing_list)

    if not result.success:
        if any(e.code == "STORE_FAILED" for e in result.errors):
            return message_page("Something went wrong", "Internal server error", 500)
        return message_page(
            "Verification failed",
            "This verification link is invalid or has already been used.",
            400,
        )

    return message_page(
        "Email verified",
        f"{result.email} will now receive flood alerts for the bike path.",
    )


# --- Unsubscribe ---


def _invalid_link() -> HTMLResponse:
    return message_page("Invalid link", "This unsubscribe link is invalid.", 400)


@router.get("/unsubscribe", response_class=HTMLResponse)
def unsubscribe_form(
    subscriber_id: str = Query("", alias="id"),
    token: str = "",
    config: AlertConfig = Depends(get_alert_config),
) -> HTMLResponse:
    """Confirmation form; nothing changes until it is submitted."""
    if not verify_unsubscribe_token(subscriber_id, token, config.unsubscribe_secret):
        return _invalid_link()

    action = html.escape(
        f"{config.unsubscribe_path}?{urlencode({'id': subscriber_id, 'token': token})}",
        quote=True,
    )
    body = (
        "<h1>Unsubscribe</h1>"
        "<p>Stop receiving bike path flood alerts?</p>"
        f'<form method="post" action="{action}">'
        '<button type="submit">Unsubscribe</button></form>'
    )
    return HTMLResponse(render_page("Unsubscribe", body))


@router.post("/unsubscribe", response_class=HTMLResponse)
def unsubscribe(
    subscriber_id: str = Query("", alias="id"),
    token: str = "",
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    config: AlertConfig = Depends(get_alert_config),
) -> HTMLResponse:
    result = run_unsubscribe(
        UnsubscribeInput(subscriber_id=subscriber_id, token=token),
        repo,
        config=config,
    )

    if not result.success:
        if any(e.code == "STORE_FAILED" for e in result.errors):
            return message_page("Something went wrong", "Internal server error", 500)
        return _invalid_link()

    if result.already_unsubscribed:
        return message_page("Unsubscribed", "You were already unsubscribed.")

    return message_page("Unsubscribed", "You will no longer receive flood alerts.")
