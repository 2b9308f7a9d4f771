"""Transactional email through the Brevo HTTP API."""
import logging

import requests

from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Brevo rejected or failed to accept a message."""
    pass


def send_email(to_email: str, subject: str, html_content: str) -> bool:
    """
    Send one HTML email.

    Without BREVO_API_KEY the message is only logged in development and
    returns False; in any other environment it raises EmailDeliveryError.
    Blocking; call through run_in_threadpool from request handlers.
    """
    if not settings.BREVO_API_KEY:
        if settings.ENVIRONMENT != "development":
            raise EmailDeliveryError("BREVO_API_KEY is not set")
        logger.warning("BREVO_API_KEY is not set, not sending '%s' to %s (body logged at DEBUG)", subject, to_email)
        logger.debug("Undelivered email to %s:%s", to_email, html_content)
        return False

    response = requests.post(
        settings.BREVO_API_URL,
        headers={
            "api-key": settings.BREVO_API_KEY,
            "Content-Type": "application/json",
        },
        json={
            "sender": {"name": settings.EMAIL_SENDER_NAME, "email": settings.EMAIL_FROM},
            "to": [{"email": to_email}],
            "subject": subject,
            "htmlContent": html_content,
        },
        timeout=10,
    )
    if response.status_code not in (200, 201, 202):
        raise EmailDeliveryError(f"Brevo error: {response.status_code} {response.text}")
    return True


def send_verification_email(to_email: str, token: str) -> bool:
    verification_url = f"{settings.CLIENT_URL}/verify-email?token={token}"
    return send_email(
        to_email,
        "Verify Your Email - Roommate Ledger",
        f"""
            <h1>Email Verification</h1>
            <p>Please click the link below to verify your email address:</p>
            <a href="{verification_url}">Verify Email</a>
            <p>This link will expire in {settings.VERIFICATION_TOKEN_EXPIRE_HOURS} hours.</p>
        """,
    )


def send_password_reset_email(to_email: str, token: str) -> bool:
    reset_url = f"{settings.CLIENT_URL}/reset-password/{token}"
    return send_email(
        to_email,
        "Reset Your Password - Roommate Ledger",
        f"""
            <p>You requested a password reset for your Roommate Ledger account.</p>
            <p>Click the link below to reset your password:</p>
            <a href="{reset_url}">{reset_url}</a>
            <p>If you didn't request this, please ignore this email.</p>
            <p>This link will expire in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes.</p>
        """,
    )
