"""
Transactional email via Resend.
"""

import logging
from typing import Any

from django.conf import settings

import resend

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """Raised when email sending fails."""

    pass


def send_email(to_email: str, subject: str, body: str) -> str:
    """
    Send email via Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject
        body: Email body text

    Returns:
        Resend email ID

    Raises:
        EmailError: If sending fails
    """
    if not to_email:
        raise EmailError("Recipient email address is required")

    if not subject:
        raise EmailError("Email subject is required")

    api_key = getattr(settings, "RESEND_API_KEY", None)
    if not api_key:
        raise EmailError("Resend API key not configured")

    resend.api_key = api_key

    try:
        response = resend.Emails.send(
            {
                "from": settings.DEFAULT_FROM_EMAIL,
                "to": to_email,
                "subject": subject,
                "text": body,
            }
        )
        email_id = response.get("id", "") if isinstance(response, dict) else ""

        logger.info("Sent email to %s (ID: %s)", to_email, email_id)
        return str(email_id)

    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)
        raise EmailError(f"Failed to send email: {e}") from e


def send_confirmation_email(user: Any) -> bool:
    """
    Email the confirmation link to a pending user.

    Delivery failures are logged and reported as False; registration does not
    depend on email delivery.
    """
    if not user.email or not user.email_confirmation_token:
        return False

    token = user.email_confirmation_token
    link = f"{settings.FRONTEND_URL}/confirm-email?token={token}"
    body = (
        f"Hello {user.full_name or user.username},\n\n"
        "Please confirm your email address to activate your account:\n\n"
        f"{link}\n\n"
        "This link expires in 24 hours."
    )
    try:
        send_email(user.email, "Confirm your email address", body)
    except EmailError:
        logger.warning("Confirmation email not sent to %s", user.email)
        return False
    return True
