"""
Payment services - Stripe integration.

Cards are tokenized in the browser with Stripe.js; the backend only receives
PaymentMethod IDs and reads display details (brand, last4, expiry) from Stripe.
"""

from typing import Any

from django.conf import settings

import stripe

# Configure Stripe API key
stripe.api_key = settings.STRIPE_SECRET_KEY


class PaymentError(Exception):
    """Error during payment processing."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def retrieve_payment_method(payment_method_id: str) -> stripe.PaymentMethod:
    """
    Retrieve a PaymentMethod from Stripe.

    Args:
        payment_method_id: The Stripe PaymentMethod ID (pm_xxx)

    Returns:
        stripe.PaymentMethod

    Raises:
        PaymentError: If PaymentMethod not found or API call fails
    """
    try:
        return stripe.PaymentMethod.retrieve(payment_method_id)
    except stripe.StripeError as e:
        raise PaymentError(
            message=str(e.user_message or e),
            code=getattr(e, "code", None),
        ) from e


def describe_payment_method(payment_method_id: str) -> dict[str, Any]:
    """
    Card display details for a tokenized PaymentMethod.

    Returns:
        Dict with card_token, card_brand, card_last4, expiry_month, expiry_year

    Raises:
        PaymentError: If the PaymentMethod is missing or is not a card
    """
    method = retrieve_payment_method(payment_method_id)
    card = getattr(method, "card", None)
    if method.type != "card" or card is None:
        raise PaymentError(
            "Payment method is not a card", code="invalid_payment_method"
        )

    return {
        "card_token": method.id,
        "card_brand": card.brand or "",
        "card_last4": card.last4 or "",
        "expiry_month": card.exp_month,
        "expiry_year": card.exp_year,
    }


def detach_payment_method(payment_method_id: str) -> stripe.PaymentMethod:
    """
    Detach a PaymentMethod when a restaurant replaces its card.

    Raises:
        PaymentError: If the API call fails
    """
    try:
        return stripe.PaymentMethod.detach(payment_method_id)
    except stripe.StripeError as e:
        raise PaymentError(
            message=str(e.user_message or e),
            code=getattr(e, "code", None),
        ) from e
