"""Payments module - Stripe card references for restaurant subscriptions."""

from apps.web.payments.services import (
    PaymentError,
    describe_payment_method,
    detach_payment_method,
    retrieve_payment_method,
)

__all__ = [
    "PaymentError",
    "describe_payment_method",
    "detach_payment_method",
    "retrieve_payment_method",
]
