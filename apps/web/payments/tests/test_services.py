"""Tests for payment services."""

from unittest.mock import MagicMock, patch

import pytest
import stripe

from apps.web.payments.services import (
    PaymentError,
    describe_payment_method,
    detach_payment_method,
    retrieve_payment_method,
)


def card_method(**overrides):
    method = MagicMock(
        id="pm_test123",
        type="card",
        card=MagicMock(brand="visa", last4="4242", exp_month=12, exp_year=2030),
    )
    for key, value in overrides.items():
        setattr(method, key, value)
    return method


class TestRetrievePaymentMethod:
    """Tests for retrieve_payment_method."""

    @patch("apps.web.payments.services.stripe.PaymentMethod.retrieve")
    def test_retrieve_success(self, mock_retrieve):
        mock_retrieve.return_value = card_method()

        result = retrieve_payment_method("pm_test123")

        mock_retrieve.assert_called_once_with("pm_test123")
        assert result.id == "pm_test123"

    @patch("apps.web.payments.services.stripe.PaymentMethod.retrieve")
    def test_retrieve_not_found(self, mock_retrieve):
        """Stripe errors are wrapped in PaymentError."""
        mock_retrieve.side_effect = stripe.StripeError("No such PaymentMethod")

        with pytest.raises(PaymentError) as exc_info:
            retrieve_payment_method("pm_missing")

        assert "No such PaymentMethod" in exc_info.value.message


class TestDescribePaymentMethod:
    """Tests for describe_payment_method."""

    @patch("apps.web.payments.services.stripe.PaymentMethod.retrieve")
    def test_card_details(self, mock_retrieve):
        mock_retrieve.return_value = card_method()

        assert describe_payment_method("pm_test123") == {
            "card_token": "pm_test123",
            "card_brand": "visa",
            "card_last4": "4242",
            "expiry_month": 12,
            "expiry_year": 2030,
        }

    @patch("apps.web.payments.services.stripe.PaymentMethod.retrieve")
    def test_non_card_is_rejected(self, mock_retrieve):
        mock_retrieve.return_value = card_method(type="boleto", card=None)

        with pytest.raises(PaymentError) as exc_info:
            describe_payment_method("pm_test123")

        assert exc_info.value.code == "invalid_payment_method"


class TestDetachPaymentMethod:
    """Tests for detach_payment_method."""

    @patch("apps.web.payments.services.stripe.PaymentMethod.detach")
    def test_detach_success(self, mock_detach):
        mock_detach.return_value = card_method()

        detach_payment_method("pm_test123")

        mock_detach.assert_called_once_with("pm_test123")

    @patch("apps.web.payments.services.stripe.PaymentMethod.detach")
    def test_detach_error(self, mock_detach):
        mock_detach.side_effect = stripe.StripeError("Already detached")

        with pytest.raises(PaymentError):
            detach_payment_method("pm_test123")
