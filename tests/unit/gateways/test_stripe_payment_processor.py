import unittest
from unittest.mock import MagicMock, patch

import stripe

from booking_core.domain.errors import PaymentIntentError
from booking_core.infrastructure.circuit_breaker import payment_breaker, reset_all_breakers
from booking_core.infrastructure.gateways.stripe_payment_processor import (
    StripePaymentProcessor,
    intent_id_from_secret,
)


def fake_intent(**fields):
    intent = MagicMock()
    intent.id = fields.get("id", "pi_123")
    intent.client_secret = fields.get("client_secret", "pi_123_secret_abc")
    intent.amount = fields.get("amount", 45000)
    intent.currency = fields.get("currency", "usd")
    intent.status = fields.get("status", "requires_payment_method")
    intent.last_payment_error = fields.get("last_payment_error")
    return intent


class TestStripePaymentProcessor(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        reset_all_breakers()
        self.processor = StripePaymentProcessor("sk_test_123", three_d_secure_threshold=50000)

    @patch("stripe.PaymentIntent.create")
    async def test_create_intent(self, mock_create):
        mock_create.return_value = fake_intent()

        created = await self.processor.create_intent(45000, "USD", {"hotelId": "42"})

        self.assertEqual(created.intent_id, "pi_123")
        self.assertEqual(created.amount, 45000)
        kwargs = mock_create.call_args.kwargs
        self.assertEqual(kwargs["currency"], "usd")
        self.assertEqual(kwargs["metadata"], {"hotelId": "42"})
        self.assertNotIn("payment_method_options", kwargs)

    @patch("stripe.PaymentIntent.create")
    async def test_large_amount_requests_three_d_secure(self, mock_create):
        mock_create.return_value = fake_intent(amount=60000)

        await self.processor.create_intent(60000, "usd", {})

        options = mock_create.call_args.kwargs["payment_method_options"]
        self.assertEqual(options, {"card": {"request_three_d_secure": "any"}})

    @patch("stripe.PaymentIntent.create")
    async def test_create_intent_stripe_error(self, mock_create):
        mock_create.side_effect = stripe.APIConnectionError("network down")

        with self.assertRaises(PaymentIntentError):
            await self.processor.create_intent(45000, "usd", {})

    @patch("stripe.PaymentIntent.create")
    async def test_create_intent_circuit_open(self, mock_create):
        payment_breaker.open()

        with self.assertRaises(PaymentIntentError) as ctx:
            await self.processor.create_intent(45000, "usd", {})

        self.assertEqual(ctx.exception.message, "Payment service temporarily unavailable")
        mock_create.assert_not_called()

    @patch("stripe.PaymentIntent.confirm")
    async def test_confirm_with_payment_method(self, mock_confirm):
        mock_confirm.return_value = fake_intent(status="succeeded")

        result = await self.processor.confirm("pi_123_secret_abc", "pm_card_visa")

        self.assertFalse(result.is_error)
        self.assertEqual(result.status, "succeeded")
        self.assertEqual(result.confirmation_id, "pi_123")
        mock_confirm.assert_called_once_with("pi_123", payment_method="pm_card_visa")

    @patch("stripe.PaymentIntent.retrieve")
    async def test_confirm_reads_back_client_side_confirmation(self, mock_retrieve):
        mock_retrieve.return_value = fake_intent(status="succeeded")

        result = await self.processor.confirm("pi_123_secret_abc")

        self.assertEqual(result.status, "succeeded")
        mock_retrieve.assert_called_once_with("pi_123")

    @patch("stripe.PaymentIntent.confirm")
    async def test_card_declined(self, mock_confirm):
        mock_confirm.side_effect = stripe.CardError(
            "Your card was declined.", param=None, code="card_declined"
        )

        result = await self.processor.confirm("pi_123_secret_abc", "pm_card_visa")

        self.assertTrue(result.is_error)
        self.assertEqual(result.error_code, "card_declined")

    @patch("stripe.PaymentIntent.confirm")
    async def test_declines_do_not_open_the_circuit(self, mock_confirm):
        mock_confirm.side_effect = stripe.CardError("declined", param=None, code="card_declined")

        for _ in range(10):
            await self.processor.confirm("pi_123_secret_abc", "pm_card_visa")

        self.assertEqual(payment_breaker.fail_counter, 0)

    @patch("stripe.PaymentIntent.retrieve")
    async def test_last_payment_error(self, mock_retrieve):
        mock_retrieve.return_value = fake_intent(
            status="requires_payment_method",
            last_payment_error={"code": "expired_card", "message": "Your card has expired."},
        )

        result = await self.processor.confirm("pi_123_secret_abc")

        self.assertEqual(result.error_code, "expired_card")
        self.assertIsNone(result.confirmation_id)

    def test_intent_id_from_secret(self):
        self.assertEqual(intent_id_from_secret("pi_3Abc_secret_xyz"), "pi_3Abc")


if __name__ == "__main__":
    unittest.main()
