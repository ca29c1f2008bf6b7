import json
from unittest.mock import patch

from django.test import SimpleTestCase, TestCase, override_settings

from marketplace.models import PaymentRecord, Plan, WebhookEvent
from marketplace.tools.payments import PaymentGatewayError, compute_signature
from marketplace.webhooks import EVENT_HANDLERS, WebhookVerificationError, _verify_webhook

from .test_plans import make_account

WEBHOOK_SECRET = "rzp_webhook_secret"
WEBHOOK_URL = "/api/payments/webhook"


class WebhookVerificationTests(SimpleTestCase):
    @override_settings(RAZORPAY_WEBHOOK_SECRET=WEBHOOK_SECRET)
    def test_returns_parsed_event_for_valid_signature(self):
        body = b'{"event":"payment.captured","payload":{}}'
        event = _verify_webhook(body, {"x-razorpay-signature": compute_signature(WEBHOOK_SECRET, body)})
        self.assertEqual(event["event"], "payment.captured")

    @override_settings(RAZORPAY_WEBHOOK_SECRET="")
    def test_missing_webhook_secret(self):
        with self.assertRaises(WebhookVerificationError):
            _verify_webhook(b"{}", {"x-razorpay-signature": "abc"})

    def test_payment_captured_is_handled(self):
        self.assertIn("payment.captured", EVENT_HANDLERS)


@override_settings(RAZORPAY_WEBHOOK_SECRET=WEBHOOK_SECRET)
class RazorpayWebhookViewTests(TestCase):
    def setUp(self):
        self.account = make_account()
        self.body = json.dumps(
            {
                "event": "payment.captured",
                "payload": {
                    "payment": {
                        "entity": {
                            "id": "pay_456",
                            "order_id": "order_123",
                            "amount": 49900,
                            "currency": "INR",
                        }
                    }
                },
            },
            indent=2,
        ).encode("utf-8")
        self.order = {
            "id": "order_123",
            "amount": 49900,
            "currency": "INR",
            "notes": {"userId": str(self.account.pk), "planId": "starter", "planTitle": "Starter Plan"},
        }

    def _post(self, body, signature=None, event_id="evt_1"):
        return self.client.post(
            WEBHOOK_URL,
            data=body,
            content_type="application/json",
            HTTP_X_RAZORPAY_SIGNATURE=signature if signature is not None else compute_signature(WEBHOOK_SECRET, body),
            HTTP_X_RAZORPAY_EVENT_ID=event_id,
        )

    @patch("marketplace.tools.payments.reconciliation.fetch_gateway_order")
    def test_captured_payment_is_recorded_for_audit_only(self, mock_fetch):
        mock_fetch.return_value = self.order

        response = self._post(self.body)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"ok": True})
        record = PaymentRecord.objects.get(account=self.account)
        self.assertEqual(record.source, PaymentRecord.Source.WEBHOOK)
        self.assertEqual(record.payment_id, "pay_456")
        self.assertFalse(Plan.objects.exists())
        self.assertEqual(WebhookEvent.objects.get(event_id="evt_1").status, WebhookEvent.Status.PROCESSED)

    @patch("marketplace.tools.payments.reconciliation.fetch_gateway_order")
    def test_redelivered_event_is_deduplicated(self, mock_fetch):
        mock_fetch.return_value = self.order

        self._post(self.body)
        response = self._post(self.body)

        self.assertEqual(response.json(), {"ok": True, "deduplicated": True})
        self.assertEqual(PaymentRecord.objects.count(), 1)
        mock_fetch.assert_called_once()

    @patch("marketplace.tools.payments.reconciliation.fetch_gateway_order")
    def test_signature_over_reencoded_body_is_rejected(self, mock_fetch):
        compact = json.dumps(json.loads(self.body)).encode("utf-8")

        response = self._post(self.body, signature=compute_signature(WEBHOOK_SECRET, compact))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "invalid_signature")
        mock_fetch.assert_not_called()
        self.assertFalse(WebhookEvent.objects.exists())
        self.assertFalse(PaymentRecord.objects.exists())

    def test_unhandled_event_is_ignored(self):
        body = b'{"event":"order.paid","payload":{}}'

        response = self._post(body, event_id="evt_2")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(WebhookEvent.objects.get(event_id="evt_2").status, WebhookEvent.Status.IGNORED)

    @patch("marketplace.tools.payments.reconciliation.fetch_gateway_order")
    def test_gateway_failure_marks_event_failed(self, mock_fetch):
        mock_fetch.side_effect = PaymentGatewayError("Payment gateway is unreachable.")

        response = self._post(self.body)

        self.assertEqual(response.status_code, 500)
        event = WebhookEvent.objects.get(event_id="evt_1")
        self.assertEqual(event.status, WebhookEvent.Status.FAILED)
        self.assertIn("unreachable", event.error_message)
