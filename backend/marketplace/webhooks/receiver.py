from __future__ import annotations

import hashlib
import logging

from django.http import HttpRequest, JsonResponse
from django.utils import timezone as django_timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from ..models import WebhookEvent
from .handlers import EVENT_HANDLERS
from .verification import WebhookVerificationError, _verify_webhook

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class RazorpayWebhookView(View):
    """Receive Razorpay webhook events; the signature covers the raw request body."""

    def post(self, request: HttpRequest) -> JsonResponse:
        raw_body = request.body
        headers = {
            "x-razorpay-signature": request.headers.get("x-razorpay-signature", ""),
            "x-razorpay-event-id": request.headers.get("x-razorpay-event-id", ""),
        }

        try:
            event = _verify_webhook(raw_body, headers)
        except WebhookVerificationError as exc:
            logger.warning("Webhook verification failed: %s", exc)
            return JsonResponse({"detail": str(exc), "code": "invalid_signature"}, status=400)

        # Redeliveries without an event id header fall back to a body digest.
        event_id = str(headers["x-razorpay-event-id"] or "").strip() or hashlib.sha256(raw_body).hexdigest()
        event_type = str(event.get("event") or "").strip()
        payload = event.get("payload", {})

        webhook_event, created = WebhookEvent.objects.get_or_create(
            provider=WebhookEvent.Provider.RAZORPAY,
            event_id=event_id,
            defaults={
                "event_type": event_type or "unknown",
                "payload": event,
                "status": WebhookEvent.Status.RECEIVED,
            },
        )
        if not created and webhook_event.status in {
            WebhookEvent.Status.PROCESSED,
            WebhookEvent.Status.IGNORED,
        }:
            return JsonResponse({"ok": True, "deduplicated": True})

        handler = EVENT_HANDLERS.get(event_type)
        if handler:
            try:
                handler(payload if isinstance(payload, dict) else {})
            except Exception as exc:
                logger.exception("Error processing webhook event: %s", event_type)
                webhook_event.status = WebhookEvent.Status.FAILED
                webhook_event.processed_at = django_timezone.now()
                webhook_event.error_message = str(exc)
                webhook_event.save(update_fields=["status", "processed_at", "error_message"])
                return JsonResponse({"detail": "Internal handler error.", "code": "server_error"}, status=500)
            webhook_event.status = WebhookEvent.Status.PROCESSED
        else:
            logger.debug("Unhandled Razorpay webhook event type: %s", event_type)
            webhook_event.status = WebhookEvent.Status.IGNORED

        webhook_event.processed_at = django_timezone.now()
        webhook_event.error_message = ""
        webhook_event.save(update_fields=["status", "processed_at", "error_message"])
        return JsonResponse({"ok": True})
