from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from marketplace.models import Account, Booking, PendingPayment
from marketplace.tools.auth import issue_access_token

from .test_plans import make_account

BOOKING_BODY = {"field": "North paddy", "address": "Village Road 4", "pincode": "500001", "spraysCount": 1}
STARTER_BODY = {"planId": "starter", "title": "Starter Plan", "price": "499.00", "duration": "1"}


class ApiTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.farmer = make_account()
        self.sprayer = make_account("sprayer@example.com", Account.Role.SPRAYER, "Suresh Drone")
        self.admin = make_account("admin@example.com", Account.Role.ADMIN, "Admin User")

    def as_account(self, account):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_access_token(account)}")
        return self.client


class AuthApiTests(ApiTestCase):
    def test_health_is_public(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_register_returns_token_and_rejects_duplicate_email(self):
        payload = {
            "name": "Lakshmi Devi",
            "email": "Lakshmi@Example.com",
            "phone": "9000000002",
            "password": "secret123",
        }
        response = self.client.post("/register", payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["email"], "lakshmi@example.com")
        self.assertEqual(response.json()["user"]["role"], "farmer")
        self.assertTrue(response.json()["token"])

        duplicate = self.client.post("/register", {**payload, "email": "lakshmi@example.com"}, format="json")
        self.assertEqual(duplicate.status_code, 400)

    def test_register_cannot_self_assign_admin_role(self):
        response = self.client.post(
            "/register",
            {"name": "Eve", "email": "eve@example.com", "phone": "1", "password": "secret123", "role": "admin"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_login_issues_token_usable_on_protected_routes(self):
        response = self.client.post(
            "/login",
            {"email": "FARMER@example.com", "password": "secret123"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.json()['token']}")
        detail = self.client.get(f"/users/{self.farmer.pk}")
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(detail.json()["planActive"], False)

    def test_login_rejects_bad_password(self):
        response = self.client.post("/login", {"email": "farmer@example.com", "password": "wrong"}, format="json")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "authentication_failed")
        self.assertEqual(response["WWW-Authenticate"], "Bearer")

    def test_protected_routes_require_token(self):
        self.assertEqual(self.client.get(f"/users/{self.farmer.pk}").status_code, 401)

        self.client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")
        self.assertEqual(self.client.get(f"/users/{self.farmer.pk}").status_code, 401)

    def test_farmer_cannot_act_on_other_accounts(self):
        other = make_account("farmer2@example.com", name="Anita Rao")
        client = self.as_account(self.farmer)

        self.assertEqual(client.get(f"/users/{other.pk}").status_code, 403)
        self.assertEqual(client.post(f"/purchase-plan/{other.pk}", STARTER_BODY, format="json").status_code, 403)
        self.assertEqual(client.get("/users").status_code, 403)

    def test_admin_lists_and_updates_accounts(self):
        client = self.as_account(self.admin)

        listing = client.get("/users", {"role": "sprayer"})
        self.assertEqual(listing.status_code, 200)
        self.assertEqual([row["id"] for row in listing.json()], [self.sprayer.pk])

        update = client.put(f"/users/{self.farmer.pk}", {"phone": "9111111111"}, format="json")
        self.assertEqual(update.status_code, 200)
        self.assertEqual(update.json()["phone"], "9111111111")

    def test_farmer_cannot_change_own_role(self):
        response = self.as_account(self.farmer).put(f"/users/{self.farmer.pk}", {"role": "admin"}, format="json")
        self.assertEqual(response.status_code, 400)


class ServiceApiTests(ApiTestCase):
    def test_booking_flow_over_http(self):
        client = self.as_account(self.farmer)

        no_plan = client.post(f"/book-service/{self.farmer.pk}", BOOKING_BODY, format="json")
        self.assertEqual(no_plan.status_code, 400)
        self.assertEqual(no_plan.json()["code"], "no_active_plan")

        purchase = client.post(f"/purchase-plan/{self.farmer.pk}", STARTER_BODY, format="json")
        self.assertEqual(purchase.status_code, 201)
        self.assertEqual(purchase.json()["plan"]["spraysAllowed"], 2)

        again = client.post(f"/purchase-plan/{self.farmer.pk}", STARTER_BODY, format="json")
        self.assertEqual(again.status_code, 400)
        self.assertEqual(again.json()["code"], "active_plan_exists")

        first = client.post(f"/book-service/{self.farmer.pk}", BOOKING_BODY, format="json")
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()["service"]["serviceTitle"], "Fertilizer Spray")
        self.assertEqual(first.json()["service"]["orchid"], "Orchid A")
        booking_id = first.json()["service"]["id"]

        conflict = client.post(f"/book-service/{self.farmer.pk}", BOOKING_BODY, format="json")
        self.assertEqual(conflict.status_code, 400)
        self.assertEqual(conflict.json()["code"], "conflicting_booking")

        too_many = client.put(
            f"/edit-booking/{self.farmer.pk}/{booking_id}",
            {"spraysCount": 5},
            format="json",
        )
        self.assertEqual(too_many.status_code, 400)
        self.assertEqual(too_many.json()["code"], "quota_exceeded")

        cancelled = client.post(f"/cancel-booking/{self.farmer.pk}/{booking_id}")
        self.assertEqual(cancelled.status_code, 200)
        self.assertEqual(cancelled.json()["service"]["status"], "Cancelled")

        purchases = client.get(f"/users/{self.farmer.pk}/purchases")
        self.assertEqual(purchases.status_code, 200)
        body = purchases.json()
        self.assertTrue(body["planActive"])
        self.assertEqual(body["activePlan"]["spraysUsed"], 0)
        self.assertEqual(body["bookings"], [])
        self.assertEqual(len(body["purchasedPlans"]), 1)

    def test_purchase_plan_rejects_oversized_duration(self):
        client = self.as_account(self.farmer)

        response = client.post(
            f"/purchase-plan/{self.farmer.pk}",
            {**STARTER_BODY, "duration": "100000"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("duration", response.json())
        self.assertFalse(self.farmer.plans.exists())

    def test_cancel_unknown_booking_is_not_found(self):
        response = self.as_account(self.farmer).post(f"/cancel-booking/{self.farmer.pk}/999")
        self.assertEqual(response.status_code, 404)

    def _pending_booking(self):
        self.as_account(self.farmer).post(f"/purchase-plan/{self.farmer.pk}", STARTER_BODY, format="json")
        response = self.client.post(f"/book-service/{self.farmer.pk}", BOOKING_BODY, format="json")
        return response.json()["service"]["id"]

    def test_sprayer_routes_require_sprayer_role(self):
        self._pending_booking()

        self.assertEqual(self.as_account(self.farmer).get("/sprayer/services").status_code, 403)

        listing = self.as_account(self.sprayer).get("/sprayer/services", {"status": "Pending"})
        self.assertEqual(listing.status_code, 200)
        services = listing.json()["services"]
        self.assertEqual(len(services), 1)
        self.assertEqual(services[0]["ownerName"], "Ravi Kumar")
        self.assertEqual(services[0]["ownerPhone"], "9000000001")

    def test_accept_complete_and_feedback(self):
        booking_id = self._pending_booking()
        other_sprayer = make_account("sprayer2@example.com", Account.Role.SPRAYER, "Mahesh Drone")

        accepted = self.as_account(self.sprayer).post("/sprayer/accept-service", {"bookingId": booking_id}, format="json")
        self.assertEqual(accepted.status_code, 200)
        self.assertEqual(accepted.json()["service"]["status"], "In Progress")

        wrong = self.as_account(other_sprayer).post("/sprayer/complete-service", {"bookingId": booking_id}, format="json")
        self.assertEqual(wrong.status_code, 403)
        self.assertEqual(wrong.json()["code"], "not_assigned")

        done = self.as_account(self.sprayer).post("/sprayer/complete-service", {"bookingId": booking_id}, format="json")
        self.assertEqual(done.status_code, 200)
        self.assertEqual(done.json()["service"]["status"], "Completed")

        assigned = self.client.get(f"/users/{self.sprayer.pk}/purchases").json()["assignedServices"]
        self.assertEqual([(row["bookingId"], row["status"]) for row in assigned], [(booking_id, "Completed")])

        feedback = self.as_account(self.farmer).post(
            f"/services/{booking_id}/feedback",
            {"rating": 5, "comment": "On time"},
            format="json",
        )
        self.assertEqual(feedback.status_code, 201)
        self.assertEqual(feedback.json()["feedback"]["rating"], 5)

    def test_admin_assigns_slot_and_conflicts_are_rejected(self):
        booking_id = self._pending_booking()
        other_farmer = make_account("farmer2@example.com", name="Anita Rao")
        self.as_account(other_farmer).post(f"/purchase-plan/{other_farmer.pk}", STARTER_BODY, format="json")
        second_id = self.client.post(f"/book-service/{other_farmer.pk}", BOOKING_BODY, format="json").json()["service"]["id"]
        slot = (timezone.now() + timedelta(days=1)).replace(microsecond=0).isoformat()

        client = self.as_account(self.admin)
        assigned = client.post(
            "/sprayer/assign-slot",
            {"bookingId": booking_id, "scheduleDate": slot, "sprayerId": self.sprayer.pk},
            format="json",
        )
        self.assertEqual(assigned.status_code, 200)
        self.assertEqual(assigned.json()["service"]["assignedSprayer"], self.sprayer.pk)

        taken = client.post(
            "/sprayer/assign-slot",
            {"bookingId": second_id, "scheduleDate": slot, "sprayerId": self.sprayer.pk},
            format="json",
        )
        self.assertEqual(taken.status_code, 400)
        self.assertEqual(taken.json()["code"], "slot_taken")
        self.assertEqual(Booking.objects.get(pk=second_id).status, Booking.Status.PENDING)

    def test_sprayer_cannot_assign_for_another_sprayer(self):
        booking_id = self._pending_booking()
        other_sprayer = make_account("sprayer2@example.com", Account.Role.SPRAYER, "Mahesh Drone")

        response = self.as_account(self.sprayer).post(
            "/sprayer/assign-slot",
            {"bookingId": booking_id, "scheduleDate": timezone.now().isoformat(), "sprayerId": other_sprayer.pk},
            format="json",
        )
        self.assertEqual(response.status_code, 403)


@override_settings(RAZORPAY_KEY_ID="rzp_test_key", RAZORPAY_KEY_SECRET="rzp_test_secret")
class PaymentApiTests(ApiTestCase):
    @patch("marketplace.tools.payments.reconciliation.create_gateway_order")
    def test_create_order_endpoint(self, mock_create):
        mock_create.return_value = {"id": "order_123", "amount": 49900, "currency": "INR"}

        response = self.as_account(self.farmer).post(
            "/api/payments/create-order",
            {"userId": self.farmer.pk, "planId": "starter", "title": "Starter Plan", "price": 499},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["order"]["id"], "order_123")
        self.assertEqual(mock_create.call_args.kwargs["amount"], 49900)
        self.assertTrue(PendingPayment.objects.filter(account=self.farmer, order_id="order_123").exists())

    @override_settings(RAZORPAY_KEY_ID="", RAZORPAY_KEY_SECRET="")
    def test_create_order_without_gateway_credentials(self):
        response = self.as_account(self.farmer).post(
            "/api/payments/create-order",
            {"userId": self.farmer.pk, "planId": "starter", "title": "Starter Plan", "price": "499"},
            format="json",
        )
        self.assertEqual(response.status_code, 503)

    @patch("marketplace.tools.payments.reconciliation.fetch_gateway_order")
    def test_verify_payment_endpoint_rejects_bad_signature(self, mock_fetch):
        response = self.as_account(self.farmer).post(
            "/api/payments/verify-payment",
            {"razorpay_order_id": "order_123", "razorpay_payment_id": "pay_456", "razorpay_signature": "bad"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "invalid_signature")
        mock_fetch.assert_not_called()
