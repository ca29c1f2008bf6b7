from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from marketplace.exceptions import ActiveAlreadyExists, QuotaExceeded
from marketplace.models import Account, Plan
from marketplace.tools.plans import (
    MAX_PLAN_MONTHS,
    PlanDescriptor,
    activate_plan,
    add_months,
    adjust_quota,
    find_usable_active_plan,
    parse_duration_months,
    purchase_plan,
    refresh_plan_active_flag,
    sprays_per_month,
)


def make_account(email="farmer@example.com", role=Account.Role.FARMER, name="Ravi Kumar"):
    account = Account(name=name, email=email, phone="9000000001", role=role)
    account.set_password("secret123")
    account.save()
    return account


class PlanMathTests(SimpleTestCase):
    def test_parse_duration_months_accepts_numbers_and_labels(self):
        self.assertEqual(parse_duration_months(3), 3)
        self.assertEqual(parse_duration_months("6"), 6)
        self.assertEqual(parse_duration_months("3 Months"), 3)
        self.assertEqual(parse_duration_months(" 12 month "), 12)

    def test_parse_duration_months_falls_back_to_one(self):
        for raw in (None, "", "abc", 0, "0", -2, "-5", True):
            with self.subTest(raw=raw):
                self.assertEqual(parse_duration_months(raw), 1)

    def test_parse_duration_months_caps_long_durations(self):
        self.assertEqual(parse_duration_months("100000"), MAX_PLAN_MONTHS)
        self.assertEqual(parse_duration_months("999 Months"), MAX_PLAN_MONTHS)
        self.assertEqual(parse_duration_months(MAX_PLAN_MONTHS), MAX_PLAN_MONTHS)

    def test_sprays_per_month_keyword_lookup(self):
        self.assertEqual(sprays_per_month("Starter Plan"), 2)
        self.assertEqual(sprays_per_month("Pro Plan"), 3)
        self.assertEqual(sprays_per_month("Premium Plan"), 4)
        self.assertEqual(sprays_per_month("", "plan_pro_3m"), 3)
        self.assertEqual(sprays_per_month("Basic Plan"), 1)
        self.assertEqual(sprays_per_month("Protect Plan"), 1)

    def test_explicit_spray_count_overrides_keyword(self):
        self.assertEqual(sprays_per_month("Premium 6 Spray Pack"), 6)
        self.assertEqual(sprays_per_month("Custom", "plan-5-sprays"), 5)

    def test_add_months_clamps_to_month_end(self):
        start = datetime(2024, 1, 31, 10, 30, tzinfo=dt_timezone.utc)
        self.assertEqual(add_months(start, 1), datetime(2024, 2, 29, 10, 30, tzinfo=dt_timezone.utc))
        self.assertEqual(add_months(start, 13), datetime(2025, 2, 28, 10, 30, tzinfo=dt_timezone.utc))
        self.assertEqual(
            add_months(datetime(2024, 11, 15, tzinfo=dt_timezone.utc), 3),
            datetime(2025, 2, 15, tzinfo=dt_timezone.utc),
        )


class PlanLifecycleTests(TestCase):
    def setUp(self):
        self.account = make_account()
        self.starter = PlanDescriptor(plan_id="starter", title="Starter Plan", price="499", duration="1")

    def test_activate_plan_sets_quota_window_and_flag(self):
        plan = activate_plan(self.account, self.starter)

        self.assertEqual(plan.status, Plan.Status.ACTIVE)
        self.assertEqual(plan.sprays_allowed, 2)
        self.assertEqual(plan.sprays_used, 0)
        self.assertEqual(plan.price, Decimal("499.00"))
        self.assertEqual(plan.end_date, add_months(plan.start_date, 1))
        self.account.refresh_from_db()
        self.assertTrue(self.account.plan_active)

    def test_activate_plan_multiplies_quota_by_months(self):
        plan = activate_plan(
            self.account,
            PlanDescriptor(plan_id="pro", title="Pro Plan", price="1299", duration="3 Months"),
        )
        self.assertEqual(plan.duration_months, 3)
        self.assertEqual(plan.sprays_allowed, 9)

    def test_activate_plan_expires_previous_active_plans(self):
        first = activate_plan(self.account, self.starter)
        second = activate_plan(self.account, self.starter)

        first.refresh_from_db()
        self.assertEqual(first.status, Plan.Status.EXPIRED)
        self.assertEqual(
            list(Plan.objects.filter(account=self.account, status=Plan.Status.ACTIVE)),
            [second],
        )

    def test_purchase_plan_rejects_while_usable_plan_exists(self):
        purchase_plan(self.account, self.starter)

        with self.assertRaises(ActiveAlreadyExists):
            purchase_plan(self.account, self.starter)
        self.assertEqual(Plan.objects.filter(account=self.account).count(), 1)

    def test_purchase_plan_allowed_after_previous_plan_lapsed(self):
        past = timezone.now() - timedelta(days=60)
        lapsed = Plan.objects.create(
            account=self.account,
            plan_id="starter",
            title="Starter Plan",
            start_date=past,
            end_date=past + timedelta(days=30),
            status=Plan.Status.ACTIVE,
            sprays_allowed=2,
        )

        plan = purchase_plan(self.account, self.starter)

        lapsed.refresh_from_db()
        self.assertEqual(lapsed.status, Plan.Status.EXPIRED)
        self.assertEqual(find_usable_active_plan(self.account), plan)

    def test_adjust_quota_consumes_and_refunds(self):
        plan = activate_plan(self.account, self.starter)

        adjust_quota(self.account, plan, 2)
        self.assertEqual(plan.sprays_used, 2)

        adjust_quota(self.account, plan, -5)
        self.assertEqual(plan.sprays_used, 0)

    def test_adjust_quota_reports_remaining_count_on_shortfall(self):
        plan = activate_plan(self.account, self.starter)
        adjust_quota(self.account, plan, 1)

        with self.assertRaises(QuotaExceeded) as ctx:
            adjust_quota(self.account, plan, 2)

        self.assertIn("you have 1 spray(s) left", str(ctx.exception.detail))
        plan.refresh_from_db()
        self.assertEqual(plan.sprays_used, 1)

    def test_refresh_plan_active_flag_sweeps_lapsed_plans(self):
        plan = activate_plan(self.account, self.starter)
        Plan.objects.filter(pk=plan.pk).update(
            start_date=timezone.now() - timedelta(days=40),
            end_date=timezone.now() - timedelta(days=10),
        )

        self.assertFalse(refresh_plan_active_flag(self.account))

        plan.refresh_from_db()
        self.account.refresh_from_db()
        self.assertEqual(plan.status, Plan.Status.EXPIRED)
        self.assertFalse(self.account.plan_active)
