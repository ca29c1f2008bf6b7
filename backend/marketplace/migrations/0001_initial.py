import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160)),
                ("email", models.EmailField(db_index=True, max_length=254, unique=True)),
                ("phone", models.CharField(max_length=32)),
                ("password", models.CharField(max_length=256)),
                (
                    "role",
                    models.CharField(
                        choices=[("farmer", "Farmer"), ("sprayer", "Sprayer"), ("admin", "Admin")],
                        default="farmer",
                        max_length=16,
                    ),
                ),
                ("plan_active", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ("id",),
                "indexes": [models.Index(fields=["role", "is_active"], name="account_role_active_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("role__in", ("farmer", "sprayer", "admin"))),
                        name="account_role_valid",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("name", ""), _negated=True),
                        name="account_name_not_empty",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="WebhookEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "provider",
                    models.CharField(
                        choices=[("razorpay", "Razorpay"), ("other", "Other")],
                        default="razorpay",
                        max_length=24,
                    ),
                ),
                ("event_id", models.CharField(max_length=191)),
                ("event_type", models.CharField(max_length=191)),
                ("payload", models.JSONField(blank=True, default=dict)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("received", "Received"),
                            ("processed", "Processed"),
                            ("failed", "Failed"),
                            ("ignored", "Ignored"),
                        ],
                        default="received",
                        max_length=24,
                    ),
                ),
                ("error_message", models.TextField(blank=True)),
                ("received_at", models.DateTimeField(auto_now_add=True)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ("-received_at",),
                "indexes": [models.Index(fields=["status", "received_at"], name="webhook_status_received_idx")],
                "constraints": [
                    models.UniqueConstraint(fields=("provider", "event_id"), name="webhook_provider_event_unique"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Plan",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("plan_id", models.CharField(max_length=128)),
                ("title", models.CharField(max_length=180)),
                ("price", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ("duration_months", models.PositiveSmallIntegerField(default=1)),
                ("start_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("end_date", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("Active", "Active"), ("Expired", "Expired")],
                        default="Active",
                        max_length=16,
                    ),
                ),
                ("sprays_allowed", models.PositiveIntegerField(default=0)),
                ("sprays_used", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="plans",
                        to="marketplace.account",
                    ),
                ),
            ],
            options={
                "ordering": ("id",),
                "indexes": [models.Index(fields=["account", "status"], name="plan_account_status_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "Active")),
                        fields=("account",),
                        name="plan_single_active_per_account",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("sprays_used__lte", models.F("sprays_allowed"))),
                        name="plan_sprays_used_within_allowed",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("price__gte", 0)),
                        name="plan_price_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PendingPayment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_id", models.CharField(db_index=True, max_length=128)),
                ("plan_id", models.CharField(blank=True, max_length=128)),
                ("amount", models.PositiveIntegerField(default=0)),
                ("currency", models.CharField(default="INR", max_length=3)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pending_payments",
                        to="marketplace.account",
                    ),
                ),
            ],
            options={"ordering": ("created_at", "id")},
        ),
        migrations.CreateModel(
            name="PaymentRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order_id", models.CharField(db_index=True, max_length=128)),
                ("payment_id", models.CharField(blank=True, max_length=128)),
                ("amount", models.PositiveIntegerField(default=0)),
                ("currency", models.CharField(default="INR", max_length=3)),
                (
                    "source",
                    models.CharField(
                        choices=[("verification", "Client verification"), ("webhook", "Webhook")],
                        default="verification",
                        max_length=24,
                    ),
                ),
                ("notes", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="marketplace.account",
                    ),
                ),
            ],
            options={
                "ordering": ("created_at", "id"),
                "indexes": [models.Index(fields=["account", "order_id"], name="payment_account_order_idx")],
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("service_title", models.CharField(blank=True, default="Fertilizer Spray", max_length=180)),
                ("orchid", models.CharField(blank=True, default="Orchid A", max_length=120)),
                ("field", models.CharField(max_length=180)),
                ("address", models.CharField(max_length=255)),
                ("pincode", models.CharField(max_length=12)),
                ("sprays_count", models.PositiveSmallIntegerField(default=1)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("Pending", "Pending"),
                            ("In Progress", "In progress"),
                            ("Completed", "Completed"),
                            ("Cancelled", "Cancelled"),
                        ],
                        default="Pending",
                        max_length=16,
                    ),
                ),
                ("schedule_date", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to="marketplace.account",
                    ),
                ),
                (
                    "assigned_sprayer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_bookings",
                        to="marketplace.account",
                    ),
                ),
            ],
            options={
                "ordering": ("created_at", "id"),
                "indexes": [
                    models.Index(fields=["owner", "status"], name="booking_owner_status_idx"),
                    models.Index(fields=["status", "schedule_date"], name="booking_status_schedule_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status__in", ("Pending", "In Progress"))),
                        fields=("owner",),
                        name="booking_single_open_per_owner",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("status__in", ("Pending", "In Progress")),
                            ("schedule_date__isnull", False),
                        ),
                        fields=("schedule_date",),
                        name="booking_open_slot_unique",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("sprays_count__gte", 1)),
                        name="booking_sprays_count_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Assignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("schedule_date", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[("In Progress", "In progress"), ("Completed", "Completed")],
                        default="In Progress",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="marketplace.booking",
                    ),
                ),
                (
                    "farmer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="farmer_assignments",
                        to="marketplace.account",
                    ),
                ),
                (
                    "sprayer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="marketplace.account",
                    ),
                ),
            ],
            options={
                "ordering": ("created_at", "id"),
                "constraints": [
                    models.UniqueConstraint(fields=("sprayer", "booking"), name="assignment_sprayer_booking_unique"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ServiceFeedback",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rating", models.PositiveSmallIntegerField()),
                ("comment", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "author",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="feedback_given",
                        to="marketplace.account",
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="feedback",
                        to="marketplace.booking",
                    ),
                ),
            ],
            options={
                "ordering": ("created_at", "id"),
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("rating__gte", 1), ("rating__lte", 5)),
                        name="feedback_rating_range",
                    ),
                    models.UniqueConstraint(fields=("booking", "author"), name="feedback_booking_author_unique"),
                ],
            },
        ),
    ]
