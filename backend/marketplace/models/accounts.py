from __future__ import annotations

from django.contrib.auth.hashers import check_password, make_password
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    class Role(models.TextChoices):
        FARMER = "farmer", "Farmer"
        SPRAYER = "sprayer", "Sprayer"
        ADMIN = "admin", "Admin"

    name = models.CharField(max_length=160)
    email = models.EmailField(unique=True, db_index=True)
    phone = models.CharField(max_length=32)
    password = models.CharField(max_length=256)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.FARMER)
    # Cache of "has a usable active plan"; the plan rows are authoritative.
    plan_active = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("id",)
        indexes = [
            models.Index(fields=("role", "is_active"), name="account_role_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(role__in=("farmer", "sprayer", "admin")),
                name="account_role_valid",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="account_name_not_empty",
            ),
        ]

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_anonymous(self) -> bool:
        return False

    @property
    def is_sprayer(self) -> bool:
        return self.role == self.Role.SPRAYER

    @property
    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN

    def set_password(self, raw_password: str) -> None:
        self.password = make_password(str(raw_password))

    def check_password(self, raw_password: str) -> bool:
        return check_password(str(raw_password), self.password)

    def clean(self) -> None:
        self.name = (self.name or "").strip()
        self.email = (self.email or "").strip().lower()
        self.phone = (self.phone or "").strip()

        if not self.name:
            raise ValidationError({"name": "Name cannot be empty."})
        if not self.phone:
            raise ValidationError({"phone": "Phone cannot be empty."})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} <{self.email}> ({self.role})"
