from __future__ import annotations

from rest_framework import serializers

from ..models import Account


class AccountSerializer(serializers.ModelSerializer):
    planActive = serializers.BooleanField(source="plan_active", read_only=True)
    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = Account
        fields = (
            "id",
            "name",
            "email",
            "phone",
            "role",
            "planActive",
            "isActive",
            "createdAt",
        )
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=160)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32)
    password = serializers.CharField(min_length=6, write_only=True, trim_whitespace=False)
    role = serializers.ChoiceField(
        choices=(Account.Role.FARMER, Account.Role.SPRAYER),
        default=Account.Role.FARMER,
    )

    def validate_name(self, value: str) -> str:
        cleaned = (value or "").strip()
        if not cleaned:
            raise serializers.ValidationError("Name cannot be empty.")
        return cleaned

    def validate_email(self, value: str) -> str:
        email = (value or "").strip().lower()
        if Account.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return email

    def create(self, validated_data):
        account = Account(
            name=validated_data["name"],
            email=validated_data["email"],
            phone=validated_data["phone"],
            role=validated_data["role"],
        )
        account.set_password(validated_data["password"])
        account.save()
        return account


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_email(self, value: str) -> str:
        return (value or "").strip().lower()


class AccountUpdateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(min_length=6, write_only=True, required=False, trim_whitespace=False)

    class Meta:
        model = Account
        fields = ("name", "email", "phone", "role", "password")
        extra_kwargs = {
            "name": {"required": False},
            "email": {"required": False},
            "phone": {"required": False},
            "role": {"required": False},
        }

    def validate_email(self, value: str) -> str:
        email = (value or "").strip().lower()
        queryset = Account.objects.filter(email__iexact=email)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("An account with this email already exists.")
        return email

    def validate_role(self, value: str) -> str:
        request = self.context.get("request")
        actor = getattr(request, "user", None)
        current = getattr(self.instance, "role", None)
        if value != current and not getattr(actor, "is_admin", False):
            raise serializers.ValidationError("Only admins can change account roles.")
        return value

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for field_name, value in validated_data.items():
            setattr(instance, field_name, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
