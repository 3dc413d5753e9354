from __future__ import annotations

import logging
import re
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.validators import UnicodeUsernameValidator
from django.utils import timezone
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()
PHONE_CLEAN_RE = re.compile(r"\D+")
DEFAULT_COUNTRY_CODE = "91"

logger = logging.getLogger(__name__)


def normalize_phone(raw_phone: Optional[str]) -> Optional[str]:
    """
    Return an E.164 number.

    Bare 10 digit numbers are treated as Indian mobiles (+91); anything else must
    carry its country code.
    """
    if raw_phone is None:
        return None
    stripped = raw_phone.strip()
    if not stripped:
        return None

    digits = PHONE_CLEAN_RE.sub("", stripped)
    if stripped.startswith("+"):
        normalized = f"+{digits}"
    elif len(digits) == 10:
        normalized = f"+{DEFAULT_COUNTRY_CODE}{digits}"
    else:
        raise serializers.ValidationError("Include the country code (e.g. +91...).")

    if not 11 <= len(normalized) <= 16:
        raise serializers.ValidationError("Enter a valid phone number.")
    return normalized


class ProfileSerializer(serializers.ModelSerializer):
    """Account details for the authenticated user."""

    is_admin = serializers.BooleanField(read_only=True)
    has_valid_license = serializers.BooleanField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "phone",
            "first_name",
            "last_name",
            "date_of_birth",
            "driver_license_number",
            "driver_license_expiry",
            "has_valid_license",
            "address",
            "role",
            "is_admin",
            "date_joined",
        ]
        read_only_fields = fields


class SignupSerializer(serializers.ModelSerializer):
    """Register a regular (non-admin) account."""

    username = serializers.CharField(max_length=150, validators=[UnicodeUsernameValidator()])
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "password",
            "first_name",
            "last_name",
            "phone",
            "date_of_birth",
            "driver_license_number",
            "driver_license_expiry",
            "address",
            "role",
        ]
        read_only_fields = ("id", "role")

    def validate_username(self, value: str) -> str:
        value = value.strip()
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("A user with that username already exists.")
        return value

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def validate_password(self, value: str) -> str:
        validate_password(value)
        return value

    def validate_phone(self, value: Optional[str]) -> Optional[str]:
        phone = normalize_phone(value)
        if phone and User.objects.filter(phone=phone).exists():
            raise serializers.ValidationError("A user with this phone already exists.")
        return phone

    def validate_date_of_birth(self, value):
        if value and value >= timezone.localdate():
            raise serializers.ValidationError("Date of birth must be in the past.")
        return value

    def validate_driver_license_number(self, value: str) -> str:
        return value.strip().upper()

    def create(self, validated_data: dict) -> User:
        password = validated_data.pop("password")
        user = User.objects.create_user(password=password, **validated_data)
        logger.info("users: registered user %s", user.id, extra={"user_id": user.id})
        return user


class LoginSerializer(TokenObtainPairSerializer):
    """
    Issue a JWT pair for a username, email or phone number.

    The identifier is read from ``username`` (or ``identifier``) and resolved to
    the account's real username before SimpleJWT authenticates the password.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["identifier"] = serializers.CharField(required=False, allow_blank=True)
        self.fields[self.username_field].required = False

    def validate(self, attrs: dict) -> dict:
        identifier = (attrs.get("identifier") or attrs.get(self.username_field) or "").strip()
        if not identifier or not attrs.get("password"):
            raise serializers.ValidationError(
                {"non_field_errors": ["Provide credentials to log in."]}
            )

        user = self._resolve_user(identifier)
        if user is None:
            raise AuthenticationFailed(self.error_messages["no_active_account"])
        attrs[self.username_field] = user.get_username()
        return super().validate(attrs)

    def _resolve_user(self, identifier: str) -> Optional[User]:
        if "@" in identifier:
            user = User.objects.filter(email__iexact=identifier).first()
            if user is not None:
                return user
        user = User.objects.filter(username__iexact=identifier).first()
        if user is not None:
            return user
        try:
            phone = normalize_phone(identifier)
        except serializers.ValidationError:
            return None
        return User.objects.filter(phone=phone).first() if phone else None
