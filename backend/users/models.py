from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    """Marketplace account; renters and vehicle owners share this model."""

    class Role(models.TextChoices):
        USER = "USER", "User"
        ADMIN = "ADMIN", "Admin"

    phone = models.CharField(
        max_length=32,
        unique=True,
        null=True,
        blank=True,
        help_text="Optional E.164 formatted phone number.",
    )
    role = models.CharField(
        max_length=16,
        choices=Role.choices,
        default=Role.USER,
        help_text="ADMIN users may confirm, activate and complete bookings.",
    )
    date_of_birth = models.DateField(null=True, blank=True)
    driver_license_number = models.CharField(max_length=32, blank=True, default="")
    driver_license_expiry = models.DateField(null=True, blank=True)
    address = models.TextField(blank=True, default="")

    @property
    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN or bool(self.is_superuser)

    @property
    def has_valid_license(self) -> bool:
        """True when a licence number is on file and it has not expired."""
        if not self.driver_license_number or self.driver_license_expiry is None:
            return False
        return self.driver_license_expiry >= timezone.localdate()

    def __str__(self) -> str:
        return self.username
