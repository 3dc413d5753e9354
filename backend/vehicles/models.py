from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Vehicle(models.Model):
    class VehicleType(models.TextChoices):
        CAR = "CAR", "Car"
        BIKE = "BIKE", "Bike"
        SCOOTER = "SCOOTER", "Scooter"
        SUV = "SUV", "SUV"
        VAN = "VAN", "Van"
        TRUCK = "TRUCK", "Truck"

    class FuelType(models.TextChoices):
        PETROL = "PETROL", "Petrol"
        DIESEL = "DIESEL", "Diesel"
        ELECTRIC = "ELECTRIC", "Electric"
        HYBRID = "HYBRID", "Hybrid"
        CNG = "CNG", "CNG"

    class Status(models.TextChoices):
        AVAILABLE = "AVAILABLE", "Available"
        RENTED = "RENTED", "Rented"
        MAINTENANCE = "MAINTENANCE", "Maintenance"
        INACTIVE = "INACTIVE", "Inactive"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="vehicles",
    )
    license_plate = models.CharField(max_length=32, unique=True)
    brand = models.CharField(max_length=60)
    model = models.CharField(max_length=60)
    year = models.PositiveIntegerField(
        validators=[MinValueValidator(1900), MaxValueValidator(2100)],
    )
    color = models.CharField(max_length=30)
    vehicle_type = models.CharField(
        max_length=16,
        choices=VehicleType.choices,
        default=VehicleType.CAR,
    )
    fuel_type = models.CharField(
        max_length=16,
        choices=FuelType.choices,
        default=FuelType.PETROL,
    )
    seat_count = models.PositiveSmallIntegerField(null=True, blank=True)
    daily_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    location = models.CharField(max_length=120, blank=True, default="")
    description = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "vehicle_type"], name="vehicles_status_type_idx"),
        ]

    def clean(self):
        if self.daily_rate is not None and self.daily_rate <= 0:
            raise ValidationError({"daily_rate": "Daily rate must be positive."})

    def is_available(self) -> bool:
        return self.status == self.Status.AVAILABLE

    def __str__(self) -> str:
        return f"{self.brand} {self.model} ({self.license_plate})"
