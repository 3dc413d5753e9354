import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Vehicle",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("license_plate", models.CharField(max_length=32, unique=True)),
                ("brand", models.CharField(max_length=60)),
                ("model", models.CharField(max_length=60)),
                (
                    "year",
                    models.PositiveIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1900),
                            django.core.validators.MaxValueValidator(2100),
                        ]
                    ),
                ),
                ("color", models.CharField(max_length=30)),
                (
                    "vehicle_type",
                    models.CharField(
                        choices=[
                            ("CAR", "Car"),
                            ("BIKE", "Bike"),
                            ("SCOOTER", "Scooter"),
                            ("SUV", "SUV"),
                            ("VAN", "Van"),
                            ("TRUCK", "Truck"),
                        ],
                        default="CAR",
                        max_length=16,
                    ),
                ),
                (
                    "fuel_type",
                    models.CharField(
                        choices=[
                            ("PETROL", "Petrol"),
                            ("DIESEL", "Diesel"),
                            ("ELECTRIC", "Electric"),
                            ("HYBRID", "Hybrid"),
                            ("CNG", "CNG"),
                        ],
                        default="PETROL",
                        max_length=16,
                    ),
                ),
                ("seat_count", models.PositiveSmallIntegerField(blank=True, null=True)),
                (
                    "daily_rate",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("AVAILABLE", "Available"),
                            ("RENTED", "Rented"),
                            ("MAINTENANCE", "Maintenance"),
                            ("INACTIVE", "Inactive"),
                        ],
                        default="AVAILABLE",
                        max_length=16,
                    ),
                ),
                ("location", models.CharField(blank=True, default="", max_length=120)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vehicles",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddIndex(
            model_name="vehicle",
            index=models.Index(fields=["status", "vehicle_type"], name="vehicles_status_type_idx"),
        ),
    ]
