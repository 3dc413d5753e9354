import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("bookings", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("transaction_id", models.CharField(editable=False, max_length=32, unique=True)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "payment_type",
                    models.CharField(
                        choices=[
                            ("BOOKING_PAYMENT", "Booking payment"),
                            ("SECURITY_DEPOSIT", "Security deposit"),
                            ("LATE_FEE", "Late fee"),
                            ("DAMAGE_CHARGE", "Damage charge"),
                            ("REFUND", "Refund"),
                        ],
                        max_length=32,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("CREDIT_CARD", "Credit card"),
                            ("DEBIT_CARD", "Debit card"),
                            ("UPI", "UPI"),
                            ("NET_BANKING", "Net banking"),
                            ("WALLET", "Wallet"),
                            ("CASH", "Cash"),
                        ],
                        max_length=32,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("SUCCESS", "Success"),
                            ("FAILED", "Failed"),
                            ("REFUNDED", "Refunded"),
                            ("PARTIAL_REFUND", "Partially refunded"),
                        ],
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("payment_date", models.DateTimeField(blank=True, null=True)),
                ("gateway_reference", models.CharField(blank=True, default="", max_length=64)),
                ("gateway_response", models.CharField(blank=True, default="", max_length=255)),
                (
                    "refund_amount",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True),
                ),
                ("refund_date", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="bookings.booking",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "created_at"], name="payments_user_created_idx"),
                    models.Index(
                        fields=["booking", "created_at"], name="payments_booking_created_idx"
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="payments_amount_positive",
                    ),
                ],
            },
        ),
    ]
