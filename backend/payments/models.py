from django.conf import settings
from django.db import models
from django.db.models import Q


class Payment(models.Model):
    """A charge or refund recorded against a booking."""

    class PaymentType(models.TextChoices):
        BOOKING_PAYMENT = "BOOKING_PAYMENT", "Booking payment"
        SECURITY_DEPOSIT = "SECURITY_DEPOSIT", "Security deposit"
        LATE_FEE = "LATE_FEE", "Late fee"
        DAMAGE_CHARGE = "DAMAGE_CHARGE", "Damage charge"
        REFUND = "REFUND", "Refund"

    class PaymentMethod(models.TextChoices):
        CREDIT_CARD = "CREDIT_CARD", "Credit card"
        DEBIT_CARD = "DEBIT_CARD", "Debit card"
        UPI = "UPI", "UPI"
        NET_BANKING = "NET_BANKING", "Net banking"
        WALLET = "WALLET", "Wallet"
        CASH = "CASH", "Cash"

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        SUCCESS = "SUCCESS", "Success"
        FAILED = "FAILED", "Failed"
        REFUNDED = "REFUNDED", "Refunded"
        PARTIAL_REFUND = "PARTIAL_REFUND", "Partially refunded"

    transaction_id = models.CharField(max_length=32, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="payments",
    )
    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_type = models.CharField(max_length=32, choices=PaymentType.choices)
    payment_method = models.CharField(max_length=32, choices=PaymentMethod.choices)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    payment_date = models.DateTimeField(null=True, blank=True)
    gateway_reference = models.CharField(max_length=64, blank=True, default="")
    gateway_response = models.CharField(max_length=255, blank=True, default="")
    refund_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    refund_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "created_at"], name="payments_user_created_idx"),
            models.Index(fields=["booking", "created_at"], name="payments_booking_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="payments_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.transaction_id} {self.payment_type} {self.amount} ({self.status})"

    @property
    def is_refundable(self) -> bool:
        return self.status == self.Status.SUCCESS
