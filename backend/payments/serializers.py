from decimal import Decimal

from rest_framework import serializers

from .models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    booking_reference = serializers.ReadOnlyField(source="booking.reference")
    user_full_name = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            "id",
            "transaction_id",
            "user",
            "user_full_name",
            "booking",
            "booking_reference",
            "amount",
            "payment_type",
            "payment_method",
            "status",
            "payment_date",
            "gateway_reference",
            "gateway_response",
            "refund_amount",
            "refund_date",
            "notes",
            "created_at",
        ]
        read_only_fields = fields

    def get_user_full_name(self, payment: Payment) -> str:
        user = payment.user
        return user.get_full_name() or user.username


class PaymentCreateSerializer(serializers.Serializer):
    booking = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )
    payment_type = serializers.ChoiceField(choices=Payment.PaymentType.choices)
    payment_method = serializers.ChoiceField(choices=Payment.PaymentMethod.choices)
    notes = serializers.CharField(max_length=500, allow_blank=True, default="")


class RefundSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )
    reason = serializers.CharField(max_length=255)
