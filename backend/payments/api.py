"""Payment endpoints: charge a booking, look payments up, refund them."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from bookings.domain import Actor
from bookings.exceptions import NotFound
from bookings.models import Booking
from core.api import DomainAPIException, domain_error_response
from core.exceptions import DomainError

from .models import Payment
from .serializers import PaymentCreateSerializer, PaymentSerializer, RefundSerializer
from .services import (
    get_payment,
    get_payment_by_transaction_id,
    process_payment,
    process_refund,
)


class PaymentViewSet(viewsets.ModelViewSet):
    serializer_class = PaymentSerializer
    permission_classes = (permissions.IsAuthenticated,)
    filterset_fields = ["booking", "status", "payment_type", "payment_method"]
    ordering_fields = ["created_at", "amount"]
    http_method_names = ["get", "post", "head", "options"]
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        """Customers see their own payments; admins see all of them."""
        user = self.request.user
        if not user.is_authenticated:
            return Payment.objects.none()
        qs = Payment.objects.select_related("booking", "user").order_by("-created_at")
        if getattr(user, "is_admin", False):
            return qs
        return qs.filter(user=user)

    def get_actor(self) -> Actor:
        return Actor.from_user(self.request.user)

    def get_object(self):
        try:
            return get_payment(int(self.kwargs["pk"]), actor=self.get_actor())
        except DomainError as exc:
            raise DomainAPIException(exc) from exc

    def create(self, request, *args, **kwargs):
        """Pay towards one of the caller's bookings."""
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            booking = Booking.objects.filter(pk=data["booking"]).first()
            if booking is None:
                raise NotFound("Booking not found.", field="booking")
            payment = process_payment(
                booking=booking,
                actor=self.get_actor(),
                amount=data["amount"],
                payment_type=data["payment_type"],
                payment_method=data["payment_method"],
                notes=data["notes"],
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="refund")
    def refund(self, request, *args, **kwargs):
        """Refund all or part of a successful payment (admin-only)."""
        serializer = RefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            payment = get_payment(int(self.kwargs["pk"]), actor=self.get_actor())
            payment = process_refund(
                payment=payment,
                actor=self.get_actor(),
                amount=serializer.validated_data["amount"],
                reason=serializer.validated_data["reason"],
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(payment).data)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"by-transaction/(?P<transaction_id>[^/.]+)",
    )
    def by_transaction(self, request, transaction_id=None, *args, **kwargs):
        try:
            payment = get_payment_by_transaction_id(transaction_id, actor=self.get_actor())
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(payment).data)
