"""API viewsets for bookings."""

from __future__ import annotations

import logging

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.api import DomainAPIException, domain_error_response
from core.exceptions import DomainError
from users.permissions import IsAdminRole
from vehicles.models import Vehicle

from .domain import (
    Actor,
    blocked_ranges,
    bookings_needing_activation,
    has_conflict,
    overdue_bookings,
)
from .exceptions import DuplicateReference
from .filters import BookingFilter
from .models import Booking
from .serializers import (
    AvailabilityQuerySerializer,
    BookingCancelSerializer,
    BookingCompleteSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
)
from .services import (
    activate_booking,
    cancel_booking,
    complete_booking,
    confirm_booking,
    create_booking,
    get_booking,
    get_booking_by_reference,
    update_booking,
)

logger = logging.getLogger(__name__)

ADMIN_ACTIONS = {"needing_activation", "overdue"}


class BookingViewSet(viewsets.ModelViewSet):
    """
    Booking requests and their lifecycle transitions.

    Customers see their own bookings; admins see all of them. Every write goes
    through ``bookings.services`` so guards, row locks and side effects live in
    one place.
    """

    serializer_class = BookingSerializer
    permission_classes = (permissions.IsAuthenticated,)
    filterset_class = BookingFilter
    ordering_fields = ["start_date", "end_date", "created_at", "total_amount"]
    http_method_names = ["get", "post", "patch", "head", "options"]
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        if self.action == "availability":
            return [permissions.AllowAny()]
        if self.action in ADMIN_ACTIONS:
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    def get_queryset(self):
        """Restrict bookings to the caller unless they are an admin."""
        user = self.request.user
        if not user.is_authenticated:
            return Booking.objects.none()
        qs = Booking.objects.select_related("vehicle", "user").order_by("-created_at")
        if getattr(user, "is_admin", False):
            return qs
        return qs.filter(user=user)

    def get_actor(self) -> Actor:
        return Actor.from_user(self.request.user)

    def get_object(self):
        """Fetch a single booking and enforce visibility rules."""
        try:
            return get_booking(int(self.kwargs["pk"]), actor=self.get_actor())
        except DomainError as exc:
            raise DomainAPIException(exc) from exc

    def create(self, request, *args, **kwargs):
        """Request a booking; it starts out PENDING."""
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        params = {
            "actor": self.get_actor(),
            "vehicle_id": data["vehicle"],
            "start_date": data["start_date"],
            "end_date": data["end_date"],
            "pickup_location": data["pickup_location"],
            "return_location": data["return_location"],
            "security_deposit": data.get("security_deposit"),
            "notes": data.get("notes", ""),
        }
        try:
            try:
                booking = create_booking(**params)
            except DuplicateReference:
                logger.info(
                    "bookings: reference collision for user %s, retrying once",
                    request.user.id,
                )
                booking = create_booking(**params)
        except DomainError as exc:
            return domain_error_response(exc)

        return Response(self.get_serializer(booking).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        """Edit locations or notes while the booking is still pending."""
        serializer = BookingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = update_booking(
                int(self.kwargs["pk"]),
                actor=self.get_actor(),
                changes=serializer.validated_data,
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(booking).data)

    @action(detail=True, methods=["post"], url_path="confirm")
    def confirm(self, request, *args, **kwargs):
        """Confirm a pending booking (admin-only)."""
        try:
            booking = confirm_booking(int(self.kwargs["pk"]), actor=self.get_actor())
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(booking).data)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, *args, **kwargs):
        """Cancel a pending or confirmed booking (customer-only)."""
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = cancel_booking(
                int(self.kwargs["pk"]),
                actor=self.get_actor(),
                reason=serializer.validated_data["reason"],
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(booking).data)

    @action(detail=True, methods=["post"], url_path="activate")
    def activate(self, request, *args, **kwargs):
        """Hand the vehicle over: CONFIRMED -> ACTIVE (admin-only)."""
        try:
            booking = activate_booking(int(self.kwargs["pk"]), actor=self.get_actor())
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(booking).data)

    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, *args, **kwargs):
        """Record the return and any extra charges (admin-only)."""
        serializer = BookingCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = complete_booking(
                int(self.kwargs["pk"]),
                actor=self.get_actor(),
                late_fee=serializer.validated_data["late_fee"],
                damage_charges=serializer.validated_data["damage_charges"],
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(booking).data)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"by-reference/(?P<reference>[^/.]+)",
    )
    def by_reference(self, request, reference=None, *args, **kwargs):
        try:
            booking = get_booking_by_reference(reference, actor=self.get_actor())
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(self.get_serializer(booking).data)

    @action(detail=False, methods=["get"], url_path="availability")
    def availability(self, request, *args, **kwargs):
        """
        Return the blocked date ranges of a vehicle.

        With ``start_date`` and ``end_date`` the response also says whether that
        range could be booked right now.
        """
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        vehicle: Vehicle = query.validated_data["vehicle"]
        start_date = query.validated_data.get("start_date")
        end_date = query.validated_data.get("end_date")

        available = vehicle.status == Vehicle.Status.AVAILABLE
        if available and start_date and end_date:
            available = not has_conflict(vehicle, start_date, end_date)

        return Response(
            {
                "vehicle": vehicle.id,
                "vehicle_status": vehicle.status,
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
                "available": available,
                "blocked": blocked_ranges(vehicle),
            },
            status=status.HTTP_200_OK,
        )

    @action(detail=False, methods=["get"], url_path="needing-activation")
    def needing_activation(self, request, *args, **kwargs):
        """Confirmed bookings whose start date has arrived (admin-only)."""
        serializer = self.get_serializer(bookings_needing_activation(), many=True)
        return Response(serializer.data)

    @action(detail=False, methods=["get"], url_path="overdue")
    def overdue(self, request, *args, **kwargs):
        """Active bookings past their end date (admin-only)."""
        serializer = self.get_serializer(overdue_bookings(), many=True)
        return Response(serializer.data)
