"""Business errors raised by the booking lifecycle engine."""

from __future__ import annotations

from rest_framework import status

from core.exceptions import DomainError


class InvalidDateRange(DomainError):
    default_code = "invalid_date_range"
    default_message = "Start date must be in the future and before the end date."


class VehicleUnavailable(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "vehicle_unavailable"
    default_field = "vehicle"
    default_message = "Vehicle is not available."


class SchedulingConflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "scheduling_conflict"
    default_message = "Vehicle is already booked for the selected dates."


class DuplicateReference(SchedulingConflict):
    """Another booking was created with the same reference in the same second."""

    default_code = "duplicate_reference"
    default_field = "reference"
    default_message = "A booking with this reference already exists; please retry."


class InvalidStateTransition(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "invalid_state_transition"
    default_field = "status"
    default_message = "This operation is not allowed in the booking's current status."


class AccessDenied(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "access_denied"
    default_field = "detail"
    default_message = "You do not have permission to perform this action."


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_field = "detail"
    default_message = "Not found."


class InvalidChargeAmount(DomainError):
    default_code = "invalid_charge_amount"
    default_message = "Charges cannot be negative."
