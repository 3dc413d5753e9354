"""Base class for recoverable business errors raised by domain code."""

from __future__ import annotations

from rest_framework import status


class DomainError(Exception):
    """
    A business rule rejected the operation.

    Carries a ``message_dict`` shaped like Django's ValidationError so API views
    can return it directly, plus the HTTP status the API layer should use.
    Infrastructure failures (database errors and the like) are never wrapped in
    this type.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "invalid"
    default_field: str = "non_field_errors"
    default_message: str = "The request could not be completed."

    def __init__(self, message: str | None = None, *, field: str | None = None):
        self.message = message or self.default_message
        self.field = field or self.default_field
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.default_code

    @property
    def message_dict(self) -> dict[str, list[str]]:
        return {self.field: [self.message]}
