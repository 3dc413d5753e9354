"""Glue between domain errors and DRF responses."""

from __future__ import annotations

from rest_framework.exceptions import APIException
from rest_framework.response import Response

from .exceptions import DomainError


def domain_error_response(exc: DomainError) -> Response:
    """Render a DomainError as a ``{field: [messages]}`` body with its status."""
    return Response(exc.message_dict, status=exc.status_code)


class DomainAPIException(APIException):
    """Wrap a DomainError raised where a view cannot return a Response directly."""

    def __init__(self, exc: DomainError):
        self.status_code = exc.status_code
        super().__init__(detail=exc.message_dict, code=exc.code)
