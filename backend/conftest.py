"""Shared pytest configuration and fixtures."""

import pytest
from rest_framework.test import APIClient

pytest_plugins = [
    "bookings.tests.fixtures",
]


@pytest.fixture
def api_client():
    """Anonymous client; use bookings.tests.fixtures.auth for a logged-in one."""
    return APIClient()
