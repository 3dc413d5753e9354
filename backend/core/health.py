import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def healthz(_request):
    """
    Liveness/readiness probe. Reports 503 when the database is unreachable.
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as exc:
        logger.warning("healthz: database check failed: %s", exc)
        return JsonResponse({"ok": False, "db": False}, status=503)
    return JsonResponse({"ok": True, "db": True})
