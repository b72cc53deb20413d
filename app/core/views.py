"""
Core views providing infrastructure endpoints and shared API helpers.

Contents:
    health_check: liveness/readiness probe (database + cache)
    application_error_response: render a BaseApplicationError as a DRF Response
"""

from __future__ import annotations

import logging

from django.db import connection
from django.http import JsonResponse
from rest_framework.response import Response

from core.exceptions import BaseApplicationError

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint for Docker, Kubernetes probes and load balancers.

    Returns:
        JsonResponse with status and component health. 200 when the
        database answers, 503 otherwise. Cache failures only degrade the
        "cache" field.
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }
    is_healthy = True

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except Exception:
        logger.exception("Health check database probe failed")
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"
        is_healthy = False

    try:
        from django.core.cache import cache

        cache.set("health_check", "ok", timeout=1)
        if cache.get("health_check") == "ok":
            health_status["cache"] = "connected"
        else:
            health_status["cache"] = "disconnected"
    except Exception:
        health_status["cache"] = "disconnected"

    status_code = 200 if is_healthy else 503

    return JsonResponse(health_status, status=status_code)


def application_error_response(exc: BaseApplicationError) -> Response:
    """
    Build the API response for a domain error.

    Uses the exception's own http_status so that views do not need to map
    exception classes themselves.
    """
    logger.info(
        "Request rejected: %s",
        exc.error_code,
        extra={"error_code": exc.error_code, "details": exc.details},
    )
    return Response(exc.to_dict(), status=exc.http_status)
