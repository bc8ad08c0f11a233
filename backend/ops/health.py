"""
Health check endpoints for operations monitoring.

Endpoints:
- /_health/live    - liveness probe (is the process running?)
- /_health/ready   - readiness probe (can we serve traffic?)
- /_health/full    - full report (databases and treasury configuration)
"""
import logging
import time
from typing import Any, Dict

from django.conf import settings
from django.db import DatabaseError, connections
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)


class HealthCheck:
    """Health check implementation."""

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        """Check database connectivity."""
        start = time.time()
        try:
            conn = connections[alias]
            conn.ensure_connection()
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
            return {
                "status": "healthy",
                "alias": alias,
                "duration_ms": round((time.time() - start) * 1000, 2),
            }
        except DatabaseError as e:
            logger.warning("Database health check failed", extra={"alias": alias, "error": str(e)})
            return {
                "status": "unhealthy",
                "alias": alias,
                "error": str(e),
                "duration_ms": round((time.time() - start) * 1000, 2),
            }

    @staticmethod
    def check_default_accounts() -> Dict[str, Any]:
        """
        Check that every payment method has an active default account.

        Without one, settling a debt or paying dues fails with a
        configuration error.
        """
        from finance.models import Account, Method

        try:
            configured = set(
                Account.objects.active().values_list("kind", flat=True).distinct()
            )
        except DatabaseError as e:
            return {"status": "error", "error": str(e)}

        missing = [m for m in Method.values if m not in configured]
        if missing:
            return {"status": "unhealthy", "missing_methods": missing}
        return {"status": "healthy"}

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        """Get comprehensive health report."""
        checks = {
            alias: HealthCheck.check_database(alias) for alias in settings.DATABASES
        }
        checks["default_accounts"] = HealthCheck.check_default_accounts()

        statuses = [c["status"] for c in checks.values()]
        overall = "healthy" if all(s == "healthy" for s in statuses) else "unhealthy"

        return {
            "status": overall,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
            "environment": "development" if settings.DEBUG else "production",
        }


class LivenessView(View):
    """
    Liveness probe.

    Returns 200 if the process is running. Checks no external dependency.
    """

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):
    """
    Readiness probe.

    Returns 200 if the default database answers, 503 otherwise.
    """

    def get(self, request):
        db_check = HealthCheck.check_database("default")

        if db_check["status"] == "healthy":
            return JsonResponse({"status": "ready", "database": db_check})
        return JsonResponse({"status": "not_ready", "database": db_check}, status=503)


class FullHealthView(View):
    """
    Full health report for debugging and dashboards.

    Should be reachable from the internal network only in production.
    """

    def get(self, request):
        health = HealthCheck.get_full_health()

        status_code = 200 if health["status"] == "healthy" else 503
        return JsonResponse(health, status=status_code)
