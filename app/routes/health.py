# app/routes/health.py
"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from app.config import settings
from app.db.pool import db_health_check

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "datekeeper-reminders"}


@router.get("/readyz")
async def readyz():
    """Readiness check: database pool plus the settings the reminder run needs."""
    checks = {}

    t0 = time.time()
    try:
        db_health = await db_health_check()
        checks["database"] = {
            "ok": bool(db_health.get("healthy", False)),
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        if not checks["database"]["ok"]:
            checks["database"]["error"] = db_health.get("error", "Database unhealthy")
    except Exception as e:
        checks["database"] = {"ok": False, "error": f"{type(e).__name__}: {e}"}

    config_issues = []
    if not settings.CRON_SECRET:
        config_issues.append("CRON_SECRET not set")
    if not settings.RESEND_API_KEY:
        config_issues.append("RESEND_API_KEY not set")

    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
    }

    overall_ok = all(check["ok"] for check in checks.values())
    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
