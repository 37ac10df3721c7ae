# app/routes/health.py
"""
Health check endpoints with graph store monitoring.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter

from app.db.neo4j import neo4j_health_check
from app.infrastructure.observability.logging import log_health_check

router = APIRouter()

SERVICE_NAME = "neo4j-communication-api"


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/api/health")
async def api_health():
    """Static service descriptor used by container health checks."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    }


@router.get("/readyz")
async def readyz():
    """
    Readiness check: graph store connectivity plus configuration.
    """
    checks = {}
    overall_ok = True

    # 1) Neo4j driver health
    t0 = time.time()
    try:
        db_health = await neo4j_health_check()
        is_healthy = db_health.get("healthy", False)

        checks["neo4j"] = {
            "ok": is_healthy,
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        if is_healthy:
            checks["neo4j"]["database"] = db_health.get("database")
        else:
            checks["neo4j"]["error"] = db_health.get("error", "Neo4j unhealthy")
            if "error_type" in db_health:
                checks["neo4j"]["error_type"] = db_health["error_type"]

        overall_ok = overall_ok and is_healthy

    except Exception as e:
        checks["neo4j"] = {
            "ok": False,
            "error": f"{type(e).__name__}: {e}",
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        overall_ok = False

    log_health_check(
        "neo4j",
        checks["neo4j"]["ok"],
        checks["neo4j"]["latency_ms"],
        error=checks["neo4j"].get("error"),
    )

    # 2) Configuration checks
    from app.config import settings

    config_issues = []

    if not settings.NEO4J_URI:
        config_issues.append("NEO4J_URI not set")

    if not settings.NEO4J_PASSWORD:
        config_issues.append("NEO4J_PASSWORD not set")

    config_ok = not config_issues
    checks["configuration"] = {
        "ok": config_ok,
        "issues": config_issues if config_issues else None,
        "environment": settings.environment,
        "etags_enabled": settings.ETAGS_ENABLED,
    }
    overall_ok = overall_ok and config_ok

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
