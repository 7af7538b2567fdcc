"""Health check endpoints."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .. import __version__
from ..dependencies.services import ManagerRegistryDep

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/health", summary="Basic health check")
async def basic_health_check(registry: ManagerRegistryDep):
    """Report service liveness and how many containers are managed."""
    lifecycles = registry.lifecycles()
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "dockerboot",
        "containers": len(lifecycles),
        "alive": sum(1 for lifecycle in lifecycles if lifecycle.is_alive()),
    }


@router.get("/health/docker", summary="Docker engine health check")
async def docker_health_check(registry: ManagerRegistryDep):
    """Check every tracked container against the engine."""
    containers = {}
    healthy = True
    for lifecycle in registry.lifecycles():
        try:
            engine_status = await lifecycle.manager.inspect()
        except Exception as e:
            logger.error("Docker health check failed", container_type=lifecycle.key, error=str(e))
            containers[lifecycle.key] = {"status": "unknown", "error": str(e)}
            healthy = False
            continue
        containers[lifecycle.key] = {"status": engine_status or "absent"}

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={"status": "healthy" if healthy else "unhealthy", "containers": containers},
    )
