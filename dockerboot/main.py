"""Main FastAPI application for dockerboot."""

# Standard library imports
from contextlib import asynccontextmanager

# Third-party imports
import structlog
import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

# Local application imports
from . import __version__
from .api import containers, health
from .config import load_docker_config, settings
from .core.events import event_bus
from .dependencies.auth import verify_api_key
from .dependencies.services import set_manager_registry
from .models.errors import DockerBootException
from .services.container import DockerClientFactory, ManagerRegistry
from .utils.error_handlers import (
    dockerboot_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .utils.logging import setup_logging

# Setup logging
setup_logging()
logger = structlog.get_logger()

# Seconds to let in-flight container events finish at shutdown
EVENT_DRAIN_TIMEOUT = 30.0


async def _startup_containers(app: FastAPI) -> ManagerRegistry:
    """Build the manager registry and run every host-start hook."""
    docker_config = load_docker_config(settings.docker_config_file)
    client = DockerClientFactory(docker_config).create()
    app.state.docker_client = client

    registry = ManagerRegistry.from_config(docker_config, client)
    registry.subscribe(event_bus)
    set_manager_registry(registry)
    app.state.manager_registry = registry

    try:
        await registry.start_all()
    except Exception as e:
        logger.error("Container startup failed - shutting down", error=str(e))
        await _shutdown_containers(app)
        raise

    return registry


async def _shutdown_containers(app: FastAPI) -> None:
    """Stop accepting events, drain in-flight ones, then run host-stop hooks."""
    registry = getattr(app.state, "manager_registry", None)
    if registry is not None:
        registry.unsubscribe()
        await event_bus.wait_for_pending(timeout=EVENT_DRAIN_TIMEOUT)
        await registry.stop_all()
        set_manager_registry(None)
        app.state.manager_registry = None

    client = getattr(app.state, "docker_client", None)
    if client is not None:
        try:
            client.close()
        except Exception as e:
            logger.error("Error closing Docker client", error=str(e))
        app.state.docker_client = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting dockerboot", version=__version__)

    if settings.api_debug:
        logger.warning("Debug mode is enabled - disable in production")

    registry = await _startup_containers(app)
    logger.info("dockerboot startup completed", containers=registry.keys())

    try:
        yield
    finally:
        logger.info("Shutting down dockerboot")
        await _shutdown_containers(app)
        logger.info("dockerboot shutdown completed")


app = FastAPI(
    title="dockerboot",
    description="Docker containers bound to the application lifecycle",
    version=__version__,
    docs_url="/docs" if settings.enable_docs else None,
    redoc_url="/redoc" if settings.enable_docs else None,
    debug=settings.api_debug,
    lifespan=lifespan,
)

# Register global error handlers
app.add_exception_handler(DockerBootException, dockerboot_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(health.router, tags=["health"])
app.include_router(
    containers.router,
    prefix="/api/v1",
    tags=["containers"],
    dependencies=[Depends(verify_api_key)],
)


def run_server():
    logger.info(f"Starting HTTP server on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "dockerboot.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
        access_log=settings.enable_access_logs,
    )


if __name__ == "__main__":
    run_server()
