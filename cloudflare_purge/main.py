"""FastAPI application for a host configuration.

Mounts every endpoint registered on a :class:`HostConfig` (the purge
endpoint among them) under ``/api`` and runs the host ``on_init`` chain at
startup. Hosts that already run their own ASGI app can mount
:func:`~cloudflare_purge.routers.purge.build_router` directly instead.
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from cloudflare_purge.config import settings
from cloudflare_purge.host import HostConfig
from cloudflare_purge.logging_config import get_logger, setup_logging
from cloudflare_purge.middleware import CorrelationIdMiddleware
from cloudflare_purge.routers.purge import build_router

logger = get_logger(__name__)

API_PREFIX = "/api"


def create_app(host: HostConfig, configure_logging: bool = True) -> FastAPI:
    """Build the ASGI app serving ``host``'s endpoints."""
    if configure_logging:
        setup_logging(
            log_format=settings.log_format,
            log_level=settings.log_level,
            service_name=settings.service_name,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if host.on_init is not None:
            await host.on_init(app)
        logger.info("cloudflare-purge host app started", endpoints=len(host.endpoints))
        yield
        logger.info("cloudflare-purge host app stopped")

    app = FastAPI(title="cloudflare-purge", lifespan=lifespan)
    app.add_middleware(CorrelationIdMiddleware)

    for endpoint in host.endpoints:
        if endpoint.method.lower() != "post":
            logger.warning(
                "Skipping endpoint with unsupported method",
                path=endpoint.path,
                method=endpoint.method,
            )
            continue
        app.include_router(build_router(endpoint.handler, endpoint.path), prefix=API_PREFIX)

    @app.get("/")
    async def root() -> dict[str, Any]:
        return {"name": "cloudflare-purge", "docs": "/docs"}

    return app
