"""Entry points for running the FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI

from furl_resolver.config import ResolverConfig, load_config
from furl_resolver.logging_utils import configure_logging
from furl_resolver.scheduler import CleanerScheduler
from furl_resolver.service import ResolutionService

from . import __version__
from .api.routes import router as api_router
from .config import Settings, get_settings
from .monitoring.metrics import metrics_router, setup_metrics

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    config: Optional[ResolverConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    setup_logging: bool = True,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if setup_logging:
            configure_logging(
                settings.log_file, level=settings.log_level, resolution_level=settings.resolution_log_level
            )
        resolver_config = config or load_config()

        async with httpx.AsyncClient(transport=transport) as client:
            service = ResolutionService(client, config=resolver_config)
            app.state.service = service
            app.state.metrics_registry = setup_metrics(service)

            scheduler = CleanerScheduler(service.cleaner, service.memory, resolver_config)
            if settings.enable_cleaner:
                scheduler.start()

            logger.info(
                "Starting furl resolver service", extra={"environment": settings.environment, "port": settings.port}
            )
            try:
                yield
            finally:
                await scheduler.stop()
                logger.info("Stopped furl resolver service")

    app = FastAPI(title="furl", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    # The catch-all resolve route must come last
    if settings.enable_metrics:
        app.include_router(metrics_router)
    app.include_router(api_router)

    return app


app = create_app()

__all__ = ["create_app", "app"]
