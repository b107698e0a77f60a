from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.monitor import MonitorService, build_default_monitor
from settings import get_settings


def create_app(monitor_factory: Optional[Callable[[], MonitorService]] = None) -> FastAPI:
    configure_logging()
    factory = monitor_factory or build_default_monitor

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = get_settings()
        monitor = factory()
        app.state.monitor = monitor
        if settings.autostart:
            monitor.start(delay=settings.start_delay)
        try:
            yield
        finally:
            monitor.shutdown()
            app.state.monitor = None

    app = FastAPI(
        title="Robot Health Monitor",
        description="Background robot telemetry monitor that writes incident reports.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()
