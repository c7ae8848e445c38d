"""FastAPI application exposing the exporter.

Run directly with ``uvicorn --factory app.main:create_app``; devices are then
read from ``AWAIR_DEVICES``.
"""

from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI
from prometheus_client import CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector

from app.api import router
from logging_config import configure_logging
from models.devices import DeviceRegistry, parse_devices_env
from services.collector import AirDataCollector
from settings import Settings, get_settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    try:
        yield
    finally:
        app.state.collector.close()


def build_metrics_registry(
    collector: AirDataCollector, process_metrics: bool = True
) -> CollectorRegistry:
    """Registry holding the device collector and, optionally, runtime collectors."""
    registry = CollectorRegistry()
    if process_metrics:
        ProcessCollector(registry=registry)
        PlatformCollector(registry=registry)
        GCCollector(registry=registry)
    registry.register(collector)
    return registry


def create_app(
    devices: Optional[DeviceRegistry] = None,
    settings: Optional[Settings] = None,
    client: Optional[httpx.Client] = None,
) -> FastAPI:
    configure_logging()
    settings = settings or get_settings()
    if devices is None:
        devices = parse_devices_env(settings.devices)

    collector = AirDataCollector(
        devices,
        client=client,
        timeout=settings.request_timeout,
        max_workers=settings.scrape_workers,
    )

    app = FastAPI(
        title="Awair Local Exporter",
        description="Prometheus exporter for Awair sensors polled over the local API.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.devices = devices
    app.state.collector = collector
    app.state.metrics_registry = build_metrics_registry(collector, settings.process_metrics)
    app.include_router(router)
    return app
