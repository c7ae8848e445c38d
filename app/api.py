"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from app.schemas import HealthResponse
from models.devices import DeviceRegistry

router = APIRouter()


def get_metrics_registry(request: Request) -> CollectorRegistry:
    return request.app.state.metrics_registry


def get_devices(request: Request) -> DeviceRegistry:
    return request.app.state.devices


# Declared sync so the blocking device fan-out runs on the threadpool.
@router.get(
    "/metrics",
    summary="Scrape every device and render the Prometheus exposition.",
    response_class=Response,
)
def metrics(
    registry: CollectorRegistry = Depends(get_metrics_registry),
) -> Response:
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(devices: DeviceRegistry = Depends(get_devices)) -> HealthResponse:
    return HealthResponse(devices=len(devices))


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root(devices: DeviceRegistry = Depends(get_devices)) -> dict[str, object]:
    return {
        "status": "ok",
        "devices": len(devices),
        "detail": "See /metrics for device readings.",
    }
