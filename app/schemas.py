"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness payload of the exporter itself, independent of device health."""

    status: str = Field(default="ok")
    devices: int = Field(..., ge=0, description="Number of registered devices.")
