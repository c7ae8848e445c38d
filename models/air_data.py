"""Payload returned by a sensor's ``/air-data/latest`` endpoint."""

from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

_DECODER = json.JSONDecoder()


class AirDataDecodeError(ValueError):
    """Raised when a response body holds no JSON document."""


class AirData(BaseModel):
    """Latest reading reported by one device.

    Absent keys and ``null`` values decode as zero. Values of the wrong JSON
    type, including fractional numbers for integer fields, reject the whole
    payload.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    # RFC3339 with millis, e.g. "2024-01-01T00:00:00.000Z"
    timestamp: Optional[str] = None
    score: int = Field(default=0, description="Awair Score (0-100).")
    dew_point: float = Field(default=0.0, description="Dew point (C).")
    temp: float = Field(default=0.0, description="Dry bulb temperature (C).")
    humid: float = Field(default=0.0, description="Relative humidity (%).")
    abs_humid: float = Field(default=0.0, description="Absolute humidity (g/m^3).")
    co2: int = 0
    co2_est: int = 0
    co2_est_baseline: int = 0
    voc: int = 0
    voc_baseline: int = 0
    voc_h2_raw: int = 0
    voc_ethanol_raw: int = 0
    pm25: int = 0
    pm10_est: int = 0

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @classmethod
    def from_payload(cls, content: bytes) -> "AirData":
        """Decode the first JSON document in ``content``; trailing bytes are ignored.

        Raises ``AirDataDecodeError`` for a body without a JSON document and
        ``pydantic.ValidationError`` for a document of the wrong shape.
        """
        try:
            text = content.decode("utf-8")
            document, _end = _DECODER.raw_decode(text.lstrip())
        except ValueError as exc:
            raise AirDataDecodeError(str(exc)) from exc
        return cls.model_validate(document)
