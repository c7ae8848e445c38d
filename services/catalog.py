"""Fixed catalog of the metrics exported for every sensor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from models.air_data import AirData

SENSOR_LABEL = "sensor"
METRIC_PREFIX = "awair_"

GAUGE = "gauge"
COUNTER = "counter"


def celsius_to_fahrenheit(value: float) -> float:
    return value * 9 / 5 + 32


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text and value source of one exported metric."""

    name: str
    documentation: str
    kind: str = GAUGE
    field: Optional[str] = None
    convert: Optional[Callable[[float], float]] = None
    labels: Tuple[str, ...] = (SENSOR_LABEL,)

    def value(self, air_data: AirData) -> float:
        if self.field is None:
            raise ValueError(f"Metric {self.name!r} is not read from the device payload.")
        raw = float(getattr(air_data, self.field))
        if self.convert is not None:
            return self.convert(raw)
        return raw


def _gauge(
    suffix: str,
    documentation: str,
    field: Optional[str] = None,
    convert: Optional[Callable[[float], float]] = None,
) -> MetricDescriptor:
    return MetricDescriptor(
        name=METRIC_PREFIX + suffix,
        documentation=documentation,
        kind=GAUGE,
        field=field or suffix,
        convert=convert,
    )


COLLECTION_ERRORS = MetricDescriptor(
    name=METRIC_PREFIX + "collection_errors_total",
    documentation="Errors observed when collecting device metrics",
    kind=COUNTER,
)

GAUGES: Tuple[MetricDescriptor, ...] = (
    _gauge("score", "Awair Score (0-100)"),
    _gauge(
        "dew_point",
        "The temperature at which water will condense and form into dew (C)",
    ),
    _gauge(
        "dew_point_f",
        "The temperature at which water will condense and form into dew (F)",
        field="dew_point",
        convert=celsius_to_fahrenheit,
    ),
    _gauge("temp", "Dry bulb temperature (C)"),
    _gauge("temp_f", "Dry bulb temperature (F)", field="temp", convert=celsius_to_fahrenheit),
    _gauge("humid", "Relative humidity (%)"),
    _gauge("abs_humid", "Absolute humidity (g/m^3)"),
    _gauge("co2", "Carbon Dioxide (ppm)"),
    _gauge("co2_est", "Estimated Carbon Dioxide calculated by TVOC sensor (ppm)"),
    _gauge(
        "co2_est_baseline",
        "A unitless value that represents the baseline from which the TVOC sensor "
        "partially derives its estimate",
    ),
    _gauge("voc", "Total Volatile organic compounds (ppb)"),
    _gauge(
        "voc_baseline",
        "A unitless value that represents the baseline from which the TVOC sensor "
        "partially derives its TVOC output",
    ),
    _gauge(
        "voc_h2_raw",
        "A unitless value that represents the Hydrogen gas signal from which the TVOC "
        "sensor partially derives its TVOC output",
    ),
    _gauge(
        "voc_ethanol_raw",
        "A unitless value that represents the Ethanol gas signal from which the TVOC "
        "sensor partially derives its TVOC output",
    ),
    _gauge("pm25", "Particulate matter less than 2.5 microns in diameter (µg/m³)"),
    _gauge(
        "pm10_est",
        "Estimated particulate matter less than 10 microns in diameter "
        "(µg/m³ - calculated by the PM2.5 sensor)",
    ),
)

DESCRIPTORS: Tuple[MetricDescriptor, ...] = (COLLECTION_ERRORS,) + GAUGES
