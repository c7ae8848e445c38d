"""Concurrent scrape of every registered sensor into Prometheus metric families."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from threading import Lock
from typing import Dict, Iterable, List, Optional, Tuple

import httpx
from prometheus_client.metrics_core import CounterMetricFamily, GaugeMetricFamily, Metric
from prometheus_client.registry import Collector
from pydantic import ValidationError

from logging_config import device_logger
from models.air_data import AirData, AirDataDecodeError
from models.devices import Device, DeviceRegistry
from services.catalog import (
    COLLECTION_ERRORS,
    COUNTER,
    DESCRIPTORS,
    GAUGES,
    MetricDescriptor,
    celsius_to_fahrenheit,
)
from settings import DEFAULT_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

AIR_DATA_PATH = "/air-data/latest"

__all__ = [
    "AIR_DATA_PATH",
    "AirDataCollector",
    "MetricSink",
    "celsius_to_fahrenheit",
    "device_url",
]

Sample = Tuple[MetricDescriptor, str, float]


def device_url(address: str) -> str:
    return f"http://{address}{AIR_DATA_PATH}"


def _new_family(descriptor: MetricDescriptor) -> Metric:
    if descriptor.kind == COUNTER:
        return CounterMetricFamily(
            descriptor.name, descriptor.documentation, labels=list(descriptor.labels)
        )
    return GaugeMetricFamily(
        descriptor.name, descriptor.documentation, labels=list(descriptor.labels)
    )


class MetricSink:
    """Collects samples from concurrent device scrapes.

    The lock only guards appends, so callers must finish any I/O or decoding
    before handing samples over.
    """

    def __init__(self) -> None:
        self._samples: List[Sample] = []
        self._lock = Lock()

    def add(self, descriptor: MetricDescriptor, sensor: str, value: float) -> None:
        with self._lock:
            self._samples.append((descriptor, sensor, value))

    def extend(self, samples: Iterable[Sample]) -> None:
        batch = list(samples)
        with self._lock:
            self._samples.extend(batch)

    def samples(self) -> List[Sample]:
        with self._lock:
            return list(self._samples)

    def families(self) -> List[Metric]:
        families: Dict[str, Metric] = {
            descriptor.name: _new_family(descriptor) for descriptor in DESCRIPTORS
        }
        for descriptor, sensor, value in self.samples():
            families[descriptor.name].add_metric([sensor], value)
        return list(families.values())


class AirDataCollector(Collector):
    """Prometheus collector that scrapes every device once per ``collect()``.

    Each device is fetched on its own worker thread. A device that cannot be
    reached, or that does not deliver its whole answer within ``timeout``
    seconds, contributes nothing for the cycle; a non-200 answer or an
    undecodable body contributes a single error sample instead of readings.
    """

    def __init__(
        self,
        registry: DeviceRegistry,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_workers: Optional[int] = None,
    ) -> None:
        self.registry = registry
        self.timeout = timeout
        self._owns_client = client is None
        self.client = (
            client
            if client is not None
            else httpx.Client(timeout=timeout, follow_redirects=True)
        )
        worker_count = max_workers or max(len(registry), 1)
        self.executor = ThreadPoolExecutor(
            max_workers=worker_count, thread_name_prefix="awair-scrape"
        )

    def describe(self) -> List[Metric]:
        return [_new_family(descriptor) for descriptor in DESCRIPTORS]

    def collect(self) -> List[Metric]:
        sink = MetricSink()
        devices = self.registry.devices()
        start_time = time.perf_counter()

        futures = [self.executor.submit(self._scrape_device, sink, device) for device in devices]
        wait(futures)

        logger.debug(
            "Collection cycle finished",
            extra={
                "device_count": len(devices),
                "elapsed_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )
        return sink.families()

    def close(self) -> None:
        """Release worker threads and the HTTP client when this collector created it."""
        self.executor.shutdown(wait=False, cancel_futures=True)
        if self._owns_client:
            self.client.close()

    def _scrape_device(self, sink: MetricSink, device: Device) -> None:
        try:
            self._scrape(sink, device)
        except Exception:
            device_logger(logger, device.name, device.address).exception(
                "Unexpected failure while scraping device"
            )

    def _fetch(self, url: str) -> Tuple[int, str, bytes]:
        """GET ``url`` and return status, reason and body.

        httpx only bounds each network step, so the whole exchange is held to
        ``self.timeout`` here. Overrunning it raises ``httpx.ReadTimeout``.
        The body of a non-200 answer is not read.
        """
        deadline = time.monotonic() + self.timeout
        with self.client.stream("GET", url, follow_redirects=True) as response:
            if response.status_code != httpx.codes.OK:
                return response.status_code, response.reason_phrase, b""
            chunks: List[bytes] = []
            for chunk in response.iter_bytes():
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout(
                        f"Response not completed within {self.timeout}s",
                        request=response.request,
                    )
                chunks.append(chunk)
            return response.status_code, response.reason_phrase, b"".join(chunks)

    def _scrape(self, sink: MetricSink, device: Device) -> None:
        url = device_url(device.address)
        log = device_logger(logger, device.name, device.address)

        try:
            status_code, reason_phrase, body = self._fetch(url)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            log.warning("Request to device failed", extra={"url": url, "reason": repr(exc)})
            return

        if status_code != httpx.codes.OK:
            log.warning(
                "Device returned a non-200 response",
                extra={"status": f"{status_code} {reason_phrase}"},
            )
            sink.add(COLLECTION_ERRORS, device.name, 1.0)
            return

        try:
            air_data = AirData.from_payload(body)
        except AirDataDecodeError as exc:
            log.warning("Could not parse air data", extra={"reason": str(exc)})
            sink.add(COLLECTION_ERRORS, device.name, 1.0)
            return
        except ValidationError as exc:
            log.warning(
                "Could not parse air data",
                extra={"reason": f"{exc.error_count()} validation error(s)"},
            )
            sink.add(COLLECTION_ERRORS, device.name, 1.0)
            return

        sink.extend(
            (descriptor, device.name, descriptor.value(air_data)) for descriptor in GAUGES
        )
