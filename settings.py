from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_LISTEN_ADDRESS_ENV = "AWAIR_LISTEN_ADDRESS"
_DEVICES_ENV = "AWAIR_DEVICES"
_REQUEST_TIMEOUT_ENV = "AWAIR_REQUEST_TIMEOUT"
_SCRAPE_WORKERS_ENV = "AWAIR_SCRAPE_WORKERS"
_PROCESS_METRICS_ENV = "AWAIR_PROCESS_METRICS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_LISTEN_ADDRESS = "localhost:8888"
DEFAULT_REQUEST_TIMEOUT = 2.0


@dataclass(frozen=True)
class Settings:
    listen_address: str
    devices: str
    request_timeout: float
    scrape_workers: Optional[int]
    process_metrics: bool
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_timeout(default: float) -> float:
    value = os.getenv(_REQUEST_TIMEOUT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_worker_count() -> Optional[int]:
    value = os.getenv(_SCRAPE_WORKERS_ENV)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        parsed = int(candidate)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _read_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in {"1", "true", "yes", "on"}:
        return True
    if candidate in {"0", "false", "no", "off"}:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


def split_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts; an empty host binds all interfaces."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must be host:port, got {address!r}.")
    try:
        port_number = int(port)
    except ValueError as exc:
        raise ValueError(f"Invalid port in listen address {address!r}.") from exc
    if not 0 < port_number < 65536:
        raise ValueError(f"Port out of range in listen address {address!r}.")
    return host.strip("[]") or "0.0.0.0", port_number


@lru_cache
def get_settings() -> Settings:
    return Settings(
        listen_address=_read_str_env(_LISTEN_ADDRESS_ENV, DEFAULT_LISTEN_ADDRESS),
        devices=_read_str_env(_DEVICES_ENV, ""),
        request_timeout=_read_timeout(DEFAULT_REQUEST_TIMEOUT),
        scrape_workers=_read_worker_count(),
        process_metrics=_read_bool_env(_PROCESS_METRICS_ENV, True),
        log_level=_read_log_level("INFO"),
    )
