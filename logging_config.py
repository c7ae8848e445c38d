"""Logging setup for the exporter.

Records that carry a ``sensor`` attribute are tagged ``[sensor@address]`` so
lines from concurrent device scrapes can be told apart.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Iterable, MutableMapping, Sequence

from settings import get_settings

_DEVICE_KEYS = ("sensor", "address")

_DEFAULT_EXTRA_KEYS = (
    "url",
    "status",
    "reason",
    "device_count",
    "elapsed_ms",
)

_NOISY_LOGGERS = ("httpx", "httpcore")

_configured = False


class ContextualFormatter(logging.Formatter):
    """Prefix device lines with their tag and append ``key=value`` context."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        extra_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(
            key for key in (extra_keys or _DEFAULT_EXTRA_KEYS) if key not in _DEVICE_KEYS
        )

    @staticmethod
    def device_tag(record: logging.LogRecord) -> str | None:
        sensor = getattr(record, "sensor", None)
        if sensor is None:
            return None
        address = getattr(record, "address", None)
        if address:
            return f"[{sensor}@{address}]"
        return f"[{sensor}]"

    def formatMessage(self, record: logging.LogRecord) -> str:
        tag = self.device_tag(record)
        if tag is None:
            return super().formatMessage(record)
        original = record.message
        record.message = f"{tag} {original}"
        try:
            return super().formatMessage(record)
        finally:
            record.message = original

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context_parts: list[str] = []
        for key in self._extra_keys:
            value = getattr(record, key, None)
            if value is None:
                continue
            context_parts.append(f"{key}={value}")
        if context_parts:
            return f"{message} | {' '.join(context_parts)}"
        return message


class DeviceLogAdapter(logging.LoggerAdapter):
    """Attach a device's name and address to every record logged through it.

    Per-call ``extra`` values are merged over the device context.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def device_logger(logger: logging.Logger, sensor: str, address: str) -> DeviceLogAdapter:
    return DeviceLogAdapter(logger, {"sensor": sensor, "address": address})


def configure_logging(level: str | int | None = None) -> None:
    """Configure application-wide logging with contextual formatting."""
    global _configured
    if _configured:
        return

    settings = get_settings()
    log_level = level if level is not None else settings.log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "logging_config.ContextualFormatter",
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "style": "%",
                    "extra_keys": list(_DEFAULT_EXTRA_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "contextual",
                }
            },
            "root": {"handlers": ["default"], "level": log_level},
            # Request lines from the HTTP client would repeat every device scrape.
            "loggers": {
                name: {"level": "WARNING"} for name in _NOISY_LOGGERS
            },
        }
    )

    _configured = True
