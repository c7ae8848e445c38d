"""Device registry built from ``name=address`` tokens."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Sequence

logger = logging.getLogger(__name__)

_DELIMITER = "="
_ENV_SEPARATORS = re.compile(r"[\s,]+")


class MalformedDeviceSpec(ValueError):
    """Raised when a device token carries no ``=`` delimiter."""

    def __init__(self, token: str) -> None:
        super().__init__(f"expected name=address, got {token!r}")
        self.token = token


@dataclass(frozen=True, slots=True)
class Device:
    """A sensor reachable at ``address`` and labelled by ``name``."""

    name: str
    address: str


class DeviceRegistry(Mapping[str, str]):
    """Read-only mapping of device name to network address."""

    def __init__(self, addresses: Mapping[str, str] | None = None) -> None:
        self._addresses: Mapping[str, str] = MappingProxyType(dict(addresses or {}))

    def __getitem__(self, name: str) -> str:
        return self._addresses[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)

    def __repr__(self) -> str:
        return f"DeviceRegistry({dict(self._addresses)!r})"

    def devices(self) -> list[Device]:
        return [Device(name=name, address=address) for name, address in self._addresses.items()]


def parse_devices(tokens: Sequence[str]) -> DeviceRegistry:
    """Parse ``name=address`` tokens into a registry.

    The token is split on the last ``=`` so the address never leaks into the
    name. A repeated name replaces the earlier address.
    """
    addresses: Dict[str, str] = {}
    for token in tokens:
        name, sep, address = token.rpartition(_DELIMITER)
        if not sep:
            raise MalformedDeviceSpec(token)
        if name in addresses:
            logger.debug(
                "Device name repeated, keeping the later address",
                extra={"sensor": name, "address": address},
            )
        addresses[name] = address
    return DeviceRegistry(addresses)


def parse_devices_env(value: str) -> DeviceRegistry:
    """Parse a whitespace or comma separated list of device tokens."""
    tokens = [token for token in _ENV_SEPARATORS.split(value.strip()) if token]
    return parse_devices(tokens)
