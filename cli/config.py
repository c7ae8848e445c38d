from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Sequence

from models.devices import DeviceRegistry, parse_devices, parse_devices_env
from settings import Settings, get_settings, split_listen_address


@dataclass(frozen=True)
class CLIConfig:
    settings: Settings
    devices: DeviceRegistry

    @property
    def host(self) -> str:
        return split_listen_address(self.settings.listen_address)[0]

    @property
    def port(self) -> int:
        return split_listen_address(self.settings.listen_address)[1]


def load_config(
    device_tokens: Optional[Sequence[str]] = None,
    address: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    """Merge command line overrides over the environment settings.

    Positional device tokens take precedence over ``AWAIR_DEVICES``. Raises
    ``MalformedDeviceSpec`` for an unparseable token and ``ValueError`` for a
    bad listen address or timeout.
    """
    settings = get_settings()
    overrides: dict[str, object] = {}
    if address is not None:
        split_listen_address(address)
        overrides["listen_address"] = address
    if timeout is not None:
        if timeout <= 0:
            raise ValueError("Timeout must be a positive number of seconds.")
        overrides["request_timeout"] = timeout
    if overrides:
        settings = replace(settings, **overrides)

    if device_tokens:
        devices = parse_devices(device_tokens)
    else:
        devices = parse_devices_env(settings.devices)
    return CLIConfig(settings=settings, devices=devices)
