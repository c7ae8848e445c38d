from __future__ import annotations

from typing import Iterable

import typer

from models.devices import DeviceRegistry


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, object]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_devices(devices: DeviceRegistry) -> None:
    echo_heading(f"Devices ({len(devices)})")
    echo_key_values((device.name, device.address) for device in devices.devices())


def render_exposition(payload: bytes) -> None:
    typer.echo(payload.decode("utf-8"), nl=False)
