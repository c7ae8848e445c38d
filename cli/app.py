from __future__ import annotations

from typing import List, NoReturn, Optional

import typer
import uvicorn
from prometheus_client import CollectorRegistry, generate_latest

from app.main import create_app
from cli.config import CLIConfig, load_config
from cli.render import render_devices, render_exposition
from logging_config import configure_logging
from models.devices import MalformedDeviceSpec
from services.collector import AirDataCollector


app = typer.Typer(
    help="Prometheus exporter for Awair air-quality sensors.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

DEVICES_HELP = "Devices as name=address (host:port). Defaults to AWAIR_DEVICES."


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _load(
    device_tokens: Optional[List[str]],
    address: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    try:
        config = load_config(device_tokens, address=address, timeout=timeout)
    except MalformedDeviceSpec as exc:
        _fail(f"Error parsing devices: {exc}")
    except ValueError as exc:
        _fail(str(exc))
    if not config.devices:
        _fail("No devices specified.")
    return config


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL env or INFO).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging(log_level.upper() if log_level else None)


@app.command("serve")
def serve_command(
    devices: Optional[List[str]] = typer.Argument(None, help=DEVICES_HELP),
    address: Optional[str] = typer.Option(
        None,
        "--address",
        "-a",
        help="Listen address (defaults to AWAIR_LISTEN_ADDRESS env or localhost:8888).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each device before giving up.",
    ),
) -> None:
    """Serve /metrics, scraping every device on each request."""
    config = _load(devices, address=address, timeout=timeout)
    try:
        host, port = config.host, config.port
    except ValueError as exc:
        _fail(str(exc))

    exporter = create_app(config.devices, settings=config.settings)
    typer.echo(f"Awair exporter listening on {config.settings.listen_address}")
    uvicorn.run(exporter, host=host, port=port, log_config=None)


@app.command("scrape")
def scrape_command(
    devices: Optional[List[str]] = typer.Argument(None, help=DEVICES_HELP),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each device before giving up.",
    ),
) -> None:
    """Run a single collection and print the Prometheus exposition."""
    config = _load(devices, timeout=timeout)
    collector = AirDataCollector(
        config.devices,
        timeout=config.settings.request_timeout,
        max_workers=config.settings.scrape_workers,
    )
    registry = CollectorRegistry()
    registry.register(collector)
    try:
        payload = generate_latest(registry)
    finally:
        collector.close()
    render_exposition(payload)


@app.command("devices")
def devices_command(
    devices: Optional[List[str]] = typer.Argument(None, help=DEVICES_HELP),
) -> None:
    """Parse the device list and print it."""
    config = _load(devices)
    render_devices(config.devices)
