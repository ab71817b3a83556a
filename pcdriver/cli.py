"""Typer CLI entrypoint."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer

from pcdriver.core.driver import PCDriver
from pcdriver.core.errors import PCDriverError
from pcdriver.core.loader import load_parameter
from pcdriver.core.model import CommandRequest, DriverParameter, Point

app = typer.Typer(help="IoT PC driver: read machine metrics and host latency, invoke local services")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s [%(name)s] %(message)s",
    )


def _build_driver(mode: str) -> PCDriver:
    driver = PCDriver(mode)
    for warning in getattr(driver, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return driver


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def _parse_point(raw: str) -> Point:
    name, sep, address = raw.partition("=")
    name = name.strip()
    if not name:
        raise typer.BadParameter(f"Point '{raw}' has no name")
    return Point(name=name, address=(address.strip() or None) if sep else None)


@app.command("metrics")
def list_metrics() -> None:
    """List the machine metrics this driver can read, with current values."""
    try:
        driver = _build_driver("metrics")
        node = driver.open()
        names = driver.metrics.list_metrics()
        values = driver.read(node, [Point(name=name) for name in names])
        for name in names:
            typer.echo(f"{name}: {values.get(name, '<unavailable>')}")
    except PCDriverError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("spec")
def show_spec(
    mode: str | None = typer.Option(None, "--mode", help="metrics or network"),
    config: Path | None = typer.Option(None, "--config", help="Node parameter YAML file"),
) -> None:
    """Print the thing specification as JSON."""
    try:
        loaded = load_parameter(config)
        driver = _build_driver(mode or loaded.mode or "metrics")
        _echo_json(driver.get_specification().to_dict())
    except PCDriverError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("read")
def read_points(
    points: list[str] = typer.Argument(..., help="NAME for a metric, NAME=ADDRESS for a ping target"),
    timeout: int | None = typer.Option(None, "--timeout", min=1, help="Ping timeout in milliseconds"),
    status: bool | None = typer.Option(None, "--status/--no-status", help="Include <name>-Status entries"),
    config: Path | None = typer.Option(None, "--config", help="Node parameter YAML file"),
) -> None:
    """Read points and print the result mapping as JSON."""
    try:
        loaded = load_parameter(config)
        parameter = DriverParameter(
            timeout_ms=timeout if timeout is not None else loaded.parameter.timeout_ms,
            retrieve_status=status if status is not None else loaded.parameter.retrieve_status,
        )
        driver = _build_driver(loaded.mode or "metrics")
        node = driver.open(parameter)
        _echo_json(driver.read(node, [_parse_point(p) for p in points]))
    except PCDriverError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("control")
def control(
    name: str,
    value: str | None = typer.Argument(None, help="Service input, JSON objects are decoded"),
) -> None:
    """Invoke a driver service such as Speak or Reboot."""
    input_data: Any = value
    if value is not None and value.lstrip().startswith("{"):
        try:
            input_data = json.loads(value)
        except json.JSONDecodeError as exc:
            typer.echo(f"Error: Invalid JSON input: {exc}", err=True)
            raise typer.Exit(code=1) from None
    try:
        driver = _build_driver("metrics")
        node = driver.open()
        driver.control(node, CommandRequest(name=name, input_data=input_data))
        typer.echo(f"Invoked {name}")
    except PCDriverError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
