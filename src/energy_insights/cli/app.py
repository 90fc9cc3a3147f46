# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Main CLI application for energy-insights."""

from __future__ import annotations

import datetime as dt
import json
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import click
import pydantic
from rich.console import Console
from rich.logging import RichHandler

from energy_insights import __version__
from energy_insights.config import AppConfig, load_config
from energy_insights.errors import ComputationError, UpstreamError, ValidationError
from energy_insights.reporting.terminal import TerminalRenderer
from energy_insights.service import EnergyInsightsService, build_service, parse_date, validate_range

R = TypeVar("R")


def _configure_logging(verbose: int, no_color: bool) -> None:
    log_console = Console(stderr=True, no_color=no_color)
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=log_console, show_path=False)],
        force=True,
    )


def _resolve_config(config: str | None, source: str | None, seed: int | None) -> AppConfig:
    cfg = load_config(config) if config else AppConfig()
    overrides: dict[str, Any] = {}
    if source is not None:
        overrides["source"] = source
    if seed is not None:
        overrides["seed"] = seed
        if cfg.weather.simulation_seed is None:
            overrides["weather"] = cfg.weather.model_copy(update={"simulation_seed": seed})
    if not overrides:
        return cfg
    return AppConfig.model_validate({**cfg.model_dump(), **overrides})


def _get_service(ctx: click.Context) -> EnergyInsightsService:
    """Build the service on first use so ``--help`` never touches config."""
    if ctx.obj.get("service") is None:
        console: Console = ctx.obj["console"]
        try:
            cfg = _resolve_config(ctx.obj["config_path"], ctx.obj["source"], ctx.obj["seed"])
        except (FileNotFoundError, pydantic.ValidationError) as exc:
            console.print(f"[red]Configuration error: {exc}[/]")
            raise SystemExit(2)
        ctx.obj["app_config"] = cfg
        ctx.obj["service"] = build_service(cfg)
    return ctx.obj["service"]


def _run(console: Console, label: str, action: Callable[[], R], spinner: bool = True) -> R:
    """Run *action* (under a status spinner), mapping errors to exit codes."""
    try:
        if not spinner:
            return action()
        with console.status(f"[bold cyan]{label}..."):
            return action()
    except ValidationError as exc:
        console.print(f"[red]Invalid input: {exc}[/]")
        raise SystemExit(2)
    except UpstreamError as exc:
        console.print(f"[red]Upstream service error: {exc}[/]")
        raise SystemExit(1)
    except ComputationError as exc:
        console.print(f"[red]Computation failed: {exc}[/]")
        raise SystemExit(1)


def _date_args(console: Console, date_from: str, date_to: str) -> tuple[dt.date, dt.date]:
    try:
        start = parse_date(date_from, "FROM")
        end = parse_date(date_to, "TO")
        validate_range(start, end)
    except ValidationError as exc:
        console.print(f"[red]Invalid input: {exc}[/]")
        raise SystemExit(2)
    return start, end


def _echo_json(model: pydantic.BaseModel | list[pydantic.BaseModel]) -> None:
    if isinstance(model, list):
        payload = [m.model_dump(mode="json", by_alias=True) for m in model]
        click.echo(json.dumps(payload, indent=2))
        return
    click.echo(model.model_dump_json(by_alias=True, indent=2))


@click.group()
@click.version_option(version=__version__)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug)")
@click.option(
    "--config", "-c", type=click.Path(), default=None,
    help="YAML config file (required for --source live unless set inside it)",
)
@click.option(
    "--source", type=click.Choice(["sim", "live"]), default=None,
    help="Metering source: sim (simulated meter) or live (metering platform)",
)
@click.option("--seed", "-s", type=int, default=None, help="Random seed for simulated data")
@click.pass_context
def cli(
    ctx: click.Context,
    no_color: bool,
    verbose: int,
    config: str | None,
    source: str | None,
    seed: int | None,
) -> None:
    """energy-insights: Energy Consumption Analytics and Forecasting

    \b
      analyze   Moving averages and anomaly detection
      forecast  Short-term consumption forecast
      insights  Human-readable findings and overall assessment
      weather   Daily weather used for correlation
      serve     Start the REST API server
    """
    ctx.ensure_object(dict)
    console = Console(no_color=no_color)
    _configure_logging(verbose, no_color)
    ctx.obj["console"] = console
    ctx.obj["config_path"] = config
    ctx.obj["source"] = source
    ctx.obj["seed"] = seed
    ctx.obj.setdefault("service", None)


@cli.command()
@click.argument("date_from", metavar="FROM")
@click.argument("date_to", metavar="TO")
@click.option("--json", "as_json", is_flag=True, help="Print the raw summary as JSON")
@click.pass_context
def analyze(ctx: click.Context, date_from: str, date_to: str, as_json: bool) -> None:
    """Analyze daily consumption between FROM and TO (yyyy-MM-dd)."""
    console: Console = ctx.obj["console"]
    start, end = _date_args(console, date_from, date_to)
    service = _get_service(ctx)
    summary = _run(
        console, "Analyzing consumption", lambda: service.analyze(start, end), not as_json
    )

    if as_json:
        _echo_json(summary)
        return
    TerminalRenderer(console).render_analytics(summary)


@cli.command()
@click.option(
    "--from", "date_from", default=None,
    help="First forecast day (yyyy-MM-dd); defaults to tomorrow (UTC)",
)
@click.option("--days", "-d", type=int, default=3, show_default=True, help="Days to forecast (1-30)")
@click.option("--json", "as_json", is_flag=True, help="Print the raw forecast as JSON")
@click.pass_context
def forecast(ctx: click.Context, date_from: str | None, days: int, as_json: bool) -> None:
    """Forecast daily consumption from the preceding history."""
    console: Console = ctx.obj["console"]
    if date_from is None:
        start = dt.datetime.now(dt.timezone.utc).date() + dt.timedelta(days=1)
    else:
        start, _ = _date_args(console, date_from, date_from)
    service = _get_service(ctx)
    summary = _run(
        console, "Generating forecast", lambda: service.forecast(start, days), not as_json
    )

    if as_json:
        _echo_json(summary)
        return
    TerminalRenderer(console).render_forecast(summary)


@cli.command()
@click.argument("date_from", metavar="FROM")
@click.argument("date_to", metavar="TO")
@click.option("--json", "as_json", is_flag=True, help="Print the raw insights as JSON")
@click.pass_context
def insights(ctx: click.Context, date_from: str, date_to: str, as_json: bool) -> None:
    """Generate insights for FROM..TO with an overall assessment."""
    console: Console = ctx.obj["console"]
    start, end = _date_args(console, date_from, date_to)
    service = _get_service(ctx)
    summary = _run(
        console, "Generating insights", lambda: service.generate_insights(start, end), not as_json
    )

    if as_json:
        _echo_json(summary)
        return
    TerminalRenderer(console).render_insights(summary)


@cli.command()
@click.argument("date_from", metavar="FROM")
@click.argument("date_to", metavar="TO")
@click.option("--json", "as_json", is_flag=True, help="Print the raw observations as JSON")
@click.pass_context
def weather(ctx: click.Context, date_from: str, date_to: str, as_json: bool) -> None:
    """Show daily weather for FROM..TO (simulated without an API key)."""
    console: Console = ctx.obj["console"]
    start, end = _date_args(console, date_from, date_to)
    service = _get_service(ctx)
    observations = _run(
        console, "Fetching weather", lambda: service.weather_data(start, end), not as_json
    )

    if as_json:
        _echo_json(observations)
        return
    TerminalRenderer(console).render_weather(observations)


@cli.command()
@click.option("--host", default=None, help="Bind address (default from config)")
@click.option("--port", type=int, default=None, help="Bind port (default from config)")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the REST API server."""
    from energy_insights.api import check_dependency
    check_dependency("fastapi", "pip install -e '.[api]'")
    check_dependency("uvicorn", "pip install -e '.[api]'")

    console: Console = ctx.obj["console"]
    service = _get_service(ctx)
    cfg: AppConfig = ctx.obj.get("app_config") or AppConfig()
    host = host or cfg.server.host
    port = port or cfg.server.port
    console.print(f"[bold cyan]Starting API server on {host}:{port}...[/]")

    from energy_insights.api.server import create_app
    import uvicorn

    app = create_app(service=service, config=cfg)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    cli()
