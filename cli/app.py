from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_device, render_inventory, render_tabulation
from logging_config import configure_logging
from models.errors import IngestionFailure
from storage.sample_store import populate

_DATETIME_FORMATS = [
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S",
]


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the hardware sample interpolation service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, request_timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("tabulate")
def tabulate_command(
    ctx: typer.Context,
    device_id: str = typer.Argument(..., help="Device identifier."),
    start: datetime = typer.Option(
        ..., "--from", formats=_DATETIME_FORMATS, help="Inclusive range start (UTC)."
    ),
    end: datetime = typer.Option(
        ..., "--to", formats=_DATETIME_FORMATS, help="Exclusive range end (UTC)."
    ),
    count: int = typer.Option(10, "--count", "-n", min=1, help="Number of points."),
) -> None:
    """Fetch evenly spaced interpolated samples for a device."""
    state = _get_state(ctx)
    payload = state.client.tabulate(device_id, start, end, count)
    render_tabulation(device_id, payload)


@app.command("device")
def device_command(
    ctx: typer.Context,
    device_id: str = typer.Argument(..., help="Device identifier."),
) -> None:
    """Show how many samples the service holds for a device."""
    state = _get_state(ctx)
    render_device(state.client.get_device(device_id))


@app.command("inspect")
def inspect_command(
    root: Path = typer.Argument(
        ..., exists=True, file_okay=False, dir_okay=True, help="Sample tree to ingest."
    ),
) -> None:
    """Ingest a sample tree locally and report per-device sample counts."""
    configure_logging("WARNING")
    try:
        store = populate(root)
    except IngestionFailure as exc:
        typer.secho(f"Ingestion failed: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    render_inventory({device_id: store.device_sample_count(device_id) for device_id in store.device_ids()})
