from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

import typer

from models.records import Channel


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_tabulation(device_id: str, payload: Mapping[str, Mapping[str, float]]) -> None:
    echo_heading(f"Tabulated samples for {device_id}")
    if not payload:
        typer.echo("No samples in range.")
        return
    for label, sample in payload.items():
        typer.echo(label)
        for channel in Channel:
            value = sample.get(channel.value)
            rendered = "-" if value is None else f"{value:.4f}"
            typer.echo(f"  {channel.value}: {rendered}")


def render_device(payload: Dict[str, Any]) -> None:
    echo_heading("Device")
    echo_key_values(
        [
            ("id", payload.get("id")),
            ("sample_count", payload.get("sample_count")),
            ("first", payload.get("first")),
            ("last", payload.get("last")),
        ]
    )


def render_inventory(counts: Mapping[str, int]) -> None:
    echo_heading("Ingested devices")
    if not counts:
        typer.echo("No devices found.")
        return
    for device_id, count in counts.items():
        typer.echo(f"  - {device_id}: {count}")
    typer.echo(f"total samples: {sum(counts.values())}")
