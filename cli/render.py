from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


_FRESHNESS_COLORS = {
    "fresh": typer.colors.GREEN,
    "persisted_stale": typer.colors.YELLOW,
    "uninitialized": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Weather Station")
    echo_key_values(
        [
            ("temperature", payload.get("temperature")),
            ("humidity", payload.get("humidity")),
            ("sunrise", payload.get("sunrise")),
            ("sunset", payload.get("sunset")),
            ("last_fetched", payload.get("lastFetched") or "never"),
        ]
    )
    freshness = payload.get("freshness")
    if freshness:
        typer.secho(
            f"freshness: {freshness}",
            fg=_FRESHNESS_COLORS.get(freshness),
        )
