from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_status


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the weather station cache service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
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
        help="Request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("show")
def show_command(ctx: typer.Context) -> None:
    """Print the cached weather readings."""
    state = _get_state(ctx)
    payload = state.client.get_status()
    render_status(payload)


@app.command("override")
def override_command(
    ctx: typer.Context,
    temperature: float = typer.Option(..., "--temperature", help="Temperature in °C."),
    humidity: float = typer.Option(..., "--humidity", help="Relative humidity in percent."),
    sunrise: str = typer.Option(..., "--sunrise", help="Local sunrise time, HH:MM[:SS]."),
    sunset: str = typer.Option(..., "--sunset", help="Local sunset time, HH:MM[:SS]."),
) -> None:
    """Replace the cached readings with manual values."""
    state = _get_state(ctx)
    typer.echo(f"Sending override to {state.config.base_url} ...")
    payload = state.client.override(
        temperature=temperature,
        humidity=humidity,
        sunrise=sunrise,
        sunset=sunset,
    )
    typer.secho("Override accepted.", fg=typer.colors.GREEN)
    typer.echo()
    render_status(payload)
