"""Command line entry point: run registered deployment routines."""

import asyncio
from pathlib import Path

import typer

from remote_script.config import Settings
from remote_script.errors import RemoteScriptError
from remote_script.routines import RoutineRegistry, registry
from remote_script.utils.console import configure_logging

app = typer.Typer(help="Run deployment routines against a remote host.", no_args_is_help=True)


def _get_registry() -> RoutineRegistry:
    registry.load_entry_points()
    return registry


def _split_names(names: list[str]) -> list[str]:
    """Accept both ``a b`` and ``a,b`` forms."""
    return [part.strip() for name in names for part in name.split(",") if part.strip()]


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (defaults to REMOTE_SCRIPT_LOG_LEVEL or INFO)"
    ),
) -> None:
    settings = Settings.from_env()
    configure_logging(level=log_level or settings.log_level, use_colors=settings.log_colors)


@app.command("run")
def run_command(
    workspace: Path = typer.Argument(..., exists=True, file_okay=False, resolve_path=True),
    names: list[str] = typer.Argument(..., help="Routine names, space or comma separated"),
) -> None:
    """Run routines in order; the first failure aborts the rest."""
    routines = _get_registry()
    try:
        asyncio.run(routines.run(workspace, _split_names(names)))
    except RemoteScriptError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command("list")
def list_command() -> None:
    """List registered routine names."""
    for name in _get_registry().names():
        typer.echo(name)
