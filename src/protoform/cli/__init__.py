"""
protoform CLI.

Commands:
    compile   Compile an IDL file into a form schema
    validate  Validate a JSON record against a compiled form
    apps      List the apps of a proto directory
    manifest  Compile every app into a JSON manifest
    sync      Resync every IDL file into form storage
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from protoform.cli.apps import apps_command, manifest_command, sync_command
from protoform.cli.schema import compile_command, validate_command
from protoform.cli.utils import configure_logging, get_config, set_config_path, version_callback

app = typer.Typer(
    help="""protoform: compile annotated IDL messages into form schemas.

    Parses message and enum definitions with comment annotations, resolves
    them into typed form fields, and validates submitted records.
    """,
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to protoform.toml (default: nearest one)"),
    ] = None,
) -> None:
    """protoform CLI main callback for global options."""
    set_config_path(config)
    configure_logging(get_config().log_level)


app.command(name="compile")(compile_command)
app.command(name="validate")(validate_command)
app.command(name="apps")(apps_command)
app.command(name="manifest")(manifest_command)
app.command(name="sync")(sync_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


__all__ = ["app", "main"]
