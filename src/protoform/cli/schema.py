"""
Schema commands: compile IDL files and validate records against them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from protoform.cli.utils import (
    console,
    echo_json,
    err_console,
    get_config,
    load_json_argument,
    read_text_or_exit,
)
from protoform.core.compiler import compile_idl
from protoform.core.errors import ValidationError
from protoform.core.ir import DomainFormSchema
from protoform.core.validator import validate
from protoform.runtime.domain_to_runtime import to_runtime_schema
from protoform.sync.catalog import app_id_for
from protoform.sync.records import check_required


def _compile_or_exit(file: Path, app_id: str | None) -> DomainFormSchema:
    config = get_config()
    resolved_app_id = app_id or app_id_for(file)
    schema = compile_idl(read_text_or_exit(file), resolved_app_id, config.compiler)
    if schema is None:
        err_console.print(f"[red]No root message found in {file} (app {resolved_app_id})[/red]")
        raise typer.Exit(1)
    return schema


def compile_command(
    file: Annotated[Path, typer.Argument(help="IDL file to compile")],
    app_id: Annotated[
        str | None,
        typer.Option("--app-id", "-a", help="App id (default: file name without extension)"),
    ] = None,
    runtime: Annotated[
        bool, typer.Option("--runtime", "-r", help="Print the runtime schema instead")
    ] = False,
    indent: Annotated[int, typer.Option("--indent", help="JSON indentation (0 for compact)")] = 2,
) -> None:
    """Compile an IDL file and print its form schema as JSON."""
    schema = _compile_or_exit(file, app_id)
    if runtime:
        echo_json(to_runtime_schema(schema).to_dict(), indent)
    else:
        echo_json(schema.to_dict(), indent)


def validate_command(
    file: Annotated[Path, typer.Argument(help="IDL file describing the form")],
    data: Annotated[str, typer.Argument(help="Record as inline JSON or a path to a JSON file")],
    app_id: Annotated[
        str | None,
        typer.Option("--app-id", "-a", help="App id (default: file name without extension)"),
    ] = None,
    required: Annotated[
        bool, typer.Option("--required", help="Also check required fields are filled")
    ] = False,
) -> None:
    """Validate a JSON record against the form compiled from an IDL file."""
    schema = _compile_or_exit(file, app_id)
    record = load_json_argument(data)
    if not isinstance(record, dict):
        err_console.print("[red]Record must be a JSON object[/red]")
        raise typer.Exit(1)

    try:
        if required:
            check_required(schema, record)
        validate(schema, record)
    except ValidationError as e:
        err_console.print(f"[red]Invalid:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    console.print("[green]OK[/green]")
