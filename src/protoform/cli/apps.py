"""
App commands: list apps, build the manifest, resync forms.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from protoform.cli.utils import console, echo_json, err_console, get_config
from protoform.core.config import ProtoformConfig
from protoform.sync.catalog import build_manifest, list_apps
from protoform.sync.resync import FormSync
from protoform.sync.store import InMemoryFormStore


def _proto_dir(directory: Path | None, config: ProtoformConfig) -> Path:
    proto_dir = directory or config.resolve_proto_dir()
    if not proto_dir.is_dir():
        err_console.print(f"[red]Proto directory not found: {proto_dir}[/red]")
        raise typer.Exit(1)
    return proto_dir


def apps_command(
    directory: Annotated[
        Path | None, typer.Argument(help="Proto directory (default: [sync] proto_dir)")
    ] = None,
    output_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List the apps defined by the IDL files of a directory."""
    proto_dir = _proto_dir(directory, get_config())
    apps = list_apps(proto_dir)

    if output_json:
        echo_json([app.to_dict() for app in apps])
        return

    if not apps:
        console.print("[dim]No apps found.[/dim]")
        return

    table = Table(title="Apps")
    table.add_column("App ID", style="cyan")
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("File", style="dim")

    for app in apps:
        table.add_row(app.app_id, app.name, app.description, app.proto_file)

    console.print(table)
    console.print(f"\n[dim]{len(apps)} app(s) found[/dim]")


def manifest_command(
    directory: Annotated[
        Path | None, typer.Argument(help="Proto directory (default: [sync] proto_dir)")
    ] = None,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the manifest to this file")
    ] = None,
) -> None:
    """Compile every app into a JSON manifest."""
    config = get_config()
    manifest = build_manifest(
        _proto_dir(directory, config),
        config.sync.skip_prefixes,
        config.compiler,
    )

    if output is None:
        echo_json(manifest)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    console.print(f"[green]✓[/green] Manifest written to {output} ({len(manifest['apps'])} app(s))")


def sync_command(
    directory: Annotated[
        Path | None, typer.Argument(help="Proto directory (default: [sync] proto_dir)")
    ] = None,
    tenant: Annotated[
        str | None, typer.Option("--tenant", "-t", help="Tenant id (default: [sync] tenant_id)")
    ] = None,
) -> None:
    """Resync every IDL file into an in-memory form store and report the result."""
    config = get_config()
    store = InMemoryFormStore()
    report = FormSync(store, _proto_dir(directory, config), config).sync(tenant)

    table = Table(title=f"Synced forms ({tenant or config.sync.tenant_id})")
    table.add_column("App ID", style="cyan")
    table.add_column("Form")
    table.add_column("Version")
    for synced in report.synced:
        table.add_row(synced.app_id, synced.form_name, synced.version)
    console.print(table)

    for app_id in report.skipped:
        console.print(f"[yellow]Skipped {app_id}: no root message[/yellow]")
    for file_name, error in report.failed.items():
        err_console.print(f"[red]Failed {file_name}:[/red] {error}")

    if not report.ok:
        raise typer.Exit(1)
