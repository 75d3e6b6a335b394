"""
protoform CLI utilities.

Shared helpers used across CLI modules.
"""

import json
import logging
import platform
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from protoform.core.config import ProtoformConfig, find_config, load_config
from protoform.core.errors import ConfigError

__version__ = "0.3.0"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

console = Console()
err_console = Console(stderr=True)

# Set by the main callback
_config_path_override: Path | None = None


def get_version() -> str:
    """Get protoform version from package metadata."""
    try:
        from importlib.metadata import version

        return version("protoform")
    except Exception:
        return __version__


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"protoform {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def set_config_path(path: Path | None) -> None:
    global _config_path_override
    _config_path_override = path


def get_config() -> ProtoformConfig:
    """Config from --config, else the nearest protoform.toml, else defaults."""
    path = _config_path_override or find_config()
    try:
        return load_config(path)
    except ConfigError as e:
        err_console.print(f"[red]Config error:[/red] {e}")
        raise typer.Exit(1) from e


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


def read_text_or_exit(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        err_console.print(f"[red]Cannot read {path}:[/red] {e}")
        raise typer.Exit(1) from e


def load_json_argument(value: str) -> Any:
    """Parse a JSON argument given inline or as a path to a JSON file."""
    text = value
    if not value.lstrip().startswith(("{", "[")):
        text = read_text_or_exit(Path(value))
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        err_console.print(f"[red]Invalid JSON:[/red] {e}")
        raise typer.Exit(1) from e


def echo_json(data: Any, indent: int | None = 2) -> None:
    typer.echo(json.dumps(data, indent=indent or None, ensure_ascii=False))
