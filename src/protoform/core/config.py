"""
protoform.toml configuration.

Example::

    [sync]
    proto_dir = "proto"
    tenant_id = "demo-tenant"
    skip_prefixes = ["common."]

    [compiler]
    default_version = "1.0.0"
    max_depth = 16
    root_exclusions = ["ValidationRule", "Field", "ProfileFormPreset"]

    [logging]
    level = "INFO"

Every key is optional; a missing file yields the defaults.
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError

CONFIG_FILENAME = "protoform.toml"

DEFAULT_ROOT_EXCLUSIONS = ["ValidationRule", "Field", "ProfileFormPreset"]


@dataclass
class SyncConfig:
    """Where resync looks for IDL files and which tenant it writes to."""

    proto_dir: str = "proto"
    tenant_id: str = "demo-tenant"
    skip_prefixes: list[str] = field(default_factory=lambda: ["common."])


@dataclass
class CompilerConfig:
    """Compiler defaults."""

    default_version: str = "1.0.0"
    max_depth: int = 16  # nested message levels before a field is cut
    root_exclusions: list[str] = field(default_factory=lambda: list(DEFAULT_ROOT_EXCLUSIONS))


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class ProtoformConfig:
    sync: SyncConfig = field(default_factory=SyncConfig)
    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    path: Path | None = None  # file the config was read from, if any

    @property
    def log_level(self) -> str:
        """LOG_LEVEL from the environment wins over the file."""
        return os.environ.get("LOG_LEVEL", self.logging.level).upper()

    def resolve_proto_dir(self) -> Path:
        """``proto_dir`` relative to the config file's directory."""
        proto_dir = Path(self.sync.proto_dir)
        if proto_dir.is_absolute() or self.path is None:
            return proto_dir
        return self.path.parent / proto_dir


# =============================================================================
# Loading
# =============================================================================


def _expect(section: str, key: str, value: Any, kind: type) -> Any:
    if kind is int and isinstance(value, bool):
        raise ConfigError(f"[{section}] {key} must be an integer, got {value!r}")
    if not isinstance(value, kind):
        raise ConfigError(f"[{section}] {key} must be {kind.__name__}, got {value!r}")
    return value


def _expect_str_list(section: str, key: str, value: Any) -> list[str]:
    _expect(section, key, value, list)
    if not all(isinstance(item, str) for item in value):
        raise ConfigError(f"[{section}] {key} must be a list of strings")
    return list(value)


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    return section


def parse_config(data: dict[str, Any], path: Path | None = None) -> ProtoformConfig:
    """Build a config from already-parsed TOML data."""
    sync_data = _section(data, "sync")
    compiler_data = _section(data, "compiler")
    logging_data = _section(data, "logging")

    defaults = ProtoformConfig()

    sync_config = SyncConfig(
        proto_dir=_expect("sync", "proto_dir", sync_data.get("proto_dir", defaults.sync.proto_dir), str),
        tenant_id=_expect("sync", "tenant_id", sync_data.get("tenant_id", defaults.sync.tenant_id), str),
        skip_prefixes=_expect_str_list(
            "sync", "skip_prefixes", sync_data.get("skip_prefixes", defaults.sync.skip_prefixes)
        ),
    )

    max_depth = _expect(
        "compiler", "max_depth", compiler_data.get("max_depth", defaults.compiler.max_depth), int
    )
    if max_depth < 1:
        raise ConfigError(f"[compiler] max_depth must be at least 1, got {max_depth}")

    compiler_config = CompilerConfig(
        default_version=_expect(
            "compiler",
            "default_version",
            compiler_data.get("default_version", defaults.compiler.default_version),
            str,
        ),
        max_depth=max_depth,
        root_exclusions=_expect_str_list(
            "compiler",
            "root_exclusions",
            compiler_data.get("root_exclusions", defaults.compiler.root_exclusions),
        ),
    )

    logging_config = LoggingConfig(
        level=_expect("logging", "level", logging_data.get("level", defaults.logging.level), str),
    )

    return ProtoformConfig(
        sync=sync_config,
        compiler=compiler_config,
        logging=logging_config,
        path=path,
    )


def load_config(path: Path | None = None) -> ProtoformConfig:
    """
    Load protoform.toml.

    Args:
        path: Config file path; ``None`` or a missing file yields defaults

    Raises:
        ConfigError: If the file is not valid TOML or a value has the wrong type
    """
    if path is None or not path.is_file():
        return ProtoformConfig()
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    return parse_config(data, path=path.resolve())


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` (default: cwd) to the nearest protoform.toml."""
    current = (start or Path.cwd()).resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
