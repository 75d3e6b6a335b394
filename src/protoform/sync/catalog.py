"""
App catalog and manifest generation.

Every ``*.proto`` file in the proto directory is one app; its id is the file
name without extension. File-level options give the app a display name and
description::

    option (app_name) = "Invoices";
    option (app_description) = "Outgoing invoices";

The manifest bundles every app with its compiled root form so a renderer can
start without a running form store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from protoform.core.compiler import resolve_root
from protoform.core.config import CompilerConfig
from protoform.core.idl_parser import extract_file_options, parse_idl
from protoform.core.ir import FormStatus
from protoform.core.strings import title_case_id

logger = logging.getLogger(__name__)

PROTO_SUFFIX = ".proto"


@dataclass(frozen=True)
class AppDefinition:
    """An app discovered in the proto directory."""

    app_id: str
    name: str
    description: str
    proto_file: str

    def to_dict(self) -> dict[str, str]:
        return {
            "appId": self.app_id,
            "name": self.name,
            "description": self.description,
            "protoFile": self.proto_file,
        }


def app_id_for(path: Path) -> str:
    """App id of an IDL file: its name without the ``.proto`` suffix."""
    name = path.name
    if name.lower().endswith(PROTO_SUFFIX):
        return name[: -len(PROTO_SUFFIX)]
    return path.stem


def discover_proto_files(proto_dir: Path) -> list[Path]:
    """``*.proto`` files directly inside ``proto_dir``, in name order."""
    if not proto_dir.is_dir():
        logger.warning("Proto directory not found: %s", proto_dir)
        return []
    return sorted(
        (p for p in proto_dir.iterdir() if p.is_file() and p.name.lower().endswith(PROTO_SUFFIX)),
        key=lambda p: p.name,
    )


def read_app_definition(path: Path) -> AppDefinition:
    app_id = app_id_for(path)
    options = extract_file_options(path.read_text(encoding="utf-8"))
    name = options.get("app_name") or title_case_id(app_id)
    return AppDefinition(
        app_id=app_id,
        name=name,
        description=options.get("app_description") or f"{name} application",
        proto_file=path.name,
    )


def list_apps(proto_dir: Path) -> list[AppDefinition]:
    """Every app in ``proto_dir``, in file name order."""
    return [read_app_definition(path) for path in discover_proto_files(proto_dir)]


def build_manifest(
    proto_dir: Path,
    skip_prefixes: list[str] | None = None,
    config: CompilerConfig | None = None,
) -> dict[str, Any]:
    """
    Compile every app into a manifest.

    Files whose name starts with one of ``skip_prefixes`` (shared type
    libraries such as ``common.proto``) and files without a root message are
    left out. Form entries carry resolved fields with snake_case keys.

    Returns:
        ``{"apps": [...], "formsByApp": {app_id: [form, ...]}}`` with apps
        sorted by id
    """
    skip = tuple(["common."] if skip_prefixes is None else skip_prefixes)
    config = config or CompilerConfig()
    apps: list[dict[str, Any]] = []
    forms_by_app: dict[str, list[dict[str, Any]]] = {}

    for path in discover_proto_files(proto_dir):
        if skip and path.name.startswith(skip):
            logger.debug("Skipping %s", path.name)
            continue

        app_id = app_id_for(path)
        document = parse_idl(path.read_text(encoding="utf-8"))
        compiled = resolve_root(document, app_id, config)
        if compiled is None:
            continue

        apps.append(
            {
                "appId": app_id,
                "name": document.options.get("app_name") or title_case_id(app_id),
                "description": document.options.get("app_description") or f"Generated from {path.name}",
                "protoFile": path.name,
            }
        )
        forms_by_app[app_id] = [
            {
                "_id": f"generated-{app_id}-{compiled.form_name}",
                "appId": app_id,
                "formName": compiled.form_name,
                "version": config.default_version,
                "status": FormStatus.PUBLISHED.value,
                "schema": {"fields": [f.to_dict() for f in compiled.fields]},
            }
        ]

    apps.sort(key=lambda app: app["appId"])
    return {"apps": apps, "formsByApp": forms_by_app}
