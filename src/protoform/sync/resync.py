"""
Resync of compiled forms into form storage.

For every IDL file in the proto directory, in name order:

1. compile the file (app id = file name without extension)
2. upsert the root form as ``published``
3. once every file is done, delete the app's other stored forms

A file that cannot be read or compiled is logged and skipped; an app without
a root message is skipped without touching what is already stored for it.
Running the resync again converges to the same stored state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from protoform.core.compiler import compile_idl
from protoform.core.config import ProtoformConfig
from protoform.core.ir import FormStatus
from protoform.sync.catalog import app_id_for, discover_proto_files
from protoform.sync.store import FormStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncedForm:
    app_id: str
    form_name: str
    version: str


@dataclass
class SyncReport:
    """Outcome of one resync run."""

    synced: list[SyncedForm] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # file name -> error
    skipped: list[str] = field(default_factory=list)  # app ids without a root message
    removed: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed


class FormSync:
    """
    Compiles every IDL file of a directory into form storage.

    Example:
        store = InMemoryFormStore()
        report = FormSync(store, Path("proto")).sync("demo-tenant")
    """

    def __init__(
        self,
        store: FormStore,
        proto_dir: Path,
        config: ProtoformConfig | None = None,
    ):
        self.store = store
        self.proto_dir = proto_dir
        self.config = config or ProtoformConfig()

    def sync(self, tenant_id: str | None = None) -> SyncReport:
        tenant = tenant_id or self.config.sync.tenant_id
        report = SyncReport()
        synced_by_app: dict[str, list[str]] = {}

        for path in discover_proto_files(self.proto_dir):
            app_id = app_id_for(path)
            try:
                schema = compile_idl(
                    path.read_text(encoding="utf-8"),
                    app_id,
                    self.config.compiler,
                    status=FormStatus.PUBLISHED,
                    tenant_id=tenant,
                )
                if schema is None:
                    report.skipped.append(app_id)
                    continue
                self.store.upsert(
                    tenant,
                    app_id,
                    schema.form_name,
                    schema.version,
                    FormStatus.PUBLISHED,
                    schema.to_dict(),
                )
            except Exception as e:
                logger.error("Failed to sync %s: %s", path.name, e)
                report.failed[path.name] = str(e)
                continue

            synced_by_app.setdefault(app_id, []).append(schema.form_name)
            report.synced.append(SyncedForm(app_id, schema.form_name, schema.version))
            logger.info("Synced proto message: %s/%s@%s", app_id, schema.form_name, schema.version)

        for app_id, form_names in synced_by_app.items():
            report.removed += self.store.keep_only(tenant, app_id, form_names)

        return report
