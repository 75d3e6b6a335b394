"""
Form storage.

``FormStore`` is the interface resync and the write path need from whatever
persists compiled forms. Exactly one row exists per (tenant, app, form name):
an upsert replaces that row's version, status and schema.

``InMemoryFormStore`` implements the interface with a dict guarded by a
lock, for the CLI and for tests.
"""

from __future__ import annotations

import itertools
import logging
import threading
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from protoform.core.errors import FormNotFoundError
from protoform.core.ir import FormStatus

logger = logging.getLogger(__name__)


class StoredForm(BaseModel):
    """One persisted form row."""

    tenant_id: str = Field(alias="tenantId")
    app_id: str = Field(alias="appId")
    form_name: str = Field(alias="formName")
    version: str
    status: FormStatus = FormStatus.PUBLISHED
    form_schema: dict[str, Any] = Field(default_factory=dict, alias="schema")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class FormStore(Protocol):
    """Methods resync and the write path expect from form storage."""

    def upsert(
        self,
        tenant_id: str,
        app_id: str,
        form_name: str,
        version: str,
        status: FormStatus,
        schema: dict[str, Any],
    ) -> StoredForm: ...

    def keep_only(self, tenant_id: str, app_id: str, form_names: list[str]) -> int: ...

    def list_by_app(self, tenant_id: str, app_id: str) -> list[StoredForm]: ...

    def get_current(
        self,
        tenant_id: str,
        app_id: str,
        form_name: str | None = None,
    ) -> StoredForm: ...


class InMemoryFormStore:
    """Thread-safe in-memory ``FormStore``."""

    def __init__(self) -> None:
        self._rows: dict[tuple[str, str, str], tuple[int, StoredForm]] = {}
        self._lock = threading.Lock()
        self._sequence = itertools.count()

    def upsert(
        self,
        tenant_id: str,
        app_id: str,
        form_name: str,
        version: str,
        status: FormStatus,
        schema: dict[str, Any],
    ) -> StoredForm:
        key = (tenant_id, app_id, form_name)
        now = datetime.now(UTC)
        with self._lock:
            existing = self._rows.get(key)
            row = StoredForm(
                tenant_id=tenant_id,
                app_id=app_id,
                form_name=form_name,
                version=version,
                status=FormStatus(status),
                form_schema=schema,
                created_at=existing[1].created_at if existing else now,
                updated_at=now,
            )
            self._rows[key] = (next(self._sequence), row)
        return row

    def keep_only(self, tenant_id: str, app_id: str, form_names: list[str]) -> int:
        allowed = set(form_names)
        with self._lock:
            stale = [
                key
                for key in self._rows
                if key[0] == tenant_id and key[1] == app_id and key[2] not in allowed
            ]
            for key in stale:
                del self._rows[key]
        if stale:
            logger.info(
                "Removed %d stale form(s) for %s/%s: %s",
                len(stale),
                tenant_id,
                app_id,
                ", ".join(key[2] for key in stale),
            )
        return len(stale)

    def list_by_app(self, tenant_id: str, app_id: str) -> list[StoredForm]:
        """Forms of an app, most recently updated first."""
        with self._lock:
            entries = [
                entry
                for key, entry in self._rows.items()
                if key[0] == tenant_id and key[1] == app_id
            ]
        entries.sort(key=lambda entry: entry[0], reverse=True)
        return [row for _, row in entries]

    def get_current(
        self,
        tenant_id: str,
        app_id: str,
        form_name: str | None = None,
    ) -> StoredForm:
        for row in self.list_by_app(tenant_id, app_id):
            if form_name is None or row.form_name == form_name:
                return row
        raise FormNotFoundError(f"Form not found in app {app_id}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
