"""
Storage side of protoform: form storage, resync of IDL files into it, the
app catalog and manifest, and write-path guards for records.
"""

from protoform.sync.catalog import AppDefinition, build_manifest, list_apps
from protoform.sync.records import (
    check_required,
    check_unique_key,
    find_unique_key_field,
    read_unique_value,
    validate_for_write,
)
from protoform.sync.resync import FormSync, SyncedForm, SyncReport
from protoform.sync.store import FormStore, InMemoryFormStore, StoredForm

__all__ = [
    "AppDefinition",
    "FormStore",
    "FormSync",
    "InMemoryFormStore",
    "StoredForm",
    "SyncReport",
    "SyncedForm",
    "build_manifest",
    "check_required",
    "check_unique_key",
    "find_unique_key_field",
    "list_apps",
    "read_unique_value",
    "validate_for_write",
]
