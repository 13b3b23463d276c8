from __future__ import annotations

from .client import DEFAULT_HEADERS, DEFAULT_OPTIONS, Client
from .documents import from_jsonable, key_comparator, to_jsonable, uid_key
from .errors import (
    ConfigurationError,
    DocStoreError,
    DoesNotExist,
    IndexNotMapped,
    PatchError,
    ProtocolError,
    RemoteError,
)
from .index import Index, IndexMap, as_index, field_index
from .interfaces import DocumentStore
from .memory_store import InMemoryDocumentStore
from .patch import Delete, Merge, Operation, Patch, Replace
from .rest_store import RestDocumentStore, check_status
from .settings import Settings, get_settings

__all__ = [
    "Client",
    "DEFAULT_HEADERS",
    "DEFAULT_OPTIONS",
    "DocumentStore",
    "InMemoryDocumentStore",
    "RestDocumentStore",
    "check_status",
    "Index",
    "IndexMap",
    "field_index",
    "as_index",
    "Patch",
    "Operation",
    "Replace",
    "Merge",
    "Delete",
    "DocStoreError",
    "DoesNotExist",
    "ConfigurationError",
    "IndexNotMapped",
    "ProtocolError",
    "RemoteError",
    "PatchError",
    "uid_key",
    "key_comparator",
    "to_jsonable",
    "from_jsonable",
    "Settings",
    "get_settings",
]
