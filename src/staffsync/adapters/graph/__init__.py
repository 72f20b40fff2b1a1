"""Public interface for the Microsoft Graph adapter."""

from __future__ import annotations

from .auth import ClientCredentialsTokenProvider
from .client import GraphClient, GraphSession
from .directory import GraphDirectorySource
from .errors import GraphAPIError, GraphAuthError
from .store import SharePointRecordStore
from .translator import (
    DEFAULT_COLUMNS,
    ColumnMap,
    parse_identity,
    parse_lookup_entry,
    parse_target_record,
    serialize_fields,
)

__all__ = [
    "DEFAULT_COLUMNS",
    "ClientCredentialsTokenProvider",
    "ColumnMap",
    "GraphAPIError",
    "GraphAuthError",
    "GraphClient",
    "GraphDirectorySource",
    "GraphSession",
    "SharePointRecordStore",
    "parse_identity",
    "parse_lookup_entry",
    "parse_target_record",
    "serialize_fields",
]
