"""Ports for reading and writing the target record store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from staffsync.domain.records import (
        Dimension,
        FieldName,
        FieldValue,
        LookupEntry,
        StoreId,
        TargetRecord,
    )


@runtime_checkable
class RecordStore(Protocol):
    """Persistence contract for the employee collection and its lookup collections.

    Implementations raise ``RecordStoreError`` for failed reads and writes. A
    ``Dimension`` argument selects the lookup collection backing that category.
    """

    def verify(self) -> None: ...

    def list_records(self) -> Sequence[TargetRecord]: ...

    def create_record(self, fields: Mapping[FieldName, FieldValue]) -> StoreId: ...

    def update_record(self, store_id: StoreId, changes: Mapping[FieldName, FieldValue]) -> None: ...

    def list_lookup_entries(self, dimension: Dimension) -> Sequence[LookupEntry]: ...

    def create_lookup_entry(self, dimension: Dimension, label: str) -> StoreId: ...


__all__ = ["RecordStore"]
