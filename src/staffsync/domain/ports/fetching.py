"""Ports for reading identities from the source directory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from staffsync.domain.records import IdentityRecord


@runtime_checkable
class DirectorySource(Protocol):
    """Source directory publishing the authoritative identity records."""

    def list_all(self) -> Sequence[IdentityRecord]:
        """Return every identity, with pagination fully drained."""
        ...


__all__ = ["DirectorySource"]
