"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import DirectorySource
from .persistence import RecordStore

__all__ = ["DirectorySource", "RecordStore"]
