"""Resolution of free-text category labels to lookup entities in the record store."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import RecordStoreError
from .records import Dimension, StoreId

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .ports import RecordStore
    from .records import LookupEntry

log = getLogger(__name__)


class LabelPolicy(StrEnum):
    """How labels of one dimension are compared before hitting the cache.

    ``EXACT`` compares trimmed labels verbatim, so ``"Financeiro"`` and
    ``"financeiro"`` are two entries. ``CASEFOLD`` ignores case and ``FOLD``
    additionally ignores diacritics.
    """

    EXACT = "exact"
    CASEFOLD = "casefold"
    FOLD = "fold"

    def key(self, label: str) -> str:
        if self is LabelPolicy.EXACT:
            return label
        if self is LabelPolicy.CASEFOLD:
            return label.casefold()
        decomposed = unicodedata.normalize("NFKD", label)
        stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
        return stripped.casefold()


@dataclass(slots=True)
class LookupCache:
    """Label to store-id mapping for one reconciliation run."""

    policies: Mapping[Dimension, LabelPolicy] = field(default_factory=dict)
    _entries: dict[Dimension, dict[str, StoreId]] = field(default_factory=dict)

    def policy(self, dimension: Dimension) -> LabelPolicy:
        return self.policies.get(dimension, LabelPolicy.EXACT)

    def get(self, dimension: Dimension, label: str) -> StoreId | None:
        return self._entries.get(dimension, {}).get(self.policy(dimension).key(label))

    def put(self, dimension: Dimension, label: str, store_id: StoreId) -> None:
        self._entries.setdefault(dimension, {})[self.policy(dimension).key(label)] = store_id

    def load(self, entries: Iterable[LookupEntry]) -> int:
        """Seed the cache with existing entries; the first entry wins on key collisions."""

        loaded = 0
        for entry in entries:
            label = entry.label.strip()
            if not label:
                continue
            if self.get(entry.dimension, label) is not None:
                log.debug("Duplicate %s lookup entry for %r ignored", entry.dimension, label)
                continue
            self.put(entry.dimension, label, entry.store_id)
            loaded += 1
        return loaded

    def size(self, dimension: Dimension) -> int:
        return len(self._entries.get(dimension, {}))


@dataclass(slots=True)
class LookupResolver:
    """Resolve category labels, creating missing lookup entities on first use."""

    store: RecordStore
    cache: LookupCache = field(default_factory=LookupCache)
    created: int = 0
    failed: int = 0

    def preload(self, dimensions: Iterable[Dimension] = tuple(Dimension)) -> None:
        """Fill the cache from each dimension's existing lookup collection.

        Store errors propagate: the caller treats an incomplete lookup snapshot as
        a failure to load the target.
        """

        for dimension in dimensions:
            loaded = self.cache.load(self.store.list_lookup_entries(dimension))
            log.info("Loaded %s existing %s lookup entries", loaded, dimension)

    def resolve(self, dimension: Dimension, label: str | None) -> StoreId | None:
        if label is None:
            return None
        trimmed = label.strip()
        if not trimmed:
            return None

        cached = self.cache.get(dimension, trimmed)
        if cached is not None:
            return cached

        try:
            store_id = self.store.create_lookup_entry(dimension, trimmed)
        except RecordStoreError as exc:
            self.failed += 1
            log.warning("Could not create %s lookup entry %r: %s", dimension, trimmed, exc)
            return None

        self.created += 1
        self.cache.put(dimension, trimmed, store_id)
        log.info(f"Created {dimension} lookup entry {trimmed!r} -> {store_id}")
        return store_id


__all__ = ["LabelPolicy", "LookupCache", "LookupResolver"]
