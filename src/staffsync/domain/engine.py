"""Orchestrator for a directory-to-store reconciliation run.

A run walks through a fixed sequence of states::

    idle -> loading_source -> loading_target -> phase1_sync
         -> phase2_manager_link -> summarized -> idle

Only the loading steps are fatal. Everything inside the two phases is isolated
per entity: a failure is logged, counted and the run moves on. If the snapshot
reload before the second pass fails, no links are written and the run still
ends with a summary.

Manager links are written in a second pass because a manager may be listed after
their reports, or may only come into existence as a target record during the
first pass. The second pass reloads the target snapshot so both ends of every
link exist before it is written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .dates import DateNormalizer
from .diffing import diff_fields
from .errors import RecordStoreError, SourceLoadError, TargetLoadError
from .lookups import LookupCache, LookupResolver
from .mapping import build_candidate
from .matching import EntityMatcher
from .records import FieldName

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from .lookups import LabelPolicy
    from .ports import DirectorySource, RecordStore
    from .records import Dimension, IdentityRecord

log = getLogger(__name__)


class RunState(StrEnum):
    IDLE = "idle"
    LOADING_SOURCE = "loading_source"
    LOADING_TARGET = "loading_target"
    PHASE1_SYNC = "phase1_sync"
    PHASE2_MANAGER_LINK = "phase2_manager_link"
    SUMMARIZED = "summarized"


@dataclass(slots=True)
class ReconciliationCounters:
    """Outcome counters for one run; never persisted."""

    source_total: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    ambiguous: int = 0
    manager_links_updated: int = 0
    manager_links_unresolved: int = 0
    manager_links_failed: int = 0


@dataclass(frozen=True, slots=True)
class ReconciliationSummary:
    counters: ReconciliationCounters
    final_total: int | None
    lookups_created: int = 0
    lookups_failed: int = 0

    def lines(self) -> list[str]:
        counters = self.counters
        total = "unknown" if self.final_total is None else str(self.final_total)
        return [
            f"identities read from directory: {counters.source_total}",
            f"records created: {counters.created}",
            f"records updated: {counters.updated}",
            f"records unchanged: {counters.unchanged}",
            f"identities skipped: {counters.skipped}",
            f"identities with ambiguous matches: {counters.ambiguous}",
            f"manager links updated: {counters.manager_links_updated}",
            f"manager links unresolved: {counters.manager_links_unresolved}",
            f"manager links failed: {counters.manager_links_failed}",
            f"lookup entries created: {self.lookups_created} (failed: {self.lookups_failed})",
            f"records in store after sync: {total}",
        ]


@dataclass(slots=True)
class ReconciliationEngine:
    """Bring the record store in line with the directory, one entity at a time."""

    source: DirectorySource
    store: RecordStore
    normalize_dates: DateNormalizer = field(default_factory=DateNormalizer)
    label_policies: Mapping[Dimension, LabelPolicy] = field(default_factory=dict)
    state: RunState = RunState.IDLE

    def run(self) -> ReconciliationSummary:
        """Execute one full run and return its summary.

        Raises ``SourceLoadError`` or ``TargetLoadError`` when a loading step fails;
        no summary is produced in that case.
        """

        counters = ReconciliationCounters()
        # the cache lives exactly as long as this run
        resolver = LookupResolver(store=self.store, cache=LookupCache(policies=self.label_policies))
        try:
            identities = self._load_source()
            counters.source_total = len(identities)
            matcher = self._load_target(resolver)

            self._enter(RunState.PHASE1_SYNC)
            for identity in identities:
                self._sync_identity(identity, matcher=matcher, resolver=resolver, counters=counters)

            self._enter(RunState.PHASE2_MANAGER_LINK)
            pending = [identity for identity in identities if identity.manager is not None]
            reloaded = self._reload_target()
            if reloaded is None:
                counters.manager_links_failed += len(pending)
            else:
                for identity in pending:
                    self._link_manager(identity, matcher=reloaded, counters=counters)

            self._enter(RunState.SUMMARIZED)
            summary = ReconciliationSummary(
                counters=counters,
                final_total=self._count_records(),
                lookups_created=resolver.created,
                lookups_failed=resolver.failed,
            )
            for line in summary.lines():
                log.info("Summary: %s", line)
            return summary
        finally:
            self._enter(RunState.IDLE)

    def _enter(self, state: RunState) -> None:
        log.debug("Reconciliation state %s -> %s", self.state, state)
        self.state = state

    def _load_source(self) -> Sequence[IdentityRecord]:
        self._enter(RunState.LOADING_SOURCE)
        try:
            identities = list(self.source.list_all())
        except Exception as exc:
            log.exception("Could not load identities from the directory")
            raise SourceLoadError(str(exc)) from exc
        log.info("Loaded %s identities from the directory", len(identities))
        return identities

    def _load_target(self, resolver: LookupResolver) -> EntityMatcher:
        self._enter(RunState.LOADING_TARGET)
        try:
            self.store.verify()
            matcher = EntityMatcher(self.store.list_records())
            resolver.preload()
        except Exception as exc:
            log.exception("Could not load the target store")
            raise TargetLoadError(str(exc)) from exc
        log.info("Loaded %s records from the target store", len(matcher))
        return matcher

    def _reload_target(self) -> EntityMatcher | None:
        try:
            matcher = EntityMatcher(self.store.list_records())
        except Exception:  # noqa: BLE001
            log.exception("Could not reload the target store; manager links not written")
            return None
        log.info("Reloaded %s records for manager links", len(matcher))
        return matcher

    def _sync_identity(
        self,
        identity: IdentityRecord,
        *,
        matcher: EntityMatcher,
        resolver: LookupResolver,
        counters: ReconciliationCounters,
    ) -> None:
        try:
            candidate = build_candidate(
                identity, resolver=resolver, normalize_dates=self.normalize_dates
            )
            result = matcher.match(identity)
            if result.target is None:
                if result.ambiguous:
                    counters.ambiguous += 1
                    log.warning(
                        "Not creating %s: existing records are ambiguous", identity.describe()
                    )
                    return
                store_id = self.store.create_record(
                    candidate.as_mapping(exclude=frozenset({FieldName.MANAGER}))
                )
                counters.created += 1
                log.info("Created record %s for %s", store_id, identity.describe())
                return

            changes = diff_fields(candidate, result.target.fields)
            if not changes:
                counters.unchanged += 1
                log.debug("No changes for %s", identity.describe())
                return
            self.store.update_record(result.target.store_id, changes)
            counters.updated += 1
            log.info(
                "Updated record %s for %s: %s",
                result.target.store_id,
                identity.describe(),
                ", ".join(sorted(changes)),
            )
        except Exception:  # noqa: BLE001
            counters.skipped += 1
            log.warning("Skipping %s after a processing error", identity.describe(), exc_info=True)

    def _link_manager(
        self,
        identity: IdentityRecord,
        *,
        matcher: EntityMatcher,
        counters: ReconciliationCounters,
    ) -> None:
        manager = identity.manager
        if manager is None:
            return
        if not manager.is_resolvable:
            counters.manager_links_unresolved += 1
            log.warning(
                "Manager %r of %s has no stable id or email", manager.name, identity.describe()
            )
            return

        employee = matcher.match(identity).target
        if employee is None:
            counters.manager_links_unresolved += 1
            log.warning("No target record for %s; manager link not written", identity.describe())
            return
        boss = matcher.match_manager(manager).target
        if boss is None:
            counters.manager_links_unresolved += 1
            log.warning(
                "Manager %r of %s not found in the target store", manager.name, identity.describe()
            )
            return
        if employee.fields.manager == boss.store_id:
            return

        try:
            self.store.update_record(employee.store_id, {FieldName.MANAGER: boss.store_id})
        except Exception:  # noqa: BLE001
            counters.manager_links_failed += 1
            log.warning(
                "Could not link %s to manager %r", identity.describe(), manager.name, exc_info=True
            )
            return
        counters.manager_links_updated += 1
        log.info("Linked %s to manager record %s", identity.describe(), boss.store_id)

    def _count_records(self) -> int | None:
        try:
            return len(self.store.list_records())
        except RecordStoreError:
            log.warning("Could not count records after sync", exc_info=True)
            return None


__all__ = [
    "ReconciliationCounters",
    "ReconciliationEngine",
    "ReconciliationSummary",
    "RunState",
]
