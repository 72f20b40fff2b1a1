"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from staffsync.adapters.graph import GraphClient, GraphDirectorySource, SharePointRecordStore
from staffsync.config import get_graph_config, get_sharepoint_config, get_sync_config
from staffsync.domain.dates import DateNormalizer
from staffsync.domain.engine import ReconciliationEngine

if TYPE_CHECKING:
    from collections.abc import Callable

    from staffsync.adapters.http_resilience import ResilientClient
    from staffsync.config import GraphConfig, ResilienceConfig, SharePointConfig, SyncConfig
    from staffsync.domain.engine import ReconciliationSummary
    from staffsync.domain.ports import DirectorySource, RecordStore

log = getLogger(__name__)


def build_graph_adapters(
    *,
    graph_config: GraphConfig | None = None,
    sharepoint_config: SharePointConfig | None = None,
    client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
) -> tuple[GraphDirectorySource, SharePointRecordStore]:
    """Build the directory source and record store sharing one Graph client."""

    graph = GraphClient(config=graph_config or get_graph_config(), client_factory=client_factory)
    store = SharePointRecordStore(
        graph=graph,
        config=sharepoint_config or get_sharepoint_config(),
    )
    return GraphDirectorySource(graph=graph), store


def build_engine(
    *,
    source: DirectorySource,
    store: RecordStore,
    sync_config: SyncConfig | None = None,
) -> ReconciliationEngine:
    settings = sync_config or get_sync_config()
    return ReconciliationEngine(
        source=source,
        store=store,
        normalize_dates=DateNormalizer(offset=settings.date_offset),
        label_policies=settings.label_policies,
    )


def sync_employees(
    *,
    source: DirectorySource | None = None,
    store: RecordStore | None = None,
    sync_config: SyncConfig | None = None,
) -> ReconciliationSummary:
    """Reconcile the employee list with the directory using the configured adapters."""

    if source is None or store is None:
        default_source, default_store = build_graph_adapters()
        source = source or default_source
        store = store or default_store

    engine = build_engine(source=source, store=store, sync_config=sync_config)
    log.info("Starting employee sync")
    summary = engine.run()
    counters = summary.counters
    log.info(
        f"Finished employee sync: created={counters.created}, updated={counters.updated}, "
        f"unchanged={counters.unchanged}, skipped={counters.skipped}, "
        f"manager_links={counters.manager_links_updated}, total={summary.final_total}"
    )
    return summary


def check_store(*, store: RecordStore | None = None) -> None:
    """Verify the configured site and lists are reachable."""

    effective_store = store or build_graph_adapters()[1]
    effective_store.verify()
    log.info("Record store configuration verified")
