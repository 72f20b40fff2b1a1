from __future__ import annotations

from datetime import timedelta

from staffsync.app import build_engine, check_store, sync_employees
from staffsync.config import SyncConfig
from staffsync.domain.lookups import LabelPolicy
from staffsync.domain.records import Dimension
from tests.support.fakes import InMemoryRecordStore, StaticDirectory, make_identity


def test_sync_employees_runs_with_injected_adapters() -> None:
    store = InMemoryRecordStore()
    directory = StaticDirectory([make_identity("abc", birth_date="21071990")])

    summary = sync_employees(
        source=directory,
        store=store,
        sync_config=SyncConfig(date_offset=timedelta(0)),
    )

    assert summary.counters.created == 1
    _, fields = store.by_source_id("abc")
    assert fields.birth_date is not None
    assert fields.birth_date.hour == 0


def test_build_engine_applies_label_policies() -> None:
    engine = build_engine(
        source=StaticDirectory(),
        store=InMemoryRecordStore(),
        sync_config=SyncConfig(label_policies={Dimension.UNIT: LabelPolicy.CASEFOLD}),
    )

    assert engine.label_policies == {Dimension.UNIT: LabelPolicy.CASEFOLD}
    assert engine.normalize_dates.offset == timedelta(hours=3)


def test_check_store_verifies_injected_store() -> None:
    check_store(store=InMemoryRecordStore())
