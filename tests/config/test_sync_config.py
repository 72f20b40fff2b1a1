from __future__ import annotations

from datetime import timedelta

import pytest

from staffsync.config import ConfigurationError, get_sync_config
from staffsync.domain.lookups import LabelPolicy
from staffsync.domain.records import Dimension


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "STAFFSYNC_DATE_OFFSET_HOURS",
        "STAFFSYNC_UNIT_LABEL_POLICY",
        "STAFFSYNC_DEPARTMENT_LABEL_POLICY",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = get_sync_config()

    assert config.date_offset == timedelta(hours=3)
    assert config.label_policies == {}


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAFFSYNC_DATE_OFFSET_HOURS", "0")
    monkeypatch.setenv("STAFFSYNC_UNIT_LABEL_POLICY", "FOLD")

    config = get_sync_config()

    assert config.date_offset == timedelta(0)
    assert config.label_policies == {Dimension.UNIT: LabelPolicy.FOLD}


def test_unknown_label_policy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STAFFSYNC_DEPARTMENT_LABEL_POLICY", "fuzzy")

    with pytest.raises(ConfigurationError, match="exact, casefold, fold"):
        get_sync_config()
