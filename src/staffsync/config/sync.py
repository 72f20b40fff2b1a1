"""Reconciliation defaults and their environment overrides."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from staffsync.domain.dates import DEFAULT_DATE_OFFSET
from staffsync.domain.lookups import LabelPolicy
from staffsync.domain.records import Dimension

from .env import env_float, optional_env_var
from .errors import ConfigurationError

LABEL_POLICY_ENV_VARS: dict[Dimension, str] = {
    Dimension.UNIT: "STAFFSYNC_UNIT_LABEL_POLICY",
    Dimension.DEPARTMENT: "STAFFSYNC_DEPARTMENT_LABEL_POLICY",
}


@dataclass(frozen=True, slots=True)
class SyncConfig:
    date_offset: timedelta = DEFAULT_DATE_OFFSET
    label_policies: dict[Dimension, LabelPolicy] = field(default_factory=dict)


def _label_policy(name: str) -> LabelPolicy | None:
    raw = optional_env_var(name)
    if raw is None:
        return None
    try:
        return LabelPolicy(raw.lower())
    except ValueError as exc:
        choices = ", ".join(policy.value for policy in LabelPolicy)
        raise ConfigurationError(f"{name} must be one of {choices}, got {raw!r}") from exc


def get_sync_config() -> SyncConfig:
    offset_hours = env_float(
        "STAFFSYNC_DATE_OFFSET_HOURS", DEFAULT_DATE_OFFSET.total_seconds() / 3600
    )
    policies: dict[Dimension, LabelPolicy] = {}
    for dimension, name in LABEL_POLICY_ENV_VARS.items():
        policy = _label_policy(name)
        if policy is not None:
            policies[dimension] = policy
    return SyncConfig(date_offset=timedelta(hours=offset_hours), label_policies=policies)
