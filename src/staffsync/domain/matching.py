"""Matching of directory identities against target store records."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .records import IdentityRecord, ManagerReference, TargetRecord

log = getLogger(__name__)


class MatchRule(StrEnum):
    SOURCE_ID = "source_id"
    EMAIL = "email"


@dataclass(frozen=True, slots=True)
class MatchKey:
    """Identifiers a target record may be found by, in priority order."""

    source_id: str | None
    email: str | None
    label: str

    @classmethod
    def for_identity(cls, identity: IdentityRecord) -> MatchKey:
        return cls(source_id=identity.source_id, email=identity.email, label=identity.describe())

    @classmethod
    def for_manager(cls, manager: ManagerReference) -> MatchKey:
        return cls(
            source_id=manager.source_id, email=manager.email, label=f"manager {manager.name}"
        )


@dataclass(frozen=True, slots=True)
class MatchResult:
    target: TargetRecord | None = None
    rule: MatchRule | None = None
    ambiguous: bool = False
    conflicting: TargetRecord | None = None

    @property
    def matched(self) -> bool:
        return self.target is not None


class EntityMatcher:
    """Index target records by stable id and email for priority-ordered matching.

    Rules are tried in order and the first rule producing exactly one record wins.
    A rule with several hits is ambiguous and falls through to the next rule; when
    no rule wins the result is flagged ``ambiguous`` if any rule had several hits,
    so callers can refuse to create yet another duplicate.
    """

    def __init__(self, targets: Iterable[TargetRecord]) -> None:
        self._by_rule: dict[MatchRule, dict[str, list[TargetRecord]]] = {
            rule: defaultdict(list) for rule in MatchRule
        }
        self._count = 0
        for target in targets:
            self._count += 1
            if target.source_id:
                self._by_rule[MatchRule.SOURCE_ID][target.source_id].append(target)
            if target.email:
                self._by_rule[MatchRule.EMAIL][target.email].append(target)

    def __len__(self) -> int:
        return self._count

    def _hits(self, rule: MatchRule, key: MatchKey) -> list[TargetRecord]:
        value = key.source_id if rule is MatchRule.SOURCE_ID else key.email
        if not value:
            return []
        return self._by_rule[rule].get(value, [])

    def match_key(self, key: MatchKey) -> MatchResult:
        ambiguous = False
        for rule in MatchRule:
            hits = self._hits(rule, key)
            if len(hits) == 1:
                return MatchResult(
                    target=hits[0],
                    rule=rule,
                    conflicting=self._conflict(rule, key, hits[0]),
                )
            if len(hits) > 1:
                ambiguous = True
                log.warning(
                    "%s matches %s target records by %s: %s",
                    key.label,
                    len(hits),
                    rule,
                    ", ".join(hit.store_id for hit in hits),
                )
        return MatchResult(ambiguous=ambiguous)

    def _conflict(
        self,
        rule: MatchRule,
        key: MatchKey,
        winner: TargetRecord,
    ) -> TargetRecord | None:
        if rule is not MatchRule.SOURCE_ID:
            return None
        by_email = self._hits(MatchRule.EMAIL, key)
        others = [hit for hit in by_email if hit.store_id != winner.store_id]
        if not others:
            return None
        log.warning(
            "%s: stable id matches record %s but email matches record %s; using %s",
            key.label,
            winner.store_id,
            others[0].store_id,
            winner.store_id,
        )
        return others[0]

    def match(self, identity: IdentityRecord) -> MatchResult:
        return self.match_key(MatchKey.for_identity(identity))

    def match_manager(self, manager: ManagerReference) -> MatchResult:
        return self.match_key(MatchKey.for_manager(manager))


def match_identity(
    identity: IdentityRecord,
    targets: Iterable[TargetRecord],
) -> TargetRecord | None:
    """Return the target record matching ``identity`` or ``None``."""

    return EntityMatcher(targets).match(identity).target


__all__ = ["EntityMatcher", "MatchKey", "MatchResult", "MatchRule", "match_identity"]
