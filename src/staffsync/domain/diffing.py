"""Field-level comparison between a candidate and a stored target record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .records import FieldName

if TYPE_CHECKING:
    from .records import FieldValue, TargetFields

type ChangeSet = dict[FieldName, FieldValue]

# the manager link is written by the second pass only
DIFFED_FIELDS: Final[tuple[FieldName, ...]] = tuple(
    name for name in FieldName if name is not FieldName.MANAGER
)


def diff_fields(
    candidate: TargetFields,
    existing: TargetFields,
    *,
    names: tuple[FieldName, ...] = DIFFED_FIELDS,
) -> ChangeSet:
    """Return the fields of ``candidate`` whose value differs from ``existing``.

    Values are compared with plain equality, so dates must be equal instants and
    ``None`` only counts as a change when the stored value is set.
    """

    changes: ChangeSet = {}
    for name in names:
        new_value = candidate.get(name)
        if new_value != existing.get(name):
            changes[name] = new_value
    return changes


__all__ = ["DIFFED_FIELDS", "ChangeSet", "diff_fields"]
