"""Mapping from directory identities to store-shaped candidate fields."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .records import Dimension, TargetFields

if TYPE_CHECKING:
    from .dates import DateNormalizer
    from .lookups import LookupResolver
    from .records import IdentityRecord


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def build_candidate(
    identity: IdentityRecord,
    *,
    resolver: LookupResolver,
    normalize_dates: DateNormalizer,
) -> TargetFields:
    """Build the fields ``identity`` should have in the store, minus the manager link.

    Category labels are resolved (and created when missing) through ``resolver``;
    dates go through ``normalize_dates`` using the first present source of each.
    """

    return TargetFields(
        name=_blank_to_none(identity.name),
        email=_blank_to_none(identity.email),
        active=identity.active,
        unit=resolver.resolve(Dimension.UNIT, identity.categories.get(Dimension.UNIT)),
        department=resolver.resolve(
            Dimension.DEPARTMENT, identity.categories.get(Dimension.DEPARTMENT)
        ),
        job_title=_blank_to_none(identity.job_title),
        birth_date=normalize_dates.first_present(identity.birth_date_sources),
        hire_date=normalize_dates.first_present(identity.hire_date_sources),
        source_id=identity.source_id,
    )


__all__ = ["build_candidate"]
