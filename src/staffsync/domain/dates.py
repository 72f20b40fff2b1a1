"""Normalization of directory-supplied dates into canonical UTC instants.

Three encodings are understood:

* ``compact_dmy`` -- exactly eight digits, ``DDMMYYYY`` (``"21071990"``)
* ``ldap`` -- generalized time, ``YYYYMMDDHHMMSS.0Z``; only the date part is used
* ``iso`` -- ISO-8601, with or without an offset

Every parsed value is shifted by a fixed offset (three hours by default) before it
is emitted, so a date-only value lands on midnight in the UTC-3 zone the target
store is read in. Stored values already carry the shift.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .records import DateEncoding, EncodedDate

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)

DEFAULT_DATE_OFFSET: Final[timedelta] = timedelta(hours=3)
MIN_YEAR: Final[int] = 1900
MAX_YEAR: Final[int] = 2100

_COMPACT_PATTERN = re.compile(r"([0-9]{2})([0-9]{2})([0-9]{4})")
_LDAP_PATTERN = re.compile(r"([0-9]{4})([0-9]{2})([0-9]{2})[0-9]{6}")


def _calendar_date(day: int, month: int, year: int, raw: str) -> datetime | None:
    if not (1 <= day <= 31 and 1 <= month <= 12 and MIN_YEAR <= year <= MAX_YEAR):
        log.warning("Date out of range: %02d/%02d/%04d (from %r)", day, month, year, raw)
        return None
    try:
        return datetime(year, month, day)  # noqa: DTZ001
    except ValueError:
        log.warning("Not a calendar date: %02d/%02d/%04d (from %r)", day, month, year, raw)
        return None


def parse_compact_dmy(value: str) -> datetime | None:
    """Parse ``DDMMYYYY`` into a naive wall-clock datetime at midnight."""

    match = _COMPACT_PATTERN.fullmatch(value)
    if match is None:
        log.warning("Invalid compact date %r: expected 8 digits DDMMYYYY", value)
        return None
    day, month, year = (int(part) for part in match.groups())
    return _calendar_date(day, month, year, value)


def parse_ldap_timestamp(value: str) -> datetime | None:
    """Parse the date part of an LDAP generalized-time string."""

    match = _LDAP_PATTERN.match(value)
    if match is None:
        log.warning("Invalid LDAP timestamp %r: expected YYYYMMDDHHMMSS prefix", value)
        return None
    year, month, day = (int(part) for part in match.groups())
    return _calendar_date(day, month, year, value)


def parse_iso(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        log.warning("Invalid ISO-8601 date %r", value)
        return None


_PARSERS = {
    DateEncoding.COMPACT_DMY: parse_compact_dmy,
    DateEncoding.LDAP: parse_ldap_timestamp,
    DateEncoding.ISO: parse_iso,
}


@dataclass(frozen=True, slots=True)
class DateNormalizer:
    """Turn encoded directory dates into canonical, offset-shifted UTC instants."""

    offset: timedelta = DEFAULT_DATE_OFFSET

    def __call__(self, value: str | None, encoding: DateEncoding) -> datetime | None:
        if value is None or not value.strip():
            return None
        parsed = _PARSERS[encoding](value.strip())
        if parsed is None:
            return None
        return self.canonicalize(parsed)

    def canonicalize(self, parsed: datetime) -> datetime:
        # naive values are wall-clock times and are read as UTC before shifting
        instant = parsed.astimezone(UTC) if parsed.tzinfo else parsed.replace(tzinfo=UTC)
        # the store keeps whole seconds
        return instant.replace(microsecond=0) + self.offset

    def first_present(self, sources: Iterable[EncodedDate]) -> datetime | None:
        """Normalize the first non-blank source; later sources are never consulted.

        A preferred value that is present but unparseable yields ``None`` instead of
        falling back, so a broken structured field is not masked by a legacy one.
        """

        for source in sources:
            if source.value and source.value.strip():
                return self(source.value, source.encoding)
        return None


__all__ = [
    "DEFAULT_DATE_OFFSET",
    "DateNormalizer",
    "parse_compact_dmy",
    "parse_iso",
    "parse_ldap_timestamp",
]
