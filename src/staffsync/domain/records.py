"""Record shapes exchanged between the directory, the engine and the record store."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

type StoreId = str
type FieldValue = str | bool | datetime | None


class Dimension(StrEnum):
    """Category dimensions backed by a lookup collection in the record store."""

    UNIT = "unit"
    DEPARTMENT = "department"


class FieldName(StrEnum):
    """Semantic fields managed on a target record."""

    NAME = "name"
    EMAIL = "email"
    ACTIVE = "active"
    UNIT = "unit"
    DEPARTMENT = "department"
    JOB_TITLE = "job_title"
    BIRTH_DATE = "birth_date"
    HIRE_DATE = "hire_date"
    SOURCE_ID = "source_id"
    MANAGER = "manager"

    @classmethod
    def for_dimension(cls, dimension: Dimension) -> FieldName:
        return cls(dimension.value)


class DateEncoding(StrEnum):
    """Encodings the directory uses for date attributes."""

    COMPACT_DMY = "compact_dmy"
    LDAP = "ldap"
    ISO = "iso"


@dataclass(frozen=True, slots=True)
class EncodedDate:
    """A raw date value together with the encoding it was supplied in."""

    value: str
    encoding: DateEncoding


@dataclass(frozen=True, slots=True)
class ManagerReference:
    """Pointer from an identity to its manager's identity."""

    name: str
    email: str | None = None
    source_id: str | None = None

    @property
    def is_resolvable(self) -> bool:
        return bool(self.source_id or self.email)


@dataclass(frozen=True, slots=True)
class IdentityRecord:
    """Immutable snapshot of one entity as published by the source directory.

    Date attributes are kept encoded; ``hire_date_sources`` and ``birth_date_sources``
    are ordered by preference and only the first present value is ever used.
    """

    source_id: str
    name: str
    email: str
    active: bool
    categories: Mapping[Dimension, str | None] = field(default_factory=dict)
    job_title: str | None = None
    manager: ManagerReference | None = None
    hire_date_sources: tuple[EncodedDate, ...] = ()
    birth_date_sources: tuple[EncodedDate, ...] = ()

    def describe(self) -> str:
        return f"{self.name} <{self.email}> [{self.source_id}]"


@dataclass(frozen=True, slots=True)
class TargetFields:
    """Store-shaped field values, used both for candidates and for stored records."""

    name: str | None = None
    email: str | None = None
    active: bool | None = None
    unit: StoreId | None = None
    department: StoreId | None = None
    job_title: str | None = None
    birth_date: datetime | None = None
    hire_date: datetime | None = None
    source_id: str | None = None
    manager: StoreId | None = None

    def get(self, name: FieldName) -> FieldValue:
        return getattr(self, name.value)

    def as_mapping(
        self, *, exclude: frozenset[FieldName] = frozenset()
    ) -> dict[FieldName, FieldValue]:
        return {
            FieldName(item.name): getattr(self, item.name)
            for item in fields(self)
            if FieldName(item.name) not in exclude
        }

    def with_changes(self, changes: Mapping[FieldName, FieldValue]) -> TargetFields:
        return replace(self, **{name.value: value for name, value in changes.items()})


@dataclass(frozen=True, slots=True)
class TargetRecord:
    """A record currently held by the target store."""

    store_id: StoreId
    fields: TargetFields

    @property
    def source_id(self) -> str | None:
        return self.fields.source_id

    @property
    def email(self) -> str | None:
        return self.fields.email


@dataclass(frozen=True, slots=True)
class LookupEntry:
    """Existing category entity in one dimension's lookup collection."""

    dimension: Dimension
    label: str
    store_id: StoreId


__all__ = [
    "DateEncoding",
    "Dimension",
    "EncodedDate",
    "FieldName",
    "FieldValue",
    "IdentityRecord",
    "LookupEntry",
    "ManagerReference",
    "StoreId",
    "TargetFields",
    "TargetRecord",
]
