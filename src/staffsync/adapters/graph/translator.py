"""Translate Graph payloads into domain records and domain changes into list fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from staffsync.domain.records import (
    DateEncoding,
    Dimension,
    EncodedDate,
    FieldName,
    IdentityRecord,
    LookupEntry,
    ManagerReference,
    TargetFields,
    TargetRecord,
)

from .schema import ListItemPayload, UserPayload

if TYPE_CHECKING:
    from collections.abc import Mapping

    from staffsync.domain.records import FieldValue

log = getLogger(__name__)

DEFAULT_COLUMNS: Final[Mapping[FieldName, str]] = {
    FieldName.NAME: "Title",
    FieldName.EMAIL: "ExternalEmail",
    FieldName.ACTIVE: "Ativo",
    FieldName.UNIT: "UnidadeLookupId",
    FieldName.DEPARTMENT: "DepartamentoLookupId",
    FieldName.JOB_TITLE: "Cargo",
    FieldName.BIRTH_DATE: "DataAniversario",
    FieldName.HIRE_DATE: "DataAdmissao",
    FieldName.SOURCE_ID: "AzureADId",
    FieldName.MANAGER: "GerenciaLookupId",
}

REFERENCE_FIELDS: Final = frozenset({FieldName.UNIT, FieldName.DEPARTMENT, FieldName.MANAGER})
DATE_FIELDS: Final = frozenset({FieldName.BIRTH_DATE, FieldName.HIRE_DATE})


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Internal column names of the employee list and of the lookup lists."""

    columns: Mapping[FieldName, str] = field(default_factory=lambda: dict(DEFAULT_COLUMNS))
    lookup_label_column: str = "Title"

    def column(self, name: FieldName) -> str:
        return self.columns[name]

    def selected(self) -> tuple[str, ...]:
        return tuple(self.columns[name] for name in FieldName)


def _ensure_user_payload(payload: UserPayload | Mapping[str, object]) -> UserPayload:
    if isinstance(payload, UserPayload):
        return payload
    return UserPayload.model_validate(payload)


def parse_identity(payload: UserPayload | Mapping[str, object]) -> IdentityRecord:
    """Build an identity from a ``/users`` entry expanded with its manager."""

    user = _ensure_user_payload(payload)

    manager: ManagerReference | None = None
    if user.manager is not None and (user.manager.display_name or user.manager.id):
        manager = ManagerReference(
            name=user.manager.display_name or user.manager.id or "",
            email=user.manager.user_principal_name,
            source_id=user.manager.id,
        )

    extensions = user.on_premises_extension_attributes
    hire_dates: list[EncodedDate] = []
    birth_dates: list[EncodedDate] = []
    if user.employee_hire_date:
        hire_dates.append(EncodedDate(user.employee_hire_date, DateEncoding.ISO))
    if extensions is not None and extensions.extension_attribute15:
        hire_dates.append(EncodedDate(extensions.extension_attribute15, DateEncoding.LDAP))
    if extensions is not None and extensions.extension_attribute2:
        birth_dates.append(EncodedDate(extensions.extension_attribute2, DateEncoding.COMPACT_DMY))

    return IdentityRecord(
        source_id=user.id,
        name=user.display_name or user.user_principal_name,
        email=user.user_principal_name,
        active=user.account_enabled,
        categories={
            Dimension.UNIT: user.office_location,
            Dimension.DEPARTMENT: user.department,
        },
        job_title=user.job_title,
        manager=manager,
        hire_date_sources=tuple(hire_dates),
        birth_date_sources=tuple(birth_dates),
    )


def _ensure_item(payload: ListItemPayload | Mapping[str, object]) -> ListItemPayload:
    if isinstance(payload, ListItemPayload):
        return payload
    return ListItemPayload.model_validate(payload)


def _text(value: object) -> str | None:
    if value is None:
        return None
    text = value.strip() if isinstance(value, str) else str(value)
    return text or None


def _reference(value: object) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    return _text(value)


def _flag(value: object) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def _instant(value: object, *, column: str, item_id: str) -> datetime | None:
    text = _text(value)
    if text is None:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        log.warning("Ignoring unreadable date %r in column %s of item %s", text, column, item_id)
        return None
    return parsed.astimezone(UTC) if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _read(item: ListItemPayload, name: FieldName, columns: ColumnMap) -> FieldValue:
    column = columns.column(name)
    raw = item.fields.get(column)
    if name in REFERENCE_FIELDS:
        return _reference(raw)
    if name in DATE_FIELDS:
        return _instant(raw, column=column, item_id=item.id)
    if name is FieldName.ACTIVE:
        return _flag(raw)
    return _text(raw)


def parse_target_record(
    payload: ListItemPayload | Mapping[str, object],
    columns: ColumnMap,
) -> TargetRecord:
    item = _ensure_item(payload)
    values = {name.value: _read(item, name, columns) for name in FieldName}
    return TargetRecord(store_id=item.id, fields=TargetFields(**values))


def parse_lookup_entry(
    payload: ListItemPayload | Mapping[str, object],
    dimension: Dimension,
    columns: ColumnMap,
) -> LookupEntry | None:
    item = _ensure_item(payload)
    label = _text(item.fields.get(columns.lookup_label_column))
    if label is None:
        return None
    return LookupEntry(dimension=dimension, label=label, store_id=item.id)


def _serialize(name: FieldName, value: FieldValue) -> object:
    if value is None:
        return None
    if name in DATE_FIELDS and isinstance(value, datetime):
        return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
    if name in REFERENCE_FIELDS and isinstance(value, str) and value.isdigit():
        return int(value)
    return value


def serialize_fields(
    values: Mapping[FieldName, FieldValue],
    columns: ColumnMap,
    *,
    omit_empty: bool = False,
) -> dict[str, object]:
    """Map domain field values onto list columns.

    ``omit_empty`` drops unset values, which is what a create wants; updates keep
    them so a stored value can be cleared.
    """

    return {
        columns.column(name): _serialize(name, value)
        for name, value in values.items()
        if not (omit_empty and value is None)
    }


__all__ = [
    "DEFAULT_COLUMNS",
    "ColumnMap",
    "parse_identity",
    "parse_lookup_entry",
    "parse_target_record",
    "serialize_fields",
]
