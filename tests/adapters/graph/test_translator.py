from __future__ import annotations

from datetime import UTC, datetime

from staffsync.adapters.graph.translator import (
    ColumnMap,
    parse_identity,
    parse_lookup_entry,
    parse_target_record,
    serialize_fields,
)
from staffsync.domain.dates import DateNormalizer
from staffsync.domain.records import DateEncoding, Dimension, EncodedDate, FieldName


def _user_payload() -> dict[str, object]:
    return {
        "id": "aad-1",
        "displayName": "Ana Souza",
        "userPrincipalName": "ana@example.com",
        "accountEnabled": True,
        "officeLocation": "Recife",
        "department": " ",
        "jobTitle": "Analyst",
        "employeeHireDate": "2015-03-02T00:00:00Z",
        "onPremisesExtensionAttributes": {
            "extensionAttribute2": "21071990",
            "extensionAttribute15": "20150302000000.0Z",
        },
        "manager": {
            "@odata.type": "#microsoft.graph.user",
            "id": "aad-9",
            "displayName": "Boss",
            "userPrincipalName": "boss@example.com",
        },
    }


def test_parse_identity_reads_directory_attributes() -> None:
    identity = parse_identity(_user_payload())

    assert identity.source_id == "aad-1"
    assert identity.name == "Ana Souza"
    assert identity.active is True
    assert identity.categories == {Dimension.UNIT: "Recife", Dimension.DEPARTMENT: None}
    assert identity.hire_date_sources == (
        EncodedDate("2015-03-02T00:00:00Z", DateEncoding.ISO),
        EncodedDate("20150302000000.0Z", DateEncoding.LDAP),
    )
    assert identity.birth_date_sources == (EncodedDate("21071990", DateEncoding.COMPACT_DMY),)
    assert identity.manager is not None
    assert identity.manager.source_id == "aad-9"
    assert identity.manager.email == "boss@example.com"


def test_parse_identity_handles_sparse_users() -> None:
    identity = parse_identity(
        {"id": "aad-2", "userPrincipalName": "bot@example.com", "accountEnabled": None}
    )

    assert identity.name == "bot@example.com"
    assert identity.active is False
    assert identity.manager is None
    assert identity.hire_date_sources == ()


def test_parse_target_record_maps_columns() -> None:
    record = parse_target_record(
        {
            "id": "7",
            "fields": {
                "Title": "Ana Souza",
                "ExternalEmail": "ana@example.com",
                "Ativo": True,
                "UnidadeLookupId": 3,
                "DepartamentoLookupId": "",
                "DataAniversario": "1990-07-21T03:00:00Z",
                "DataAdmissao": "not a date",
                "AzureADId": "aad-1",
                "GerenciaLookupId": "12",
            },
        },
        ColumnMap(),
    )

    assert record.store_id == "7"
    assert record.source_id == "aad-1"
    assert record.fields.unit == "3"
    assert record.fields.department is None
    assert record.fields.birth_date == datetime(1990, 7, 21, 3, tzinfo=UTC)
    assert record.fields.hire_date is None
    assert record.fields.manager == "12"
    assert record.fields.job_title is None


def test_parse_lookup_entry_skips_blank_labels() -> None:
    columns = ColumnMap()

    entry = parse_lookup_entry({"id": "4", "fields": {"Title": " Recife "}}, Dimension.UNIT, columns)

    assert entry is not None
    assert entry.label == "Recife"
    assert parse_lookup_entry({"id": "5", "fields": {}}, Dimension.UNIT, columns) is None


def test_serialize_fields_formats_dates_and_lookup_ids() -> None:
    values = {
        FieldName.NAME: "Ana",
        FieldName.UNIT: "3",
        FieldName.BIRTH_DATE: datetime(1990, 7, 21, 3, tzinfo=UTC),
        FieldName.JOB_TITLE: None,
    }

    assert serialize_fields(values, ColumnMap(), omit_empty=True) == {
        "Title": "Ana",
        "UnidadeLookupId": 3,
        "DataAniversario": "1990-07-21T03:00:00Z",
    }
    assert serialize_fields({FieldName.JOB_TITLE: None}, ColumnMap()) == {"Cargo": None}


def test_normalized_dates_survive_the_list_round_trip() -> None:
    columns = ColumnMap()
    hire = DateNormalizer()("2019-02-19T03:00:00.5Z", DateEncoding.ISO)
    written = serialize_fields({FieldName.HIRE_DATE: hire, FieldName.UNIT: "3"}, columns)

    record = parse_target_record({"id": "1", "fields": written}, columns)

    assert record.fields.hire_date == hire
    assert record.fields.unit == "3"
