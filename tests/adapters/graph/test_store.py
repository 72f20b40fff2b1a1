from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx
import pytest

from staffsync.adapters.graph import GraphAPIError, SharePointRecordStore
from staffsync.domain.lookups import LookupResolver
from staffsync.domain.ports import RecordStore
from staffsync.domain.records import Dimension, FieldName
from tests.support.graph import GraphRecorder

if TYPE_CHECKING:
    from collections.abc import Callable

    from staffsync.adapters.graph import GraphClient
    from staffsync.config.graph import SharePointConfig

ITEMS_URL = "https://graph.microsoft.com/v1.0/sites/site-1/lists/employees/items"


@pytest.fixture
def make_store(
    make_graph: Callable[[GraphRecorder], GraphClient],
    sharepoint_config: SharePointConfig,
) -> Callable[[GraphRecorder], SharePointRecordStore]:
    def build(recorder: GraphRecorder) -> SharePointRecordStore:
        return SharePointRecordStore(graph=make_graph(recorder), config=sharepoint_config)

    return build


def test_store_satisfies_port(
    make_store: Callable[[GraphRecorder], SharePointRecordStore],
) -> None:
    store = make_store(GraphRecorder(lambda _: httpx.Response(200, json={})))

    assert isinstance(store, RecordStore)


def test_list_records_follows_next_link(
    make_store: Callable[[GraphRecorder], SharePointRecordStore],
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if "$skiptoken" in request.url.params:
            return httpx.Response(
                200, json={"value": [{"id": "3", "fields": {"AzureADId": "aad-3"}}]}
            )
        return httpx.Response(
            200,
            json={
                "value": [
                    {"id": "1", "fields": {"AzureADId": "aad-1", "Ativo": True}},
                    {"id": "2", "fields": {"ExternalEmail": "b@example.com"}},
                ],
                "@odata.nextLink": f"{ITEMS_URL}?$skiptoken=abc",
            },
        )

    recorder = GraphRecorder(handler)
    records = make_store(recorder).list_records()

    assert [record.store_id for record in records] == ["1", "2", "3"]
    assert records[0].fields.active is True
    assert records[1].email == "b@example.com"
    first = recorder.requests[0]
    assert first.url.path == "/v1.0/sites/site-1/lists/employees/items"
    assert first.url.params["$top"] == "2"
    assert first.url.params["$expand"].startswith("fields($select=Title,ExternalEmail,")
    assert recorder.token_requests == 1


def test_create_record_posts_non_empty_fields(
    make_store: Callable[[GraphRecorder], SharePointRecordStore],
) -> None:
    recorder = GraphRecorder(lambda _: httpx.Response(201, json={"id": "42", "fields": {}}))

    store_id = make_store(recorder).create_record(
        {
            FieldName.NAME: "Ana",
            FieldName.SOURCE_ID: "aad-1",
            FieldName.DEPARTMENT: "5",
            FieldName.HIRE_DATE: datetime(2015, 3, 2, 3, tzinfo=UTC),
            FieldName.JOB_TITLE: None,
        }
    )

    assert store_id == "42"
    assert recorder.requests[0].method == "POST"
    assert recorder.bodies() == [
        {
            "fields": {
                "Title": "Ana",
                "AzureADId": "aad-1",
                "DepartamentoLookupId": 5,
                "DataAdmissao": "2015-03-02T03:00:00Z",
            }
        }
    ]


def test_update_record_patches_fields_including_cleared_values(
    make_store: Callable[[GraphRecorder], SharePointRecordStore],
) -> None:
    recorder = GraphRecorder(lambda _: httpx.Response(200, json={"Cargo": None}))

    make_store(recorder).update_record("7", {FieldName.JOB_TITLE: None, FieldName.MANAGER: "9"})

    request = recorder.requests[0]
    assert request.method == "PATCH"
    assert request.url.path.endswith("/lists/employees/items/7/fields")
    assert recorder.bodies() == [{"Cargo": None, "GerenciaLookupId": 9}]


def test_lookup_entries_use_the_dimension_list(
    make_store: Callable[[GraphRecorder], SharePointRecordStore],
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(201, json={"id": "11"})
        return httpx.Response(
            200,
            json={"value": [{"id": "10", "fields": {"Title": "Recife"}}, {"id": "12"}]},
        )

    recorder = GraphRecorder(handler)
    store = make_store(recorder)

    entries = store.list_lookup_entries(Dimension.UNIT)
    created = store.create_lookup_entry(Dimension.DEPARTMENT, "Financeiro")

    assert [(entry.label, entry.store_id) for entry in entries] == [("Recife", "10")]
    assert created == "11"
    assert recorder.requests[0].url.path.endswith("/lists/units/items")
    assert recorder.requests[1].url.path.endswith("/lists/departments/items")
    assert recorder.bodies() == [{"fields": {"Title": "Financeiro"}}]


def test_verify_checks_site_and_lists(
    make_store: Callable[[GraphRecorder], SharePointRecordStore],
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/lists/departments"):
            return httpx.Response(
                404, json={"error": {"code": "itemNotFound", "message": "List not found"}}
            )
        return httpx.Response(200, json={"id": request.url.path.rsplit("/", 1)[-1]})

    recorder = GraphRecorder(handler)

    with pytest.raises(GraphAPIError) as excinfo:
        make_store(recorder).verify()

    assert excinfo.value.status_code == 404
    assert excinfo.value.code == "itemNotFound"
    assert [request.url.path.rsplit("/", 1)[-1] for request in recorder.requests] == [
        "site-1",
        "employees",
        "units",
        "departments",
    ]


def test_created_item_without_id_is_an_error(
    make_store: Callable[[GraphRecorder], SharePointRecordStore],
) -> None:
    recorder = GraphRecorder(lambda _: httpx.Response(201, json={"fields": {}}))

    with pytest.raises(GraphAPIError):
        make_store(recorder).create_lookup_entry(Dimension.UNIT, "Recife")


def test_non_json_reply_is_a_store_error(
    make_store: Callable[[GraphRecorder], SharePointRecordStore],
) -> None:
    recorder = GraphRecorder(lambda _: httpx.Response(201, text="<html>created</html>"))
    store = make_store(recorder)

    with pytest.raises(GraphAPIError, match="not JSON"):
        store.create_lookup_entry(Dimension.UNIT, "Recife")

    resolver = LookupResolver(store=store)
    assert resolver.resolve(Dimension.UNIT, "Recife") is None
    assert resolver.failed == 1
