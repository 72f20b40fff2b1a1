from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from staffsync.adapters.graph import GraphAPIError, GraphDirectorySource
from staffsync.domain.ports import DirectorySource

from tests.support.graph import GraphRecorder

if TYPE_CHECKING:
    from collections.abc import Callable

    from staffsync.adapters.graph import GraphClient


def _user(index: int) -> dict[str, object]:
    return {
        "id": f"aad-{index}",
        "displayName": f"User {index}",
        "userPrincipalName": f"user{index}@example.com",
        "accountEnabled": True,
    }


def test_list_all_drains_every_page(make_graph: Callable[[GraphRecorder], GraphClient]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        page = request.url.params.get("page")
        if page is None:
            return httpx.Response(
                200,
                json={
                    "value": [_user(1), _user(2)],
                    "@odata.nextLink": "https://graph.microsoft.com/v1.0/users?page=2",
                },
            )
        return httpx.Response(200, json={"value": [_user(3)]})

    recorder = GraphRecorder(handler)
    source = GraphDirectorySource(graph=make_graph(recorder))

    identities = source.list_all()

    assert isinstance(source, DirectorySource)
    assert [identity.source_id for identity in identities] == ["aad-1", "aad-2", "aad-3"]
    first = recorder.requests[0]
    assert first.url.params["$top"] == "2"
    assert "onPremisesExtensionAttributes" in first.url.params["$select"]
    assert first.url.params["$expand"].startswith("manager(")
    assert "$select" not in recorder.requests[1].url.params


def test_list_all_fails_when_a_page_fails(
    make_graph: Callable[[GraphRecorder], GraphClient],
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if "page" in request.url.params:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(
            200,
            json={
                "value": [_user(1)],
                "@odata.nextLink": "https://graph.microsoft.com/v1.0/users?page=2",
            },
        )

    source = GraphDirectorySource(graph=make_graph(GraphRecorder(handler)))

    with pytest.raises(GraphAPIError) as excinfo:
        source.list_all()

    assert excinfo.value.status_code == 503
