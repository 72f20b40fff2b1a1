from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from staffsync.adapters.graph import GraphClient
from staffsync.config.graph import GraphConfig, GraphCredentials, SharePointConfig
from staffsync.domain.records import Dimension
from tests.support.graph import make_client_factory

if TYPE_CHECKING:
    from collections.abc import Callable

    from tests.support.graph import GraphRecorder


@pytest.fixture
def graph_config() -> GraphConfig:
    return GraphConfig(
        credentials=GraphCredentials(tenant_id="tenant", client_id="client", client_secret="s3"),
        page_size=2,
    )


@pytest.fixture
def sharepoint_config() -> SharePointConfig:
    return SharePointConfig(
        site_id="site-1",
        list_id="employees",
        lookup_list_ids={Dimension.UNIT: "units", Dimension.DEPARTMENT: "departments"},
    )


@pytest.fixture
def make_graph(graph_config: GraphConfig) -> Callable[[GraphRecorder], GraphClient]:
    def build(recorder: GraphRecorder) -> GraphClient:
        return GraphClient(config=graph_config, client_factory=make_client_factory(recorder))

    return build
