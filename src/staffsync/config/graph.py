"""Microsoft Graph and SharePoint configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from staffsync.domain.records import Dimension

from .env import env_int, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Mapping

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0/"
GRAPH_SCOPE = "https://graph.microsoft.com/.default"
LOGIN_BASE_URL = "https://login.microsoftonline.com/"
GRAPH_TIMEOUT_SECONDS = 30.0
DEFAULT_PAGE_SIZE = 999

LOOKUP_LIST_ENV_VARS: dict[Dimension, str] = {
    Dimension.UNIT: "SHAREPOINT_UNIT_LIST_ID",
    Dimension.DEPARTMENT: "SHAREPOINT_DEPARTMENT_LIST_ID",
}


def _default_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="graph",
        base_url=GRAPH_BASE_URL,
        timeout_seconds=GRAPH_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=5),
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        default_headers={"Accept": "application/json"},
    )


@dataclass(frozen=True, slots=True)
class GraphCredentials:
    """App registration used for the client-credentials grant."""

    tenant_id: str
    client_id: str
    client_secret: str = field(repr=False)
    scope: str = GRAPH_SCOPE

    @property
    def token_url(self) -> str:
        return f"{LOGIN_BASE_URL}{self.tenant_id}/oauth2/v2.0/token"


@dataclass(frozen=True, slots=True)
class GraphConfig:
    credentials: GraphCredentials
    page_size: int = DEFAULT_PAGE_SIZE
    resilience: ResilienceConfig = field(default_factory=_default_resilience)


@dataclass(frozen=True, slots=True)
class SharePointConfig:
    """Site and list identifiers of the employee list and its lookup lists."""

    site_id: str
    list_id: str
    lookup_list_ids: Mapping[Dimension, str]

    def lookup_list_id(self, dimension: Dimension) -> str:
        return self.lookup_list_ids[dimension]


def get_graph_config(*, resilience: ResilienceConfig | None = None) -> GraphConfig:
    values = require_env_vars(("GRAPH_TENANT_ID", "GRAPH_CLIENT_ID", "GRAPH_CLIENT_SECRET"))
    return GraphConfig(
        credentials=GraphCredentials(
            tenant_id=values["GRAPH_TENANT_ID"],
            client_id=values["GRAPH_CLIENT_ID"],
            client_secret=values["GRAPH_CLIENT_SECRET"],
        ),
        page_size=env_int("STAFFSYNC_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        resilience=resilience or _default_resilience(),
    )


def get_sharepoint_config() -> SharePointConfig:
    values = require_env_vars(
        ("SHAREPOINT_SITE_ID", "SHAREPOINT_LIST_ID", *LOOKUP_LIST_ENV_VARS.values())
    )
    return SharePointConfig(
        site_id=values["SHAREPOINT_SITE_ID"],
        list_id=values["SHAREPOINT_LIST_ID"],
        lookup_list_ids={
            dimension: values[name] for dimension, name in LOOKUP_LIST_ENV_VARS.items()
        },
    )
