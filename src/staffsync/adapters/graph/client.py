"""Authenticated, paginating access to Microsoft Graph."""

from __future__ import annotations

from contextlib import asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from staffsync.adapters.http_resilience import ResilientClient

from .auth import ClientCredentialsTokenProvider
from .errors import GraphAPIError
from .schema import CollectionPage, ErrorResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Mapping

    from staffsync.config.graph import GraphConfig
    from staffsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

type JsonObject = dict[str, object]


class GraphSession:
    """One open HTTP client plus the token provider, valid inside a single event loop."""

    def __init__(self, client: ResilientClient, tokens: ClientCredentialsTokenProvider) -> None:
        self._client = client
        self._tokens = tokens

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        json: JsonObject | None = None,
    ) -> JsonObject:
        token = await self._tokens.token(self._client)
        try:
            response = await self._client.request(
                method,
                url,
                params=dict(params) if params else None,
                json=json,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            raise GraphAPIError(f"{method} {url} failed: {exc}") from exc

        if response.status_code == httpx.codes.UNAUTHORIZED:
            self._tokens.invalidate()
        if response.is_error:
            raise _error_from_response(method, url, response)
        if not response.content:
            return {}

        try:
            payload = response.json()
        except ValueError as exc:
            raise GraphAPIError(f"{method} {url} returned a body that is not JSON") from exc
        if not isinstance(payload, dict):
            raise GraphAPIError(f"{method} {url} returned an unexpected payload")
        return payload

    async def get(self, url: str, *, params: Mapping[str, str] | None = None) -> JsonObject:
        return await self.request_json("GET", url, params=params)

    async def post(self, url: str, *, json: JsonObject) -> JsonObject:
        return await self.request_json("POST", url, json=json)

    async def patch(self, url: str, *, json: JsonObject) -> JsonObject:
        return await self.request_json("PATCH", url, json=json)

    async def iter_pages(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
    ) -> AsyncIterator[list[JsonObject]]:
        """Yield the ``value`` array of each page, following ``@odata.nextLink``."""

        next_url: str | None = url
        page_params = params
        while next_url is not None:
            payload = await self.get(next_url, params=page_params)
            try:
                page = CollectionPage.model_validate(payload)
            except ValidationError as exc:
                raise GraphAPIError(f"GET {next_url} returned a malformed collection") from exc
            yield page.value
            next_url = page.next_link
            # the next link already carries the original query
            page_params = None

    async def get_all(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
    ) -> list[JsonObject]:
        items: list[JsonObject] = []
        async for page in self.iter_pages(url, params=params):
            items.extend(page)
            log.debug("Fetched %s items from %s", len(items), url)
        return items


def _error_from_response(method: str, url: str, response: httpx.Response) -> GraphAPIError:
    try:
        error = ErrorResponse.model_validate(response.json()).error
    except ValueError:
        return GraphAPIError(
            f"{method} {url} failed with HTTP {response.status_code}",
            status_code=response.status_code,
        )
    log.error(f"Graph API error {error.code} on {method} {url}: {error.message}")
    return GraphAPIError(
        f"{method} {url} failed with HTTP {response.status_code} ({error.code}): {error.message}",
        status_code=response.status_code,
        code=error.code,
    )


class GraphClient:
    """Factory for Graph sessions sharing one token provider."""

    def __init__(
        self,
        *,
        config: GraphConfig,
        tokens: ClientCredentialsTokenProvider | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self.config = config
        self._tokens = tokens or ClientCredentialsTokenProvider(config.credentials)
        self._client_factory = client_factory or ResilientClient

    @property
    def page_size(self) -> int:
        return self.config.page_size

    @asynccontextmanager
    async def session(self) -> AsyncIterator[GraphSession]:
        async with self._client_factory(self.config.resilience) as client:
            yield GraphSession(client, self._tokens)
