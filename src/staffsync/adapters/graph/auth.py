"""OAuth2 client-credentials tokens for Microsoft Graph."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from .errors import GraphAuthError
from .schema import TokenErrorResponse, TokenResponse

if TYPE_CHECKING:
    from staffsync.adapters.http_resilience import ResilientClient
    from staffsync.config.graph import GraphCredentials

log = getLogger(__name__)

# tokens count as expired this long before their stated expiry
EXPIRY_MARGIN = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ClientCredentialsTokenProvider:
    """Fetch and cache an app-only access token.

    The token outlives the HTTP client it was fetched with, so one provider can
    serve every ``asyncio.run`` the adapters make during a run.
    """

    def __init__(
        self,
        credentials: GraphCredentials,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._credentials = credentials
        self._clock = clock
        self._token: str | None = None
        self._expires_at: datetime | None = None

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = None

    async def token(self, client: ResilientClient) -> str:
        now = self._clock()
        if self._token is not None and self._expires_at is not None and now < self._expires_at:
            return self._token

        log.debug("Requesting Graph access token for client %s", self._credentials.client_id)
        try:
            response = await client.post(
                self._credentials.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._credentials.client_id,
                    "client_secret": self._credentials.client_secret,
                    "scope": self._credentials.scope,
                },
            )
        except httpx.HTTPError as exc:
            raise GraphAuthError(f"Token request failed: {exc}") from exc

        if response.is_error:
            raise GraphAuthError(_describe_token_error(response), status_code=response.status_code)

        try:
            payload = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise GraphAuthError("Token endpoint returned an unexpected payload") from exc

        self._token = payload.access_token
        self._expires_at = now + timedelta(seconds=payload.expires_in) - EXPIRY_MARGIN
        log.info("Obtained Graph access token (expires in %ss)", payload.expires_in)
        return self._token


def _describe_token_error(response: httpx.Response) -> str:
    try:
        error = TokenErrorResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        return f"Token request failed with HTTP {response.status_code}"
    detail = f": {error.error_description}" if error.error_description else ""
    return f"Token request failed ({error.error}){detail}"
