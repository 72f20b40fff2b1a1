"""Retry, throttling and timeout settings for outbound HTTP."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """When a failed request is sent again.

    Graph answers throttling with 429 and a ``Retry-After`` header, which the
    backoff honours. Only reads and field patches are replayed; a POST creates a
    list item and replaying it could create the item twice.
    """

    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 60.0
    retry_methods: frozenset[str] = frozenset({"GET", "PATCH"})
    retry_statuses: frozenset[int] = frozenset({429, 500, 502, 503, 504})
    retry_on: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
