"""Errors raised by the Microsoft Graph adapters."""

from __future__ import annotations

from staffsync.domain.errors import DirectorySourceError, RecordStoreError


class GraphAPIError(RecordStoreError, DirectorySourceError):
    """Raised when Microsoft Graph rejects a request or returns an unexpected payload."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class GraphAuthError(GraphAPIError):
    """Raised when an access token cannot be obtained."""
