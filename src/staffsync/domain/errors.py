"""Error types raised by the reconciliation core and its ports."""

from __future__ import annotations


class DirectorySourceError(RuntimeError):
    """Raised by directory adapters when identities cannot be read."""


class RecordStoreError(RuntimeError):
    """Raised by record store adapters when a read or write fails."""


class ReconciliationAbortedError(RuntimeError):
    """Raised when a run cannot continue; carries the step that failed."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step} failed: {message}")
        self.step = step


class SourceLoadError(ReconciliationAbortedError):
    """The source directory could not be drained completely."""

    def __init__(self, message: str) -> None:
        super().__init__("loading source directory", message)


class TargetLoadError(ReconciliationAbortedError):
    """The target store snapshot (records or lookup collections) could not be loaded."""

    def __init__(self, message: str) -> None:
        super().__init__("loading target store", message)
