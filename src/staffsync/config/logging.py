"""Console logging for the command line entry points."""

from __future__ import annotations

import logging

# transport loggers that log every request at INFO or DEBUG
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Route log records to stderr.

    ``verbose`` turns on per-record decisions from the engine. HTTP transport
    logging stays at WARNING either way; pass ``force=True`` to replace handlers
    installed by an earlier call.
    """

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
