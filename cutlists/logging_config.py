from __future__ import annotations

import logging

from cutlists.config import LoggingSettings

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def resolve_log_level(settings: LoggingSettings, *, verbose: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    return getattr(logging, settings.level.upper(), logging.INFO)


def configure_logging(settings: LoggingSettings, *, verbose: bool = False) -> None:
    """Configure process-wide logging once at startup.

    ``verbose`` forces DEBUG so request URLs and per-cut decisions show up.
    """

    logging.basicConfig(
        level=resolve_log_level(settings, verbose=verbose),
        format=DEFAULT_LOG_FORMAT,
        force=True,
    )
