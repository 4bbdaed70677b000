from __future__ import annotations

import logging
import sys

from clipjoin.config import LoggingSettings

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(settings: LoggingSettings) -> None:
    """Configure process-wide logging once at startup.

    Records go to stderr so stdout carries only the JSON run summary.
    """

    logging.basicConfig(
        level=getattr(logging, settings.level.upper(), logging.INFO),
        format=DEFAULT_LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
