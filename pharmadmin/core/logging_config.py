"""
Logging setup for the pharmadmin CLI.

Log lines go to stderr so they never interleave with the rich tables and
progress bar the console draws on stdout. The level comes from
``PHARMADMIN_LOG_LEVEL`` unless the caller overrides it.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Optional

from .config import settings

# HTTP stack loggers that would otherwise echo every chunk request at DEBUG.
QUIET_LOGGERS = ("urllib3", "requests")

_is_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root and pharmadmin loggers once per process.

    Args:
        level: Optional log level override (e.g., "DEBUG"); defaults to
            ``settings.log_level``.
    """
    global _is_configured

    if _is_configured:
        return

    log_level = (level or settings.log_level or "INFO").upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "cli": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                    "datefmt": "%H:%M:%S",
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "cli",
                    "level": log_level,
                }
            },
            "root": {
                "handlers": ["stderr"],
                "level": "WARNING",
            },
            "loggers": {
                "pharmadmin": {"level": log_level},
                **{name: {"level": "WARNING"} for name in QUIET_LOGGERS},
            },
        }
    )

    _is_configured = True
