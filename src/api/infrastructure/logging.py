"""Structlog configuration for the Pillar API.

Probes log through ``structlog.get_logger()``; this module decides how
those events are rendered. A terminal gets colored key/value lines, any
other sink (containers, log shippers) gets one JSON object per event.
"""

import logging
import os
import sys

import structlog

_TRUTHY = ("1", "true", "yes")


def _wants_colors() -> bool:
    # FORCE_COLOR lets Docker or CI opt into colors without a TTY
    if os.environ.get("FORCE_COLOR", "").lower() in _TRUTHY:
        return True
    return sys.stdout.isatty()


def build_processors(colors: bool) -> list[structlog.types.Processor]:
    """Processor chain ending in the console or the JSON renderer."""
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if colors:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(debug: bool = False) -> None:
    """Configure structlog for the process.

    Args:
        debug: Also emit debug events (resolution traces, store lookups,
            engine creation)
    """
    structlog.configure(
        processors=build_processors(_wants_colors()),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
