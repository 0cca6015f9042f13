"""Structlog configuration for the room reconciler.

Console rendering for terminals, JSON lines everywhere else. Homeserver
credentials never reach the output: any event key naming a token or password
is masked before rendering.
"""

import logging
import os
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

REDACTED = "[redacted]"

_SENSITIVE_KEYS = frozenset(
    {
        "access_token",
        "appservice_token",
        "authorization",
        "automation_password",
        "password",
        "token",
    }
)


def redact_credentials(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask values of credential-bearing keys."""
    for key in event_dict.keys() & _SENSITIVE_KEYS:
        event_dict[key] = REDACTED
    return event_dict


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog for the process.

    Colors are used when FORCE_COLOR is set (e.g. inside containers) or when
    stdout is a terminal.

    Args:
        log_level: Minimum level to emit (e.g. "DEBUG", "INFO")

    Raises:
        ValueError: If the level name is unknown
    """
    level = logging.getLevelNamesMapping().get(log_level.upper())
    if level is None:
        raise ValueError(f"Unknown log level: {log_level}")

    force_color = os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes")

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_credentials,
        structlog.processors.StackInfoRenderer(),
    ]
    if force_color or sys.stdout.isatty():
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
