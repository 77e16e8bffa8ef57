"""
PRISMA Studio Logging Configuration
structlog over the stdlib, with request correlation and API key masking.
"""

import logging
import re
import sys
from contextvars import ContextVar
from typing import Any, Optional

import structlog

from prisma_studio.core.config import get_settings


correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

_API_KEY_PATTERN = re.compile(r"AIza[0-9A-Za-z\-_]{8,}")

# Request lines from these loggers include ?key=... on the probe URL.
_NOISY_LOGGERS = ("httpx", "httpcore")


def get_correlation_id() -> Optional[str]:
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind the correlation ID for the current request context."""
    correlation_id_var.set(correlation_id)


def mask_api_key(value: str) -> str:
    """Replace every key-shaped substring, keeping the last four characters."""
    return _API_KEY_PATTERN.sub(lambda match: "AIza***" + match.group(0)[-4:], value)


def add_correlation_id(logger: Any, method_name: str, event_dict: dict) -> dict:
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def redact_api_keys(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Mask provider keys that leak into events through error messages."""
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = mask_api_key(value)
        elif isinstance(value, dict):
            event_dict[key] = {
                k: mask_api_key(v) if isinstance(v, str) else v for k, v in value.items()
            }
    return event_dict


def configure_logging() -> None:
    settings = get_settings()
    renderer = (
        structlog.dev.ConsoleRenderer() if settings.debug
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            add_correlation_id,
            redact_api_keys,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
