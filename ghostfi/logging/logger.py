"""
Logger Implementation
=====================

structlog configuration for the prover: JSON lines in production, a
colored console elsewhere. Signing secrets never reach the output, and
per-call fields can be scoped with ``log_context``.

Version: 0.1.0
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


REDACTED = "***REDACTED***"

# Substrings of event keys whose values are never logged
SENSITIVE_KEYS = ("secret", "seed", "private_key", "signing_key", "password", "token")


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if any(s in str(key).lower() for s in SENSITIVE_KEYS) else _redact(item)
            for key, item in value.items()
        }
    return value


def redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace values of sensitive keys, including nested ones."""
    return _redact(event_dict)


def _stamp_service(service_name: str) -> Processor:
    def stamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return stamp


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    service_name: str = "ghostfi",
) -> None:
    """
    Route stdlib and structlog output through one structlog formatter.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_logs: Render JSON lines instead of the console format
        service_name: Value of the ``service`` field on every entry
    """
    level = logging.getLevelName(log_level.upper())

    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _stamp_service(service_name),
        redact_secrets,
    ]

    renderer: Processor
    if json_logs:
        pre_chain.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            exception_formatter=structlog.dev.RichTracebackFormatter(max_frames=10),
        )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    logging.getLogger("multipart").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> "BoundLogger":
    """Structured logger for ``name`` (usually ``__name__``)."""
    return structlog.stdlib.get_logger(name)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """
    Attach ``fields`` to every entry logged inside the block.

    Example:
        with log_context(call_id="3f2a"):
            logger.info("engine_spawned")  # includes call_id
    """
    with structlog.contextvars.bound_contextvars(**fields):
        yield
