"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and colored console output for development.

Usage:
    from ghostfi.logging import get_logger, log_context, setup_logging

    setup_logging()
    logger = get_logger(__name__)

    with log_context(call_id=call_id):
        logger.info("proof_generated", public_key=pk, duration_ms=1200)
"""

from ghostfi.logging.logger import get_logger, log_context, redact_secrets, setup_logging


__all__ = [
    "get_logger",
    "log_context",
    "redact_secrets",
    "setup_logging",
]
