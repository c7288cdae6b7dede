"""
Unit tests for structured logging helpers.
"""

import structlog

from ghostfi.logging import log_context, redact_secrets


def test_log_context_is_scoped() -> None:
    with log_context(call_id="3f2a", action="prove"):
        assert structlog.contextvars.get_contextvars() == {
            "call_id": "3f2a",
            "action": "prove",
        }

    assert "call_id" not in structlog.contextvars.get_contextvars()


def test_redacts_nested_secrets() -> None:
    event = redact_secrets(
        None,
        "info",
        {
            "event": "ledger_connected",
            "signing_key": "ed25519:abc",
            "account": {"id": "prover.testnet", "secret": "ed25519:xyz"},
            "public_key": "ed25519:pub",
        },
    )

    assert event["signing_key"] == "***REDACTED***"
    assert event["account"] == {"id": "prover.testnet", "secret": "***REDACTED***"}
    assert event["public_key"] == "ed25519:pub"
