"""
Ledger Module
=============

Client for the lending contract that releases funds for verified loans.

Supports:
- Mock (development/testing)

Usage:
    from ghostfi.ledger import get_ledger_client

    client = get_ledger_client()
    released = await client.verified(proof)
"""

from ghostfi.ledger.client import (
    LedgerClient,
    LedgerError,
    LoanRecord,
    build_verified_loan_call,
    get_ledger_client,
    is_valid_account_id,
    reset_ledger_client,
    set_ledger_client,
)
from ghostfi.ledger.mock import MockLedgerClient

__all__ = [
    # Client
    "LedgerClient",
    "LedgerError",
    "get_ledger_client",
    "set_ledger_client",
    "reset_ledger_client",
    "build_verified_loan_call",
    "is_valid_account_id",
    # Models
    "LoanRecord",
    # Implementations
    "MockLedgerClient",
]
