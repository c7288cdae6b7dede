"""
Ledger Client Interface
=======================

Abstract client for the lending contract that releases funds once a
loan's proof has been verified.

Version: 0.1.0
"""

import re
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from ghostfi.config import LedgerMode, settings
from ghostfi.logging import get_logger
from ghostfi.zk.models import Proof

logger = get_logger(__name__)

# NEAR account id rules: 2-64 chars, lowercase parts joined by "-", "_" or "."
ACCOUNT_ID_PATTERN = re.compile(r"^(([a-z\d]+[\-_])*[a-z\d]+\.)*([a-z\d]+[\-_])*[a-z\d]+$")


class LedgerError(Exception):
    """Error talking to or rejected by the lending contract."""


class LoanRecord(BaseModel):
    """A loan the contract released funds for."""

    account_id: str
    amount: int = Field(..., ge=0)
    tx_hash: str
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


def is_valid_account_id(account_id: str | None) -> bool:
    """Check an account id against NEAR naming rules."""
    if not account_id or not 2 <= len(account_id) <= 64:
        return False
    return ACCOUNT_ID_PATTERN.match(account_id) is not None


def build_verified_loan_call(proof: Proof) -> dict[str, Any]:
    """
    Build the ``verified_loan`` contract arguments.

    The amount travels as a decimal string (U128 on chain).
    """
    call = {
        "user": proof.account_id,
        "amount": str(proof.requested_amount),
    }
    logger.debug("verified_loan_call_built", call=call)
    return call


class LedgerClient(ABC):
    """
    Abstract base class for lending contract clients.

    Implements the Strategy pattern for different ledger modes.
    """

    @property
    @abstractmethod
    def mode(self) -> LedgerMode:
        """Get the ledger mode."""
        ...

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Check ledger health."""
        ...

    @abstractmethod
    async def register(self, account_id: str, public_key: str) -> bool:
        """
        Register a borrower account and one of its access keys.

        Returns:
            False if the account was already registered
        """
        ...

    @abstractmethod
    async def verified(self, proof: Proof) -> bool:
        """
        Inform the contract that the loan in ``proof`` was verified.

        Args:
            proof: Verified proof with ``account_id`` filled in

        Returns:
            True if the contract accepted the loan and released funds

        Raises:
            LedgerError: If the account id is missing/invalid or the proof's
                key is not an access key of that account
        """
        ...


# Global client instance
_client: LedgerClient | None = None


def get_ledger_client() -> LedgerClient:
    """
    Get the configured ledger client instance.

    Returns:
        LedgerClient instance based on settings
    """
    global _client

    if _client is None:
        mode = settings.ledger.mode

        if mode == LedgerMode.MOCK:
            from ghostfi.ledger.mock import MockLedgerClient

            _client = MockLedgerClient(prover=settings.account)
        elif mode in (LedgerMode.TESTNET, LedgerMode.MAINNET):
            raise NotImplementedError(
                f"Ledger mode '{mode.value}' not yet implemented. "
                "Use GHOSTFI_LEDGER_MODE=mock for development."
            )
        else:
            raise ValueError(f"Unknown ledger mode: {mode}")

        logger.info("ledger_client_initialized", mode=mode.value)

    return _client


def set_ledger_client(client: LedgerClient) -> None:
    """Set a custom ledger client."""
    global _client
    _client = client
    logger.info("ledger_client_set", mode=client.mode.value)


def reset_ledger_client() -> None:
    """Reset the client to be re-initialized."""
    global _client
    _client = None
