"""
Mock Ledger Client
==================

In-memory simulation of the lending contract for development and testing.

Data is stored in memory and lost on restart.

Version: 0.1.0
"""

import hashlib
import uuid
from typing import Any

from ghostfi.config import LedgerMode
from ghostfi.ledger.client import (
    LedgerClient,
    LedgerError,
    LoanRecord,
    build_verified_loan_call,
    is_valid_account_id,
)
from ghostfi.logging import get_logger
from ghostfi.zk.encoder import parse_public_key
from ghostfi.zk.errors import InvalidPublicKey
from ghostfi.zk.models import Proof

logger = get_logger(__name__)


class MockLedgerClient(LedgerClient):
    """
    In-memory lending contract.

    Mirrors the contract rules: only the prover account may report verified
    loans, and only registered users receive funds.
    """

    def __init__(self, prover: str, caller: str | None = None) -> None:
        self.prover = prover
        self.caller = caller or prover
        self._access_keys: dict[str, set[bytes]] = {}
        self._loans: dict[str, list[LoanRecord]] = {}
        logger.debug("mock_ledger_initialized", prover=prover)

    @property
    def mode(self) -> LedgerMode:
        return LedgerMode.MOCK

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "mode": self.mode.value,
            "registered_users": len(self._loans),
            "loans": sum(len(loans) for loans in self._loans.values()),
        }

    def _key_bytes(self, public_key: str) -> bytes:
        """Raw key bytes, so prefixed and bare spellings of a key compare equal."""
        try:
            return parse_public_key(public_key)
        except InvalidPublicKey as e:
            raise LedgerError(f"Invalid public key: {e}") from e

    def _generate_tx_hash(self) -> str:
        return hashlib.sha256(uuid.uuid4().bytes).hexdigest()

    async def register(self, account_id: str, public_key: str) -> bool:
        if not is_valid_account_id(account_id):
            raise LedgerError(f"Invalid account id: {account_id!r}")

        self._access_keys.setdefault(account_id, set()).add(self._key_bytes(public_key))
        if account_id in self._loans:
            logger.info("user_already_registered", account_id=account_id)
            return False

        self._loans[account_id] = []
        logger.info("user_registered", account_id=account_id)
        return True

    async def verified(self, proof: Proof) -> bool:
        if not is_valid_account_id(proof.account_id):
            raise LedgerError("Invalid account id")
        account_id = proof.account_id

        keys = self._access_keys.get(account_id, set())
        if self._key_bytes(proof.public_key) not in keys:
            raise LedgerError("Key is not registered for this account")

        return self._verified_loan(build_verified_loan_call(proof))

    def _verified_loan(self, call: dict[str, Any]) -> bool:
        """Contract-side handling of ``verified_loan``."""
        if self.caller != self.prover:
            logger.warning("verified_loan_forbidden", caller=self.caller)
            return False

        user = call["user"]
        if user not in self._loans:
            logger.warning("verified_loan_user_not_registered", account_id=user)
            return False

        record = LoanRecord(
            account_id=user,
            amount=int(call["amount"]),
            tx_hash=self._generate_tx_hash(),
        )
        self._loans[user].append(record)
        logger.info(
            "loan_released",
            account_id=user,
            amount=record.amount,
            tx_hash=record.tx_hash,
        )
        return True

    def loans_for(self, account_id: str) -> list[LoanRecord]:
        """Loans released to ``account_id``, oldest first."""
        return list(self._loans.get(account_id, []))
