"""
Proof Routes
============

Prove and verify endpoints.

Clients only see success or failure (``null``/``false``); the classified
engine error is logged for operators.
"""

from fastapi import APIRouter

from ghostfi.ledger import LedgerError, get_ledger_client
from ghostfi.logging import get_logger
from ghostfi.zk import Proof, ProofEngineError, ProofRequest, get_proof_engine


logger = get_logger(__name__)
router = APIRouter()


@router.post("/prove", response_model=Proof | None)
async def prove(request: ProofRequest) -> Proof | None:
    """
    Generate a proof that the applicant meets the supplied heuristics.

    Returns:
        The proof, or null if proving failed
    """
    logger.info(
        "prove_requested",
        public_key=request.public_key,
        requested_amount=request.requested_amount,
        heuristics=len(request.heuristics),
    )

    try:
        return await get_proof_engine().aprove(request)
    except ProofEngineError as e:
        logger.error("prove_failed", error_code=e.code, error=str(e))
        return None


@router.post("/verify", response_model=bool)
async def verify(proof: Proof) -> bool:
    """
    Verify a proof and, if valid, report the loan to the lending contract.

    Returns:
        True once the contract accepted the verified loan
    """
    logger.info(
        "verify_requested",
        public_key=proof.public_key,
        account_id=proof.account_id,
    )

    try:
        result = await get_proof_engine().averify(proof)
    except ProofEngineError as e:
        logger.error("verify_failed", error_code=e.code, error=str(e))
        return False

    if not result.valid:
        return False

    try:
        return await get_ledger_client().verified(proof)
    except LedgerError as e:
        logger.error("ledger_rejected_loan", account_id=proof.account_id, error=str(e))
        return False
