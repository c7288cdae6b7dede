"""
Proof Orchestration Engine
==========================

Encodes heuristic proof requests for the nargo circuit, drives nargo as a
subprocess and decodes its proofs.

Usage:
    from ghostfi.zk import NargoProofEngine, ProofRequest, SimpleHeuristic

    engine = NargoProofEngine()
    proof = await engine.aprove(
        ProofRequest(
            public_key="ed25519:...",
            requested_amount=100,
            heuristics=[SimpleHeuristic(balance=5000)],
        )
    )

    result = await engine.averify(proof)

Version: 0.1.0
"""

from ghostfi.zk.encoder import encode_request, encode_verification, parse_public_key
from ghostfi.zk.errors import (
    EncodingViolation,
    InvalidPublicKey,
    ProcessCancelledError,
    ProcessExecutionError,
    ProcessSpawnError,
    ProcessTimeoutError,
    ProofArtifactMissing,
    ProofDecodeError,
    ProofEngineError,
    WorkspaceIoError,
)
from ghostfi.zk.models import (
    MAX_HEURISTICS,
    SLOT_COUNT,
    EncodedParameterTable,
    EncodedSlot,
    HeuristicClaim,
    PassportHeuristic,
    Proof,
    ProofRequest,
    SimpleHeuristic,
    VerificationResult,
    VerificationTable,
)
from ghostfi.zk.orchestrator import (
    NargoProofEngine,
    ProofEngine,
    ProveCommand,
    VerifyCommand,
    execute,
    get_proof_engine,
    reset_proof_engine,
    set_proof_engine,
)


__all__ = [
    # Engine
    "ProofEngine",
    "NargoProofEngine",
    "ProveCommand",
    "VerifyCommand",
    "execute",
    "get_proof_engine",
    "set_proof_engine",
    "reset_proof_engine",
    # Encoding
    "encode_request",
    "encode_verification",
    "parse_public_key",
    # Models
    "HeuristicClaim",
    "SimpleHeuristic",
    "PassportHeuristic",
    "ProofRequest",
    "Proof",
    "VerificationResult",
    "EncodedSlot",
    "EncodedParameterTable",
    "VerificationTable",
    "MAX_HEURISTICS",
    "SLOT_COUNT",
    # Errors
    "ProofEngineError",
    "InvalidPublicKey",
    "EncodingViolation",
    "WorkspaceIoError",
    "ProcessSpawnError",
    "ProcessExecutionError",
    "ProcessCancelledError",
    "ProcessTimeoutError",
    "ProofArtifactMissing",
    "ProofDecodeError",
]
