"""
Result Decoder
==============

Reads the hex proof artifact nargo leaves behind and turns it into the
domain value for the command being executed.

Version: 0.1.0
"""

import binascii
from pathlib import Path

from ghostfi.logging import get_logger
from ghostfi.zk.errors import ProofArtifactMissing, ProofDecodeError, WorkspaceIoError
from ghostfi.zk.models import Proof, ProofRequest, VerificationResult


logger = get_logger(__name__)


def read_proof_artifact(path: Path) -> bytes:
    """
    Read and hex-decode a proof artifact.

    Raises:
        ProofArtifactMissing: If nargo did not leave a proof at ``path``
        WorkspaceIoError: If the file exists but cannot be read
        ProofDecodeError: If the content is not hex
    """
    try:
        proof_hex = path.read_text(encoding="ascii")
    except FileNotFoundError as e:
        raise ProofArtifactMissing(f"No proof artifact at {path}") from e
    except UnicodeDecodeError as e:
        raise ProofDecodeError(f"Proof artifact {path} is not hex text") from e
    except OSError as e:
        raise WorkspaceIoError(f"Failed to read proof artifact {path}: {e}") from e

    proof_hex = proof_hex.strip().removeprefix("0x")
    try:
        proof_bytes = binascii.unhexlify(proof_hex)
    except (binascii.Error, ValueError) as e:
        raise ProofDecodeError(f"Proof artifact {path} is not valid hex: {e}") from e

    logger.debug("proof_artifact_read", path=str(path), proof_bytes=len(proof_bytes))
    return proof_bytes


def decode_proof(request: ProofRequest, proof_bytes: bytes) -> Proof:
    """Assemble a proof, carrying the request's public inputs forward."""
    return Proof(
        public_key=request.public_key,
        requested_amount=request.requested_amount,
        inner=proof_bytes,
        account_id=None,
    )


def decode_verification(path: Path) -> VerificationResult:
    """
    Produce the verification outcome.

    nargo's zero exit status is the verification signal; the artifact only
    has to still be present and well formed.
    """
    read_proof_artifact(path)
    return VerificationResult(valid=True)
