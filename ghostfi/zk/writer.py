"""
Parameter Writer
================

Serializes encoded tables into the TOML parameter files nargo reads and
writes proof artifacts (hex) where nargo expects them.

Version: 0.1.0
"""

from pathlib import Path

import tomli_w

from ghostfi.logging import get_logger
from ghostfi.zk.errors import EncodingViolation, WorkspaceIoError
from ghostfi.zk.models import VerificationTable


logger = get_logger(__name__)


def render_parameters(table: VerificationTable) -> str:
    """
    Render a table as TOML.

    Works for both the full prover table and the verifier's public inputs.
    """
    try:
        return tomli_w.dumps(table.model_dump(mode="json"))
    except (TypeError, ValueError) as e:
        raise EncodingViolation(f"Parameter table is not serializable: {e}") from e


def write_parameters(table: VerificationTable, path: Path) -> Path:
    """Write the parameter file consumed by nargo."""
    document = render_parameters(table)
    try:
        path.write_text(document, encoding="utf-8")
    except OSError as e:
        raise WorkspaceIoError(f"Failed to write parameters to {path}: {e}") from e

    logger.debug("parameters_written", path=str(path), size=len(document))
    return path


def write_proof_artifact(proof_bytes: bytes, path: Path) -> Path:
    """Write hex-encoded proof bytes where the verifier will look for them."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(proof_bytes.hex(), encoding="ascii")
    except OSError as e:
        raise WorkspaceIoError(f"Failed to write proof artifact {path}: {e}") from e

    logger.debug("proof_artifact_written", path=str(path), proof_bytes=len(proof_bytes))
    return path
