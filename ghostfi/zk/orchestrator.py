"""
Proof Orchestrator
==================

Sequences encoder, writer, runner and decoder for one prove or verify
call inside a scoped temporary workspace.

Per call:
    INIT -> WORKSPACE_ALLOCATED -> PARAMETERS_WRITTEN
         -> [PROOF_ARTIFACT_WRITTEN] -> PROCESS_SPAWNED -> PROCESS_EXITED
         -> RESULT_DECODED | FAILED

nargo always reads and writes proofs at one fixed path inside the circuit
workspace, so everything touching that path runs under a per-path lock.

Usage:
    engine = NargoProofEngine()

    proof = engine.prove(request)
    result = engine.verify(proof)

    # From async code, off the event loop; cancelling the awaiting task
    # kills nargo
    proof = await engine.aprove(request)

Version: 0.1.0
"""

import asyncio
import tempfile
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ghostfi.config import Settings, get_settings
from ghostfi.logging import get_logger, log_context
from ghostfi.zk.decoder import decode_proof, decode_verification, read_proof_artifact
from ghostfi.zk.encoder import encode_request, encode_verification
from ghostfi.zk.errors import ProofEngineError, WorkspaceIoError
from ghostfi.zk.models import Proof, ProofRequest, VerificationResult
from ghostfi.zk.runner import EngineAction, build_command, run_engine
from ghostfi.zk.writer import write_parameters, write_proof_artifact


logger = get_logger(__name__)


class CallState(str, Enum):
    """Orchestration call states."""

    INIT = "init"
    WORKSPACE_ALLOCATED = "workspace_allocated"
    PARAMETERS_WRITTEN = "parameters_written"
    PROOF_ARTIFACT_WRITTEN = "proof_artifact_written"
    PROCESS_SPAWNED = "process_spawned"
    PROCESS_EXITED = "process_exited"
    RESULT_DECODED = "result_decoded"
    FAILED = "failed"


@dataclass(frozen=True)
class ProveCommand:
    """Generate a proof for a request."""

    request: ProofRequest

    @property
    def action(self) -> EngineAction:
        return EngineAction.PROVE


@dataclass(frozen=True)
class VerifyCommand:
    """Verify a previously generated proof."""

    proof: Proof

    @property
    def action(self) -> EngineAction:
        return EngineAction.VERIFY


Command = ProveCommand | VerifyCommand


# =============================================================================
# Shared proof artifact locking
# =============================================================================

_artifact_locks: dict[Path, threading.Lock] = {}
_artifact_locks_guard = threading.Lock()


def artifact_lock(path: Path) -> threading.Lock:
    """Get the lock serializing access to a proof artifact path."""
    key = path.resolve()
    with _artifact_locks_guard:
        lock = _artifact_locks.get(key)
        if lock is None:
            lock = _artifact_locks[key] = threading.Lock()
        return lock


class _CallTrace:
    """Tracks and logs the state of one orchestration call."""

    def __init__(self) -> None:
        self.state = CallState.INIT

    def advance(self, state: CallState, **fields: object) -> None:
        logger.debug("orchestration_state", previous=self.state.value, state=state.value, **fields)
        self.state = state


# =============================================================================
# Execution
# =============================================================================


def execute(
    settings: Settings,
    command: Command,
    cancel: threading.Event | None = None,
) -> Proof | VerificationResult:
    """
    Run one orchestration call.

    The temporary workspace is removed on every exit path. Setting
    ``cancel`` kills a running nargo and fails the call.

    Returns:
        Proof for a ProveCommand, VerificationResult for a VerifyCommand

    Raises:
        ProofEngineError: Classified failure; no partial result is returned
    """
    trace = _CallTrace()
    with log_context(call_id=uuid.uuid4().hex[:12], action=command.action.value):
        try:
            with tempfile.TemporaryDirectory(prefix="ghostfi-") as temp_dir:
                trace.advance(CallState.WORKSPACE_ALLOCATED, workspace=temp_dir)
                return _execute_inner(settings, command, Path(temp_dir), trace, cancel)
        except ProofEngineError as e:
            logger.warning(
                "orchestration_failed",
                failed_in=trace.state.value,
                error_code=e.code,
                error=str(e),
            )
            trace.advance(CallState.FAILED)
            raise
        except OSError as e:
            # Allocating or removing the scoped workspace itself failed
            trace.advance(CallState.FAILED)
            raise WorkspaceIoError(f"Temporary workspace failure: {e}") from e


def _execute_inner(
    settings: Settings,
    command: Command,
    workspace: Path,
    trace: _CallTrace,
    cancel: threading.Event | None,
) -> Proof | VerificationResult:
    parameter_file = workspace / settings.engine.parameter_file
    proof_file = settings.proof_file

    if isinstance(command, ProveCommand):
        table = encode_request(command.request)
    else:
        table = encode_verification(command.proof)
    write_parameters(table, parameter_file)
    trace.advance(CallState.PARAMETERS_WRITTEN, path=str(parameter_file))

    argv = build_command(
        settings.engine.binary,
        command.action,
        settings.engine.package,
        parameter_file,
    )
    logger.debug("engine_command_built", argv=argv)

    with artifact_lock(proof_file):
        if isinstance(command, VerifyCommand):
            write_proof_artifact(command.proof.inner, proof_file)
            trace.advance(CallState.PROOF_ARTIFACT_WRITTEN, path=str(proof_file))
        else:
            _discard_stale_artifact(proof_file)

        trace.advance(CallState.PROCESS_SPAWNED)
        outcome = run_engine(
            argv,
            cwd=settings.circuit_workspace,
            timeout=settings.engine.timeout_seconds,
            cancel=cancel,
        )
        trace.advance(CallState.PROCESS_EXITED, duration_ms=outcome.duration_ms)

        if isinstance(command, ProveCommand):
            result: Proof | VerificationResult = decode_proof(
                command.request,
                read_proof_artifact(proof_file),
            )
        else:
            result = decode_verification(proof_file)

    trace.advance(CallState.RESULT_DECODED)
    return result


def _discard_stale_artifact(path: Path) -> None:
    """Remove a proof left by an earlier call so it cannot be returned as ours."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise WorkspaceIoError(f"Failed to clear stale proof artifact {path}: {e}") from e


# =============================================================================
# Engine capability
# =============================================================================


class ProofEngine(ABC):
    """
    Proving/verification capability.

    Implementations are blocking; use ``aprove``/``averify`` from async code
    so a slow engine never stalls the event loop. ``cancel`` is set when the
    awaiting task is cancelled; implementations that hold external resources
    should stop and release them once it is set.
    """

    @abstractmethod
    def prove(self, request: ProofRequest, cancel: threading.Event | None = None) -> Proof:
        """Generate a proof for ``request``."""
        ...

    @abstractmethod
    def verify(self, proof: Proof, cancel: threading.Event | None = None) -> VerificationResult:
        """Verify ``proof`` against its public inputs."""
        ...

    async def aprove(self, request: ProofRequest) -> Proof:
        cancel = threading.Event()
        try:
            return await asyncio.to_thread(self.prove, request, cancel)
        except asyncio.CancelledError:
            cancel.set()
            raise

    async def averify(self, proof: Proof) -> VerificationResult:
        cancel = threading.Event()
        try:
            return await asyncio.to_thread(self.verify, proof, cancel)
        except asyncio.CancelledError:
            cancel.set()
            raise


class NargoProofEngine(ProofEngine):
    """ProofEngine backed by the nargo CLI."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        if not self.settings.circuit_workspace.exists():
            logger.warning(
                "circuit_workspace_not_found",
                path=str(self.settings.circuit_workspace),
            )

    def prove(self, request: ProofRequest, cancel: threading.Event | None = None) -> Proof:
        proof = execute(self.settings, ProveCommand(request), cancel)
        logger.info(
            "proof_generated",
            public_key=request.public_key,
            requested_amount=request.requested_amount,
            proof_bytes=len(proof.inner),
        )
        return proof

    def verify(self, proof: Proof, cancel: threading.Event | None = None) -> VerificationResult:
        result = execute(self.settings, VerifyCommand(proof), cancel)
        logger.info("proof_verified", public_key=proof.public_key, valid=result.valid)
        return result


# Global engine instance
_engine: ProofEngine | None = None


def get_proof_engine() -> ProofEngine:
    """Get the configured proof engine, creating a nargo engine on first use."""
    global _engine

    if _engine is None:
        _engine = NargoProofEngine()
    return _engine


def set_proof_engine(engine: ProofEngine) -> None:
    """Install a custom proof engine (e.g. a stub in tests)."""
    global _engine
    _engine = engine


def reset_proof_engine() -> None:
    """Reset the engine to be re-initialized."""
    global _engine
    _engine = None
