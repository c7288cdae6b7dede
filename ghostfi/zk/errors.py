"""
Proof Engine Errors
===================

Classified failures of a single orchestration call. None of these are
fatal to the process; each is scoped to the call that raised it.

Version: 0.1.0
"""


class ProofEngineError(Exception):
    """Base class for every failure raised by the proof engine."""

    code = "proof_engine_error"


class InvalidPublicKey(ProofEngineError):
    """The textual public key could not be parsed into 32 key bytes."""

    code = "invalid_public_key"


class EncodingViolation(ProofEngineError):
    """A request cannot be placed into the fixed parameter table."""

    code = "encoding_violation"


class WorkspaceIoError(ProofEngineError):
    """Creating, writing or reading an exchange file failed."""

    code = "workspace_io_error"


class ProcessSpawnError(ProofEngineError):
    """The engine executable could not be launched."""

    code = "process_spawn_error"


class ProcessExecutionError(ProofEngineError):
    """The engine ran but exited unsuccessfully."""

    code = "process_execution_error"

    def __init__(self, stderr: str, returncode: int | None = None) -> None:
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(f"nargo failed (exit {returncode}), stderr: {stderr}")


class ProcessTimeoutError(ProcessExecutionError):
    """The engine did not exit within the configured timeout and was killed."""

    code = "process_timeout"

    def __init__(self, stderr: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(stderr, returncode=None)
        self.args = (f"nargo timed out after {timeout}s, stderr: {stderr}",)


class ProcessCancelledError(ProcessExecutionError):
    """The call was cancelled; the engine was killed or never launched."""

    code = "process_cancelled"

    def __init__(self, stderr: str = "") -> None:
        super().__init__(stderr, returncode=None)
        self.args = (f"nargo cancelled, stderr: {stderr}",)


class ProofArtifactMissing(ProofEngineError):
    """The engine exited successfully but no proof artifact exists."""

    code = "proof_artifact_missing"


class ProofDecodeError(ProofEngineError):
    """The proof artifact is not valid hex."""

    code = "proof_decode_error"
