"""
Process Runner
==============

Builds and runs the nargo invocation for a prove or verify call.

The call blocks until nargo exits. Async callers must run it on a worker
thread (see ``ProofEngine.aprove``) and may pass a ``threading.Event``
that kills the child when set.

Version: 0.1.0
"""

import subprocess
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ghostfi.logging import get_logger
from ghostfi.zk.errors import (
    ProcessCancelledError,
    ProcessExecutionError,
    ProcessSpawnError,
    ProcessTimeoutError,
)


logger = get_logger(__name__)

# How often a running child is checked for cancellation
CANCEL_POLL_SECONDS = 0.05


class EngineAction(str, Enum):
    """Engine subcommands, with the flag naming their parameter file."""

    PROVE = "prove"
    VERIFY = "verify"

    @property
    def file_flag(self) -> str:
        if self is EngineAction.PROVE:
            return "--prover-name"
        return "--verifier-name"


@dataclass(frozen=True)
class EngineResult:
    """Captured output of a successful engine run."""

    returncode: int
    stdout: str
    stderr: str
    duration_ms: int


def build_command(
    binary: str,
    action: EngineAction,
    package: str,
    parameter_file: Path,
) -> list[str]:
    """
    Build the argv for an engine call.

    Example:
        >>> build_command("nargo", EngineAction.PROVE, "apply", Path("/tmp/x/Params.toml"))
        ['nargo', 'prove', '--package', 'apply', '--prover-name', '/tmp/x/Params.toml']
    """
    return [
        binary,
        action.value,
        "--package",
        package,
        action.file_flag,
        str(parameter_file),
    ]


def _kill(process: subprocess.Popen[str]) -> str:
    """Kill and reap the child, returning whatever it wrote to stderr."""
    process.kill()
    _, stderr = process.communicate()
    return stderr or ""


def run_engine(
    argv: list[str],
    cwd: Path,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> EngineResult:
    """
    Run the engine and wait for it to exit.

    Args:
        argv: Command line from ``build_command``
        cwd: Circuit workspace directory
        timeout: Seconds before the child is killed
        cancel: Set from another thread to kill the child early

    Returns:
        EngineResult for a zero exit status

    Raises:
        ProcessSpawnError: If the executable cannot be launched
        ProcessTimeoutError: If the child outlives ``timeout``
        ProcessCancelledError: If ``cancel`` is set before the child exits
        ProcessExecutionError: On any non-zero exit status
    """
    if cancel is not None and cancel.is_set():
        raise ProcessCancelledError()

    logger.debug("engine_executing", argv=argv, cwd=str(cwd), timeout=timeout)
    start_time = time.monotonic()
    deadline = None if timeout is None else start_time + timeout

    try:
        process = subprocess.Popen(
            argv,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except OSError as e:
        logger.error("engine_spawn_failed", argv=argv, cwd=str(cwd), error=str(e))
        raise ProcessSpawnError(f"Could not launch {argv[0]!r} in {cwd}: {e}") from e

    with process:
        while True:
            wait = CANCEL_POLL_SECONDS if cancel is not None else None
            if deadline is not None:
                remaining = max(deadline - time.monotonic(), 0.0)
                wait = remaining if wait is None else min(wait, remaining)
            try:
                stdout, stderr = process.communicate(timeout=wait)
                break
            except subprocess.TimeoutExpired:
                if cancel is not None and cancel.is_set():
                    stderr = _kill(process)
                    logger.warning("engine_process_cancelled", argv=argv, pid=process.pid)
                    raise ProcessCancelledError(stderr) from None
                if deadline is not None and time.monotonic() >= deadline:
                    stderr = _kill(process)
                    logger.error(
                        "engine_process_timeout",
                        argv=argv,
                        timeout=timeout,
                        stderr=stderr,
                    )
                    raise ProcessTimeoutError(stderr, timeout) from None
            except BaseException:
                _kill(process)
                raise

    duration_ms = int((time.monotonic() - start_time) * 1000)

    if process.returncode != 0:
        logger.error(
            "engine_process_failed",
            returncode=process.returncode,
            stderr=stderr,
            duration_ms=duration_ms,
        )
        raise ProcessExecutionError(stderr, process.returncode)

    logger.info("engine_process_succeeded", duration_ms=duration_ms, stdout=stdout)
    return EngineResult(
        returncode=process.returncode,
        stdout=stdout,
        stderr=stderr,
        duration_ms=duration_ms,
    )
