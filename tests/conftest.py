"""
Test Configuration
==================

Pytest fixtures for GhostFi tests.
"""

import os
import stat
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import base58
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["GHOSTFI_ENVIRONMENT"] = "testing"
os.environ["GHOSTFI_LEDGER_MODE"] = "mock"

from ghostfi.config import EngineSettings, Settings  # noqa: E402


# Stub nargo bodies. The stub runs with cwd = circuit workspace and
# argv: prove|verify --package apply --prover-name|--verifier-name <file>
PROVE_OK = """
printf '%s\\n' "$@" > args.txt
cp "$5" params_seen.toml
mkdir -p proofs
printf 'deadbeef' > proofs/apply.proof
"""

VERIFY_OK = """
printf '%s\\n' "$@" > args.txt
cp "$5" params_seen.toml
cp proofs/apply.proof proof_seen.hex
"""

FAIL = """
echo "circuit mismatch" >&2
exit 1
"""


@pytest.fixture
def public_key_bytes() -> bytes:
    """Raw ed25519 public key."""
    return bytes(range(1, 33))


@pytest.fixture
def public_key(public_key_bytes: bytes) -> str:
    """Textual ed25519 public key."""
    return "ed25519:" + base58.b58encode(public_key_bytes).decode()


@pytest.fixture
def circuit_workspace(tmp_path: Path) -> Path:
    """Empty circuit workspace directory."""
    workspace = tmp_path / "circuit"
    workspace.mkdir()
    return workspace


@pytest.fixture
def scratch_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect tempfile so per-call workspaces can be inspected."""
    import tempfile

    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture
def stub_engine(tmp_path: Path, circuit_workspace: Path) -> Callable[..., Settings]:
    """
    Factory writing a stub nargo script and returning settings that use it.

    Usage:
        settings = stub_engine(PROVE_OK)
    """

    def make(body: str, timeout_seconds: float = 30.0) -> Settings:
        script = tmp_path / "nargo-stub"
        script.write_text("#!/bin/sh\n" + body)
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return Settings(
            circuit_workspace=circuit_workspace,
            engine=EngineSettings(binary=str(script), timeout_seconds=timeout_seconds),
        )

    return make


@pytest_asyncio.fixture
async def prover_client() -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the Prover Service."""
    from services.prover.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
