"""
Unit Tests for the Proof Orchestrator
=====================================

End-to-end prove/verify calls against a stub nargo script.

Version: 0.1.0
"""

import asyncio
import os
import threading
import tomllib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from ghostfi.zk import (
    NargoProofEngine,
    PassportHeuristic,
    ProcessCancelledError,
    ProcessExecutionError,
    ProcessSpawnError,
    ProcessTimeoutError,
    Proof,
    ProofArtifactMissing,
    ProofDecodeError,
    ProofRequest,
    ProveCommand,
    SimpleHeuristic,
    VerificationResult,
    VerifyCommand,
    execute,
)
from ghostfi.zk.errors import EncodingViolation, InvalidPublicKey
from ghostfi.zk.orchestrator import artifact_lock
from tests.conftest import FAIL, PROVE_OK, VERIFY_OK


@pytest.fixture
def request_(public_key: str) -> ProofRequest:
    return ProofRequest(
        public_key=public_key,
        requested_amount=1500,
        heuristics=[SimpleHeuristic(balance=10_000), PassportHeuristic(country="GBR")],
    )


class TestProve:
    """Tests for the prove path."""

    def test_round_trip(self, stub_engine, request_: ProofRequest) -> None:
        proof = execute(stub_engine(PROVE_OK), ProveCommand(request_))

        assert isinstance(proof, Proof)
        assert proof.inner == bytes([0xDE, 0xAD, 0xBE, 0xEF])
        assert proof.public_key == request_.public_key
        assert proof.requested_amount == request_.requested_amount
        assert proof.account_id is None

    def test_invocation_contract(
        self,
        stub_engine,
        circuit_workspace: Path,
        request_: ProofRequest,
    ) -> None:
        execute(stub_engine(PROVE_OK), ProveCommand(request_))

        args = (circuit_workspace / "args.txt").read_text().splitlines()
        assert args[:4] == ["prove", "--package", "apply", "--prover-name"]
        assert args[4].endswith("Params.toml")

        params = tomllib.loads((circuit_workspace / "params_seen.toml").read_text())
        assert params["requested_amount"] == "1500"
        assert params["params"][0]["params"][0] == "10000"
        assert params["params"][1]["id"] == 2

    def test_vacuous_request(self, stub_engine, public_key: str) -> None:
        proof = execute(
            stub_engine(PROVE_OK),
            ProveCommand(ProofRequest(public_key=public_key, requested_amount=1)),
        )
        assert proof.inner == b"\xde\xad\xbe\xef"

    def test_engine_failure(self, stub_engine, request_: ProofRequest) -> None:
        with pytest.raises(ProcessExecutionError, match="circuit mismatch"):
            execute(stub_engine(FAIL), ProveCommand(request_))

    def test_missing_artifact(self, stub_engine, request_: ProofRequest) -> None:
        with pytest.raises(ProofArtifactMissing):
            execute(stub_engine("exit 0\n"), ProveCommand(request_))

    def test_stale_artifact_is_not_reused(
        self,
        stub_engine,
        circuit_workspace: Path,
        request_: ProofRequest,
    ) -> None:
        stale = circuit_workspace / "proofs" / "apply.proof"
        stale.parent.mkdir()
        stale.write_text("cafe")

        with pytest.raises(ProofArtifactMissing):
            execute(stub_engine("exit 0\n"), ProveCommand(request_))

    def test_invalid_hex_artifact(self, stub_engine, request_: ProofRequest) -> None:
        body = "mkdir -p proofs\nprintf 'not-hex' > proofs/apply.proof\n"
        with pytest.raises(ProofDecodeError):
            execute(stub_engine(body), ProveCommand(request_))

    def test_spawn_failure(self, circuit_workspace: Path, request_: ProofRequest) -> None:
        from ghostfi.config import EngineSettings, Settings

        settings = Settings(
            circuit_workspace=circuit_workspace,
            engine=EngineSettings(binary=str(circuit_workspace / "no-nargo")),
        )
        with pytest.raises(ProcessSpawnError):
            execute(settings, ProveCommand(request_))

    def test_timeout(self, stub_engine, request_: ProofRequest) -> None:
        with pytest.raises(ProcessTimeoutError):
            execute(stub_engine("exec sleep 10\n", timeout_seconds=0.2), ProveCommand(request_))

    def test_encoding_errors_happen_before_spawn(
        self,
        stub_engine,
        circuit_workspace: Path,
        public_key: str,
    ) -> None:
        duplicate = ProofRequest(
            public_key=public_key,
            requested_amount=1,
            heuristics=[SimpleHeuristic(balance=1), SimpleHeuristic(balance=2)],
        )
        with pytest.raises(EncodingViolation):
            execute(stub_engine(PROVE_OK), ProveCommand(duplicate))
        with pytest.raises(InvalidPublicKey):
            execute(
                stub_engine(PROVE_OK),
                ProveCommand(ProofRequest(public_key="ed25519:0", requested_amount=1)),
            )

        assert not (circuit_workspace / "args.txt").exists()


class TestVerify:
    """Tests for the verify path."""

    def test_verify_writes_artifact_and_succeeds(
        self,
        stub_engine,
        circuit_workspace: Path,
        public_key: str,
    ) -> None:
        proof = Proof(public_key=public_key, requested_amount=77, inner=b"\xca\xfe")
        result = execute(stub_engine(VERIFY_OK), VerifyCommand(proof))

        assert result == VerificationResult(valid=True)
        assert (circuit_workspace / "proof_seen.hex").read_text() == "cafe"

        args = (circuit_workspace / "args.txt").read_text().splitlines()
        assert args[:4] == ["verify", "--package", "apply", "--verifier-name"]

        params = tomllib.loads((circuit_workspace / "params_seen.toml").read_text())
        assert params == {
            "public_key": list(range(1, 33)),
            "requested_amount": "77",
        }

    def test_verify_failure(self, stub_engine, public_key: str) -> None:
        proof = Proof(public_key=public_key, requested_amount=77, inner=b"\x01")
        with pytest.raises(ProcessExecutionError, match="circuit mismatch"):
            execute(stub_engine(FAIL), VerifyCommand(proof))


class TestWorkspaceCleanup:
    """The per-call temporary workspace never outlives the call."""

    def test_cleanup_after_success(
        self,
        stub_engine,
        scratch_dir: Path,
        request_: ProofRequest,
    ) -> None:
        execute(stub_engine(PROVE_OK), ProveCommand(request_))
        assert list(scratch_dir.iterdir()) == []

    @pytest.mark.parametrize(
        "body, error",
        [
            (FAIL, ProcessExecutionError),
            ("exit 0\n", ProofArtifactMissing),
            ("mkdir -p proofs\nprintf 'zz' > proofs/apply.proof\n", ProofDecodeError),
        ],
    )
    def test_cleanup_after_prove_failure(
        self,
        stub_engine,
        scratch_dir: Path,
        request_: ProofRequest,
        body: str,
        error: type[Exception],
    ) -> None:
        with pytest.raises(error):
            execute(stub_engine(body), ProveCommand(request_))
        assert list(scratch_dir.iterdir()) == []

    def test_cleanup_after_verify_success(
        self,
        stub_engine,
        scratch_dir: Path,
        public_key: str,
    ) -> None:
        proof = Proof(public_key=public_key, requested_amount=5, inner=b"\x01\x02")
        execute(stub_engine(VERIFY_OK), VerifyCommand(proof))
        assert list(scratch_dir.iterdir()) == []

    # Verify fails after the proof artifact has already been written
    @pytest.mark.parametrize(
        "body, error",
        [
            (FAIL, ProcessExecutionError),
            ("rm proofs/apply.proof\n", ProofArtifactMissing),
            ("printf 'zz' > proofs/apply.proof\n", ProofDecodeError),
            ("exec sleep 10\n", ProcessTimeoutError),
        ],
    )
    def test_cleanup_after_verify_failure(
        self,
        stub_engine,
        scratch_dir: Path,
        public_key: str,
        body: str,
        error: type[Exception],
    ) -> None:
        proof = Proof(public_key=public_key, requested_amount=5, inner=b"\x01\x02")
        with pytest.raises(error):
            execute(stub_engine(body, timeout_seconds=0.5), VerifyCommand(proof))
        assert list(scratch_dir.iterdir()) == []


class TestSharedArtifact:
    """Concurrent calls against one workspace do not see each other's proofs."""

    def test_lock_is_per_path(self, tmp_path: Path) -> None:
        first = artifact_lock(tmp_path / "a.proof")
        assert artifact_lock(tmp_path / "a.proof") is first
        assert artifact_lock(tmp_path / "b.proof") is not first

    def test_concurrent_proves(self, stub_engine, public_key: str) -> None:
        # Proof content is the requested amount, so crossed wires show up
        body = """
amount=$(sed -n 's/^requested_amount = "\\(.*\\)"$/\\1/p' "$5")
mkdir -p proofs
printf '%08x' "$amount" > proofs/apply.proof
sleep 0.1
"""
        engine = NargoProofEngine(stub_engine(body))
        requests = [
            ProofRequest(public_key=public_key, requested_amount=amount)
            for amount in range(1, 7)
        ]

        with ThreadPoolExecutor(max_workers=6) as pool:
            proofs = list(pool.map(engine.prove, requests))

        for request, proof in zip(requests, proofs):
            assert proof.inner == request.requested_amount.to_bytes(4, "big")

    def test_interleaved_prove_and_verify(
        self,
        stub_engine,
        circuit_workspace: Path,
        public_key: str,
    ) -> None:
        # Proves write the amount as the proof; verifies record the proof
        # they found on disk under their own amount
        body = """
amount=$(sed -n 's/^requested_amount = "\\(.*\\)"$/\\1/p' "$5")
if [ "$1" = prove ]; then
    mkdir -p proofs
    printf '%08x' "$amount" > proofs/apply.proof
    sleep 0.05
else
    sleep 0.05
    cp proofs/apply.proof "seen-$amount.hex"
fi
"""
        engine = NargoProofEngine(stub_engine(body))
        requests = [
            ProofRequest(public_key=public_key, requested_amount=amount)
            for amount in range(1, 6)
        ]
        proofs = [
            Proof(
                public_key=public_key,
                requested_amount=amount,
                inner=(amount * 1000).to_bytes(4, "big"),
            )
            for amount in range(101, 106)
        ]

        with ThreadPoolExecutor(max_workers=10) as pool:
            futures = []
            for request, proof in zip(requests, proofs):
                futures.append(pool.submit(engine.prove, request))
                futures.append(pool.submit(engine.verify, proof))
            results = [future.result() for future in futures]

        for request, generated in zip(requests, results[0::2]):
            assert generated.inner == request.requested_amount.to_bytes(4, "big")
        for proof, result in zip(proofs, results[1::2]):
            assert result.valid is True
            seen = (circuit_workspace / f"seen-{proof.requested_amount}.hex").read_text()
            assert seen == proof.inner.hex()


class TestNargoProofEngine:
    """Tests for the engine capability wrapper."""

    def test_prove_and_verify(self, stub_engine, request_: ProofRequest) -> None:
        engine = NargoProofEngine(stub_engine(PROVE_OK))
        proof = engine.prove(request_)

        assert proof.inner == b"\xde\xad\xbe\xef"
        assert engine.verify(proof).valid is True

    @pytest.mark.asyncio
    async def test_async_prove_runs_off_loop(self, stub_engine, request_: ProofRequest) -> None:
        engine = NargoProofEngine(stub_engine(PROVE_OK))
        proof = await engine.aprove(request_)
        result = await engine.averify(proof)

        assert proof.requested_amount == 1500
        assert result.valid is True

    @pytest.mark.asyncio
    async def test_cancelled_prove_kills_nargo(
        self,
        stub_engine,
        circuit_workspace: Path,
        scratch_dir: Path,
        request_: ProofRequest,
    ) -> None:
        settings = stub_engine("echo $$ > nargo.pid\nexec sleep 30\n")
        engine = NargoProofEngine(settings)
        pid_file = circuit_workspace / "nargo.pid"

        task = asyncio.create_task(engine.aprove(request_))
        for _ in range(100):
            if pid_file.exists() and pid_file.read_text().strip():
                break
            await asyncio.sleep(0.05)
        pid = int(pid_file.read_text())

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        lock = artifact_lock(settings.proof_file)
        for _ in range(100):
            if not lock.locked() and not any(scratch_dir.iterdir()):
                break
            await asyncio.sleep(0.05)

        assert not lock.locked()
        assert list(scratch_dir.iterdir()) == []
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)

        # The shared artifact is free for the next call
        proof = await NargoProofEngine(stub_engine(PROVE_OK)).aprove(request_)
        assert proof.inner == b"\xde\xad\xbe\xef"

    def test_cancel_event_fails_call(self, stub_engine, request_: ProofRequest) -> None:
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ProcessCancelledError):
            NargoProofEngine(stub_engine(PROVE_OK)).prove(request_, cancel)
