"""
Heuristic Encoder
=================

Maps a variable-length list of heuristic claims onto the fixed,
positionally-addressed parameter table the circuit expects.

Version: 0.1.0
"""

import base58

from ghostfi.logging import get_logger
from ghostfi.zk.errors import EncodingViolation, InvalidPublicKey
from ghostfi.zk.models import (
    HEURISTIC_SLOTS,
    PARAMS_PER_SLOT,
    PUBLIC_KEY_LENGTH,
    SLOT_COUNT,
    EncodedParameterTable,
    EncodedSlot,
    PassportHeuristic,
    Proof,
    ProofRequest,
    SimpleHeuristic,
    VerificationTable,
)


logger = get_logger(__name__)

ED25519_PREFIX = "ed25519"


def parse_public_key(text: str) -> bytes:
    """
    Parse a textual ed25519 key into its 32 raw bytes.

    Accepts ``ed25519:<base58>`` or a bare base58 string.

    Raises:
        InvalidPublicKey: Unknown key type, bad base58 or wrong length
    """
    key_type, sep, data = text.strip().partition(":")
    if not sep:
        key_type, data = ED25519_PREFIX, key_type
    if key_type.lower() != ED25519_PREFIX:
        raise InvalidPublicKey(f"Unsupported key type {key_type!r}, expected {ED25519_PREFIX}")
    if not data:
        raise InvalidPublicKey("Public key has no key data")

    try:
        raw = base58.b58decode(data)
    except ValueError as e:
        raise InvalidPublicKey(f"Public key is not valid base58: {e}") from e

    if len(raw) != PUBLIC_KEY_LENGTH:
        raise InvalidPublicKey(
            f"Public key must be {PUBLIC_KEY_LENGTH} bytes, got {len(raw)}"
        )
    return raw


def encode_heuristic(claim: SimpleHeuristic | PassportHeuristic) -> EncodedSlot:
    """Encode a single claim into its slot record."""
    discriminant = HEURISTIC_SLOTS.get(type(claim))
    if discriminant is None:
        raise EncodingViolation(f"No slot registered for heuristic {type(claim).__name__}")

    params = ["0"] * PARAMS_PER_SLOT
    for index, value in claim.slot_fields().items():
        if not 0 <= index < PARAMS_PER_SLOT:
            raise EncodingViolation(
                f"{type(claim).__name__} writes field {index}, slot has {PARAMS_PER_SLOT}"
            )
        params[index] = value

    return EncodedSlot(id=discriminant, params=tuple(params))


def encode_request(request: ProofRequest) -> EncodedParameterTable:
    """
    Encode a proof request into the prover parameter table.

    Duplicate discriminants are rejected rather than resolved by order.

    Raises:
        InvalidPublicKey: If the request key is malformed
        EncodingViolation: If a claim is out of range or duplicated
    """
    public_key = parse_public_key(request.public_key)

    records = sorted(
        (encode_heuristic(claim) for claim in request.heuristics),
        key=lambda slot: slot.id,
    )

    slots = [EncodedSlot.empty() for _ in range(SLOT_COUNT)]
    for record in records:
        if not 1 <= record.id <= SLOT_COUNT:
            raise EncodingViolation(
                f"Heuristic id {record.id} outside table of {SLOT_COUNT} slots"
            )
        if not slots[record.id - 1].is_empty:
            raise EncodingViolation(f"Duplicate heuristic id {record.id} in request")
        slots[record.id - 1] = record

    logger.debug(
        "proof_request_encoded",
        heuristics=[slot.id for slot in records],
        slot_count=SLOT_COUNT,
    )

    return EncodedParameterTable(
        public_key=tuple(public_key),
        requested_amount=str(request.requested_amount),
        params=tuple(slots),
    )


def encode_verification(proof: Proof) -> VerificationTable:
    """Encode the public inputs of a proof for the verifier."""
    public_key = parse_public_key(proof.public_key)
    return VerificationTable(
        public_key=tuple(public_key),
        requested_amount=str(proof.requested_amount),
    )
