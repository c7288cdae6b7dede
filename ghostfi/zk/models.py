"""
Proof Engine Data Models
========================

Pydantic models for heuristic claims, proof requests, the encoded
parameter table consumed by nargo, and the resulting proof artifacts.

Version: 0.1.0
"""

from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)


U64_MAX = 2**64 - 1

# Fields per slot in the circuit's heuristic struct
PARAMS_PER_SLOT = 16

# Upper bound on the number of heuristic types the circuit can address
MAX_HEURISTICS = 8

PUBLIC_KEY_LENGTH = 32


# =============================================================================
# Heuristic Claims
# =============================================================================


class SimpleHeuristic(BaseModel):
    """Claim that the applicant holds at least ``balance``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["simple"] = "simple"
    balance: int = Field(..., ge=0, le=U64_MAX, description="Minimum balance")

    @property
    def discriminant(self) -> int:
        return HEURISTIC_SLOTS[type(self)]

    def slot_fields(self) -> dict[int, str]:
        """Populated slot fields, by field index."""
        return {0: str(self.balance)}


class PassportHeuristic(BaseModel):
    """Claim that the applicant holds a passport issued by ``country``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["passport"] = "passport"
    country: str = Field(
        ...,
        min_length=1,
        max_length=3,
        description="ICAO 9303 issuing state code, e.g. GBR or D",
    )

    @field_validator("country")
    @classmethod
    def country_must_be_alpha(cls, v: str) -> str:
        if not (v.isascii() and v.isalpha()):
            raise ValueError(f"Country code {v!r} must be ASCII letters")
        return v.upper()

    @property
    def discriminant(self) -> int:
        return HEURISTIC_SLOTS[type(self)]

    def slot_fields(self) -> dict[int, str]:
        """Country code packed big-endian into a single field element."""
        return {0: str(int.from_bytes(self.country.encode("ascii"), "big"))}


HeuristicClaim = Annotated[
    SimpleHeuristic | PassportHeuristic,
    Field(discriminator="kind"),
]

# Discriminant of each heuristic type; slot ``id - 1`` in the table.
# Order of declaration is the discriminant order.
HEURISTIC_SLOTS: dict[type[BaseModel], int] = {
    SimpleHeuristic: 1,
    PassportHeuristic: 2,
}

# Authoritative table size, shared by validation and allocation
SLOT_COUNT = len(HEURISTIC_SLOTS)


def _check_slot_table() -> None:
    if SLOT_COUNT > MAX_HEURISTICS:
        raise RuntimeError(
            f"{SLOT_COUNT} heuristic types declared, circuit supports {MAX_HEURISTICS}"
        )
    if sorted(HEURISTIC_SLOTS.values()) != list(range(1, SLOT_COUNT + 1)):
        raise RuntimeError(
            f"Heuristic discriminants must be 1..{SLOT_COUNT}, got {sorted(HEURISTIC_SLOTS.values())}"
        )


_check_slot_table()


# =============================================================================
# Requests and Proofs
# =============================================================================


class ProofRequest(BaseModel):
    """Client request to prove a set of heuristics for a loan amount."""

    model_config = ConfigDict(frozen=True)

    public_key: str = Field(..., description="Textual key, e.g. ed25519:<base58>")
    requested_amount: int = Field(..., ge=0, le=U64_MAX)
    heuristics: list[HeuristicClaim] = Field(
        default_factory=list,
        validation_alias=AliasChoices("heuristics", "params"),
    )


class Proof(BaseModel):
    """
    A proof produced by the engine.

    ``inner`` is the raw proof; it travels as hex in JSON.
    ``account_id`` is filled in by the caller before ledger submission.
    """

    public_key: str
    requested_amount: int = Field(..., ge=0, le=U64_MAX)
    inner: bytes
    account_id: str | None = None

    @field_validator("inner", mode="before")
    @classmethod
    def inner_from_wire(cls, v: Any) -> Any:
        if isinstance(v, str):
            text = v.strip().removeprefix("0x")
            try:
                return bytes.fromhex(text)
            except ValueError as e:
                raise ValueError(f"inner is not valid hex: {e}") from e
        if isinstance(v, list):
            return bytes(v)
        return v

    @field_serializer("inner", when_used="json")
    def inner_to_hex(self, inner: bytes) -> str:
        return inner.hex()


class VerificationResult(BaseModel):
    """Outcome of running the verifier against a proof."""

    model_config = ConfigDict(frozen=True)

    valid: bool


# =============================================================================
# Encoded Parameter Table
# =============================================================================


class EncodedSlot(BaseModel):
    """One positional heuristic entry in the circuit input."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(default=0, ge=0, le=MAX_HEURISTICS)
    params: tuple[str, ...] = Field(default=("0",) * PARAMS_PER_SLOT)

    @field_validator("params")
    @classmethod
    def params_must_be_full_width(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(v) != PARAMS_PER_SLOT:
            raise ValueError(f"Slot needs {PARAMS_PER_SLOT} params, got {len(v)}")
        for field in v:
            if not field.isdigit():
                raise ValueError(f"Slot param {field!r} is not a decimal string")
        return v

    @classmethod
    def empty(cls) -> "EncodedSlot":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.id == 0 and all(p == "0" for p in self.params)


class VerificationTable(BaseModel):
    """Public inputs written for a verify call."""

    model_config = ConfigDict(frozen=True)

    public_key: tuple[int, ...]
    requested_amount: str

    @field_validator("public_key")
    @classmethod
    def key_must_be_32_bytes(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if len(v) != PUBLIC_KEY_LENGTH or any(not 0 <= b <= 255 for b in v):
            raise ValueError(f"public_key must be {PUBLIC_KEY_LENGTH} bytes")
        return v

    @field_validator("requested_amount")
    @classmethod
    def amount_must_be_decimal(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError(f"requested_amount {v!r} is not a decimal string")
        return v


class EncodedParameterTable(VerificationTable):
    """
    Full prover input.

    ``params[i]`` holds the claim whose discriminant is ``i + 1``, or an
    empty slot when no such claim was supplied.
    """

    params: tuple[EncodedSlot, ...]

    @model_validator(mode="after")
    def slots_must_be_positional(self) -> "EncodedParameterTable":
        if len(self.params) != SLOT_COUNT:
            raise ValueError(f"Table needs {SLOT_COUNT} slots, got {len(self.params)}")
        for index, slot in enumerate(self.params):
            if slot.id not in (0, index + 1):
                raise ValueError(f"Slot {index} holds heuristic id {slot.id}")
        return self

    @property
    def slots(self) -> tuple[EncodedSlot, ...]:
        return self.params
