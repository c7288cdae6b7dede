"""
Passport MRZ Parsing
====================

Adapts the ``mrz`` library's TD3 checker to a ``Document`` and turns
the document into a passport heuristic claim.

OCR and forgery detection happen upstream; extractors here receive the
recognized text.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from string import ascii_uppercase, digits

from mrz.base.functions import hash_string
from mrz.checker.td3 import TD3CodeChecker
from pydantic import BaseModel, Field

from ghostfi.logging import get_logger
from ghostfi.zk.models import PassportHeuristic


logger = get_logger(__name__)

TD3_LINE_LENGTH = 44
MRZ_ALPHABET = frozenset(ascii_uppercase + digits + "<")


class MRZError(ValueError):
    """The machine readable zone is malformed or fails a check digit."""


class Document(BaseModel):
    """Identity attributes read from a passport MRZ."""

    document_type: str = Field(..., description="e.g. P")
    issuing_country: str
    surname: str
    given_names: str
    document_number: str
    nationality: str
    birth_date: str = Field(..., description="YYMMDD")
    sex: str
    expiry_date: str = Field(..., description="YYMMDD")
    optional_data: str = ""


def check_digit(field: str) -> str:
    """ICAO 9303 check digit of ``field``."""
    if not set(field) <= MRZ_ALPHABET:
        raise MRZError(f"Invalid MRZ characters in {field!r}")
    return hash_string(field)


def _clean(field: str) -> str:
    return field.replace("<", " ").strip()


def _failed_checks(second: str) -> list[str]:
    """Names of the second-line fields whose check digit does not match."""
    checks = {
        "document number": (second[0:9], second[9]),
        "birth date": (second[13:19], second[19]),
        "expiry date": (second[21:27], second[27]),
        "optional data": (second[28:42], second[42]),
        "composite": (second[0:10] + second[13:20] + second[21:43], second[43]),
    }
    return [
        name
        for name, (field, digit) in checks.items()
        if check_digit(field) != digit and not (digit == "<" and set(field) <= {"<"})
    ]


def parse_mrz(text: str) -> Document:
    """
    Parse a TD3 (passport) MRZ.

    Args:
        text: The two MRZ lines, newline separated

    Raises:
        MRZError: Wrong shape, invalid characters or failed check digits
    """
    lines = [line.strip().replace(" ", "").upper() for line in text.strip().splitlines()]
    lines = [line for line in lines if line]
    if len(lines) != 2 or any(len(line) != TD3_LINE_LENGTH for line in lines):
        raise MRZError(f"TD3 MRZ needs two lines of {TD3_LINE_LENGTH} characters")

    first, second = lines
    if first[0] != "P":
        raise MRZError(f"Not a passport MRZ (document type {first[0:2]!r})")
    if not set(first + second) <= MRZ_ALPHABET:
        raise MRZError("MRZ contains characters outside A-Z, 0-9 and <")

    checker = TD3CodeChecker("\n".join(lines))
    if not checker:
        failed = _failed_checks(second) or ["document fields"]
        raise MRZError(f"Check digit mismatch for {', '.join(failed)}")

    fields = checker.fields()
    return Document(
        document_type=_clean(fields.document_type),
        issuing_country=_clean(fields.country),
        surname=_clean(fields.surname),
        given_names=_clean(fields.name),
        document_number=_clean(fields.document_number),
        nationality=_clean(fields.nationality),
        birth_date=fields.birth_date,
        sex=_clean(fields.sex) or "X",
        expiry_date=fields.expiry_date,
        optional_data=_clean(fields.optional_data),
    )


class IdentityExtractor(ABC):
    """Source of identity attributes for a passport heuristic."""

    @abstractmethod
    def extract_identity_attributes(self) -> Document:
        """Extract the applicant's identity document."""
        ...


class MRZTextExtractor(IdentityExtractor):
    """
    Extracts the document from OCR text of a passport page.

    The MRZ is taken from the last two non-empty lines of the text.
    """

    def __init__(self, ocr_text: str) -> None:
        self.ocr_text = ocr_text

    def extract_identity_attributes(self) -> Document:
        lines = [line for line in self.ocr_text.splitlines() if line.strip()]
        document = parse_mrz("\n".join(lines[-2:]))
        logger.info(
            "identity_extracted",
            document_type=document.document_type,
            issuing_country=document.issuing_country,
        )
        return document


def passport_claim(document: Document) -> PassportHeuristic:
    """Heuristic claim asserting the document's issuing country."""
    return PassportHeuristic(country=document.issuing_country)
