"""
Identity Module
===============

Passport attribute extraction feeding ``PassportHeuristic`` claims.
"""

from ghostfi.identity.mrz import (
    Document,
    IdentityExtractor,
    MRZError,
    MRZTextExtractor,
    check_digit,
    parse_mrz,
    passport_claim,
)

__all__ = [
    "Document",
    "IdentityExtractor",
    "MRZError",
    "MRZTextExtractor",
    "check_digit",
    "parse_mrz",
    "passport_claim",
]
