"""
GhostFi Prover Library
======================

Zero-knowledge eligibility proofs for undisclosed lending heuristics.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - zk: Proof orchestration engine (encode, run nargo, decode)
    - ledger: Lending contract client (mock)
    - identity: Passport MRZ attribute extraction

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "GhostFi Team"

from ghostfi.config import settings
from ghostfi.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
