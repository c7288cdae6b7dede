"""
GhostFi Services
================

Services:
- prover: HTTP front end for proof generation and verification
"""

__all__ = [
    "prover",
]
