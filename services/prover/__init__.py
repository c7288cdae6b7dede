"""
Prover Service
==============

HTTP front end for the proof orchestration engine.

This service provides:
- Proof generation for undisclosed lending heuristics
- Proof verification followed by loan release on the ledger

Version: 0.1.0
"""

__version__ = "0.1.0"
