"""
GhostFi Test Suite
==================

Test organization:
- tests/unit/              - Unit tests (stub nargo, no network)
- tests/services/prover/   - HTTP API tests

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
    pytest --cov=ghostfi            # With coverage
"""
