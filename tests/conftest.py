"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from tests import make_store


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests that start background threads (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def store():
    """In-memory SQLite EvidenceStore with the schema created."""
    evidence_store = make_store()
    yield evidence_store
    evidence_store.dispose()
