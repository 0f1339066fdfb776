"""
Pytest configuration for aes_modes tests.

Adds the repository root to sys.path so the top-level modules (settings,
aes_api_node, client) import without installing the project.
"""

import sys
from pathlib import Path

import pytest

_root_path = str(Path(__file__).resolve().parent.parent)
if _root_path not in sys.path:
    sys.path.insert(0, _root_path)


@pytest.fixture
def fips_key_128():
    """The FIPS 197 Appendix A.1 / B cipher key."""
    return bytes.fromhex("2b7e151628aed2a6abf7158809cf4f3c")
