"""
Pytest configuration and fixtures.
"""
import pytest
import sys
import os

# Add the parent directory to path so we can import calcpad
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from calcpad.state import AddDigit, ChooseOperation  # noqa: E402


@pytest.fixture
def keys():
    """Build input events from keypad labels, e.g. keys("12+3")."""
    def _keys(labels: str):
        return [
            AddDigit(label) if label in "0123456789." else ChooseOperation(label)
            for label in labels
        ]
    return _keys
