"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.test_inputs import (
    get_demo_inputs,
    get_simple_inputs,
    get_used_property_inputs,
)


@pytest.fixture
def simple_inputs():
    """Get the hand-checkable single-loan inputs."""
    return get_simple_inputs()


@pytest.fixture
def demo_inputs():
    """Get the demo RC apartment inputs."""
    return get_demo_inputs()


@pytest.fixture
def used_inputs():
    """Get the used wooden building with two loans."""
    return get_used_property_inputs()
