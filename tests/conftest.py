"""Pytest configuration helpers for test collection.

Ensure the project root is on sys.path so tests can import `haven_lib`
without installing it first.
"""
import sys
from pathlib import Path

import pytest


def pytest_configure(config):
    # Insert repo root (one level up from tests/) to sys.path
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def clock():
    from tests.helpers import FakeClock
    return FakeClock()


@pytest.fixture
def service(clock):
    from tests.helpers import make_service
    return make_service(clock)
