from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from wsops.core.remote import RetryPolicy  # noqa: E402


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by a RetryPolicy built with the `policy` fixture."""
    return []


@pytest.fixture
def policy(sleeps: list[float]) -> RetryPolicy:
    """A retry policy that records delays instead of sleeping."""
    return RetryPolicy(max_attempts=3, base_delay=0.5, max_delay=2.0, sleep=sleeps.append)
