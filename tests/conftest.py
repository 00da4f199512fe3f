"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings validation
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FILE", "")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from decimal import Decimal

import pytest

from levelpay.services.distribution.schedule import CommissionSchedule


@pytest.fixture
def schedule_factory():
    """
    Build CommissionSchedule objects.

    Returns:
        Callable taking percentages (as strings) and schedule flags
    """
    def _make(percentages, **flags) -> CommissionSchedule:
        return CommissionSchedule(
            max_levels=len(percentages),
            level_percentages=tuple(Decimal(p) for p in percentages),
            **flags,
        )

    return _make
