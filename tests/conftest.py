"""Shared fixtures."""

from __future__ import annotations

import pytest

from swarm_obstacles.utils import setup_logger


@pytest.fixture(autouse=True)
def default_logger():
    """Loaded settings reconfigure the package logger; restore it after each test."""
    yield
    setup_logger()
