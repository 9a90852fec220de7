"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import pytest

from core.config_loader import get_config
from core.exam.mapping import clear_mapping_cache


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as using a SQLite job store"
    )


@pytest.fixture(autouse=True)
def reset_process_caches():
    """Drop process-wide caches so tests never see each other's config or mapping."""
    get_config.cache_clear()
    clear_mapping_cache()
    yield
    get_config.cache_clear()
    clear_mapping_cache()
