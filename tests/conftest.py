"""
Pytest configuration and shared fixtures for binkit tests.
"""

import logging

import pytest

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.directories import (
    runner_dirs,
    settings,
    context,
    remote_cache_root,
)

from binkit.core.platform import clear_platform_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_platform_cache():
    """Re-detect the platform in every test."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def isolated_path(monkeypatch) -> str:
    """Restore PATH after tests that publish directories onto it."""
    original = "/usr/bin"
    monkeypatch.setenv("PATH", original)
    return original


@pytest.fixture
def binkit_logs(caplog):
    """Capture binkit log records at DEBUG level."""
    caplog.set_level(logging.DEBUG, logger="binkit")
    return caplog
