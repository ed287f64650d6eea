"""
Pytest configuration and shared fixtures for opendex-launcher tests.
"""

import pytest

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.archives import (
    launcher_zip,
    launcher_zip_without_exec_bit,
)
from tests.fixtures.directories import (
    home_dir,
    versions_dir,
)

from opendex_launcher.core.platform import PlatformInfo


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def linux_platform() -> PlatformInfo:
    """Linux on x86-64."""
    return PlatformInfo("linux", "amd64")


@pytest.fixture
def windows_platform() -> PlatformInfo:
    """Windows on x86-64."""
    return PlatformInfo("windows", "amd64")


@pytest.fixture
def darwin_platform() -> PlatformInfo:
    """macOS on Apple silicon."""
    return PlatformInfo("darwin", "arm64")
