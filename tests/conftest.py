"""
Pytest configuration for the caddyext test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Temp directory fixtures holding directives files
- CLI state reset between tests
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from caddyext.cli.config import CLIConfig
from caddyext.logging_config import setup_logging

TEST_FILES_DIR = Path(__file__).parent / "test_files"


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    os.environ.setdefault("CADDYEXT_MACHINE_MODE", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, enable_file_logging=False)


@pytest.fixture(autouse=True)
def reset_cli_mode():
    yield
    CLIConfig.set_machine_mode(None)


@pytest.fixture(autouse=True)
def isolated_config_env(monkeypatch):
    """Keep CADDYEXT_* overrides from the host out of the tests."""
    for name in (
        "CADDYEXT_LIST_NAME",
        "CADDYEXT_FRAMEWORK_PREFIX",
        "CADDYEXT_SETUP_MEMBER",
        "CADDYEXT_DIRECTIVES_FILE",
        "CADDYEXT_HUMAN_MODE",
        "CADDYEXT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="caddyext_test_"))
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def skeleton_text():
    """Minimal directives source: framework imports and an empty list."""
    return (TEST_FILES_DIR / "directives_skeleton.go").read_text()


@pytest.fixture
def directives_file(temp_dir, skeleton_text):
    """
    A writable copy of the skeleton directives file.

    Returns:
        Path to the copy.
    """
    path = temp_dir / "directives.go"
    path.write_text(skeleton_text)
    return path


@pytest.fixture
def caddy_directives_file(temp_dir):
    """A writable copy of a full Caddy directives.go with built-in directives."""
    path = temp_dir / "directives.go"
    shutil.copy(TEST_FILES_DIR / "caddy_directives.go", path)
    return path


@pytest.fixture
def write_go(temp_dir):
    """
    Factory writing Go source into the temp dir.

    Usage:
        path = write_go("package caddy\n...")
    """
    def _write(text: str, name: str = "directives.go") -> Path:
        path = temp_dir / name
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write
