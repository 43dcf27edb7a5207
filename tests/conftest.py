"""
Shared test fixtures and configuration for pytest.
"""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Callable

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sailor.connectors.test_connector import TestConnector
from sailor.core.models import ConnectionContext


logger = logging.getLogger(__name__)


BASE_ADDRESS = "http://sailor.test"
FALLBACK_BASE = "http://fallback.test/sailor"


# ============================================================================
# Helpers
# ============================================================================

def write_envelope(path: Path, content: str) -> None:
    """Write a mounted config/misc file wrapping `content`."""
    path.write_text(json.dumps({"_content": content}), encoding="utf-8")


def write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.05) -> bool:
    """
    Poll `predicate` until it returns True or the timeout expires.

    Exceptions raised by the predicate count as False.
    """
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            if predicate():
                return True
        except Exception:
            pass
        time.sleep(interval)
    return False


# ============================================================================
# Pytest hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "slow: Tests that wait on background threads or the filesystem")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def clean_sailor_env(monkeypatch):
    """Keep SAILOR_* variables from the outer environment out of tests."""
    for name in (
        "SAILOR_URL",
        "SAILOR_NS",
        "SAILOR_APP",
        "SAILOR_ACCESS_KEY",
        "SAILOR_SECRET_KEY",
        "SAILOR_SOCKET_TIMEOUT",
        "SAILOR_FALLBACK_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def connection() -> ConnectionContext:
    """Connection for app `test` in namespace `test`."""
    return ConnectionContext(
        address=BASE_ADDRESS,
        namespace="test",
        app="test",
        access_key="ak",
        secret_key="sk",
        socket_timeout=5.0,
    )


@pytest.fixture
def test_connector():
    """Fixture providing an in-memory connector."""
    connector = TestConnector()
    yield connector
    connector.close()


@pytest.fixture
def mount_dir(tmp_path) -> Path:
    """Empty directory standing in for a mounted volume."""
    path = tmp_path / "sailor"
    path.mkdir()
    return path
