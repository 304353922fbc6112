"""
MiddleForge Test Fixtures

Shared fixtures for all MiddleForge tests.
"""

from typing import Any, Generator

import pytest
import structlog

from middleforge.testing import CallLog
from middleforge.utils.config import MiddleForgeConfig, set_config


# ══════════════════════════════════════════════════════════════════════════════
#                           CORE FIXTURES
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def log() -> CallLog:
    """Create a fresh CallLog for ordering assertions."""
    return CallLog()


@pytest.fixture
def request_ctx() -> dict[str, Any]:
    """Opaque request context: a plain dict."""
    return {"path": "/users", "headers": {"authorization": "Bearer token"}}


@pytest.fixture
def response_ctx() -> dict[str, Any]:
    """Opaque response context: a plain dict."""
    return {}


# ══════════════════════════════════════════════════════════════════════════════
#                           CLEANUP FIXTURES
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture(autouse=True)
def default_config() -> Generator[MiddleForgeConfig, None, None]:
    """Pin a default configuration so the environment cannot leak into tests."""
    config = MiddleForgeConfig()
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()
