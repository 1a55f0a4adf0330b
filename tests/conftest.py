"""
Test configuration and fixtures for the Lighthouse dispatch service.

The real job runner launches Chrome and the Lighthouse CLI, so every HTTP
test swaps it for a mock through ``app.main.build_runner``.
"""

from typing import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def fake_runner():
    """A runner whose ``execute`` resolves immediately and records its jobs."""
    runner = MagicMock()
    runner.execute = AsyncMock(return_value=None)
    runner.collector = MagicMock()
    runner.collector.aclose = AsyncMock(return_value=None)
    return runner


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app, fake_runner) -> Generator[TestClient, None, None]:
    """
    Test client with the lifespan running against ``fake_runner``.
    Leaving the context triggers the dispatcher shutdown.
    """
    with patch("app.main.build_runner", return_value=fake_runner):
        with TestClient(test_app) as test_client:
            yield test_client
