"""
Shared fixtures for geodata tests.

Nothing here touches the network: clients are wired to a MockTransport, and
HttpxTransport tests use httpx.MockTransport underneath.
"""

from __future__ import annotations

import json

import pytest

from geodata import data
from geodata.client import DataClient
from geodata.config import DEFAULT_API_BASE_URL, DEFAULT_TILE_BASE_URL, DataClientSettings
from geodata.transport import MockTransport


def envelope(payload) -> str:
    """Wrap a payload in a success envelope."""
    return json.dumps({"data": payload})


def error_envelope(message: str) -> str:
    """Wrap a message in an error envelope."""
    return json.dumps({"error": {"message": message}})


@pytest.fixture
def settings() -> DataClientSettings:
    """Settings pinned to the built-in defaults regardless of environment."""
    return DataClientSettings(
        api_base_url=DEFAULT_API_BASE_URL,
        tile_base_url=DEFAULT_TILE_BASE_URL,
        request_timeout_ms=0,
        origin=None,
    )


@pytest.fixture
def mock_transport() -> MockTransport:
    """MockTransport with no canned answers; every request is echoed."""
    return MockTransport()


@pytest.fixture
def client(mock_transport, settings) -> DataClient:
    """DataClient on a MockTransport."""
    with DataClient(transport=mock_transport, settings=settings) as c:
        yield c


@pytest.fixture
def default_client(settings):
    """Fresh process-wide client for module-level API tests."""
    data.set_default_client(DataClient(transport=MockTransport(), settings=settings))
    yield data.get_default_client()
    data.set_default_client(None)
