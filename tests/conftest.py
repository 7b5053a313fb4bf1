"""Shared pytest fixtures for the Percy client test suite.

Provides reusable fixtures for:
- A client with a fixed token and an empty CI environment
- Mocked ``httpx.AsyncClient`` instances returning canned API responses
- Sample resources and a directory of built static assets
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from percy_client import Environment, PercyClient, Resource

FAKE_SHA = "a" * 63


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

@pytest.fixture
def empty_environment() -> Environment:
    """Environment with no CI variables set."""
    return Environment({})


@pytest.fixture
def percy_client(empty_environment: Environment) -> PercyClient:
    """Client with token ``test-token`` against the default API URL."""
    return PercyClient(token="test-token", environment=empty_environment)


# ---------------------------------------------------------------------------
# Mock HTTP
# ---------------------------------------------------------------------------

def _make_http_response(status_code: int, body: Any) -> MagicMock:
    """Build a mock ``httpx.Response`` carrying *body* as JSON."""
    raw = json.dumps(body).encode("utf-8") if body is not None else b""
    response = MagicMock()
    response.status_code = status_code
    response.content = raw
    response.text = raw.decode("utf-8")
    response.json.return_value = body
    return response


@pytest.fixture
def mock_http_client() -> Callable[..., AsyncMock]:
    """Factory for a mocked ``httpx.AsyncClient``.

    Usage:
        def test_something(mock_http_client):
            mock_client = mock_http_client(201, {"success": True})
            with patch("httpx.AsyncClient", return_value=mock_client):
                ...
            mock_client.post.call_args  # inspect the request
    """

    def _factory(status_code: int = 201, body: Any = None) -> AsyncMock:
        response = _make_http_response(status_code, body)
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(return_value=response)
        mock_client.get = AsyncMock(return_value=response)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        return mock_client

    return _factory


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

@pytest.fixture
def root_resource() -> Resource:
    """Root HTML resource identified by a fixed sha."""
    return Resource(resource_url="/foo", sha=FAKE_SHA, is_root=True)


@pytest.fixture
def static_site(tmp_path: Path) -> Path:
    """Directory of built assets, including files that should be skipped."""
    site = tmp_path / "site"
    (site / "css").mkdir(parents=True)
    (site / "img dir").mkdir()
    (site / ".cache").mkdir()
    (site / "index.html").write_text("<html></html>", encoding="utf-8")
    (site / "css" / "app.css").write_text("body { color: red; }", encoding="utf-8")
    (site / "css" / "app.css.map").write_text("{}", encoding="utf-8")
    (site / "img dir" / "logo.png").write_bytes(b"\x89PNG\r\n")
    (site / ".cache" / "state").write_text("x", encoding="utf-8")
    (site / ".DS_Store").write_bytes(b"\x00")
    (site / "build.log").write_text("ok", encoding="utf-8")
    yield site
