"""Unit tests for ClientConfig (percy_client.config).

Tests cover:
- Defaults and validation
- api_url normalisation
- from_env with explicit mappings and os.environ
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from percy_client.config import DEFAULT_API_URL, ClientConfig


class TestClientConfigDefaults:
    @pytest.mark.unit
    def test_defaults(self):
        config = ClientConfig()
        assert config.token is None
        assert config.api_url == "https://percy.io/api/v1"
        assert config.timeout == 30.0
        assert config.upload_concurrency == 2
        assert config.client_info is None
        assert config.environment_info is None
        assert config.debug is False

    @pytest.mark.unit
    def test_trailing_slash_stripped(self):
        config = ClientConfig(api_url="http://localhost:9090/api/v1/")
        assert config.api_url == "http://localhost:9090/api/v1"

    @pytest.mark.unit
    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ClientConfig(timeout=0)

    @pytest.mark.unit
    def test_upload_concurrency_at_least_one(self):
        with pytest.raises(ValidationError):
            ClientConfig(upload_concurrency=0)

    @pytest.mark.unit
    def test_frozen(self):
        config = ClientConfig(token="a")
        with pytest.raises(ValidationError):
            config.token = "mutated"
        assert config.token == "a"


class TestClientConfigFromEnv:
    @pytest.mark.unit
    def test_empty_env(self):
        config = ClientConfig.from_env({})
        assert config.token is None
        assert config.api_url == DEFAULT_API_URL
        assert config.debug is False

    @pytest.mark.unit
    def test_all_variables(self):
        config = ClientConfig.from_env(
            {
                "PERCY_TOKEN": "abc",
                "PERCY_API": "http://localhost:9090/api/v1/",
                "PERCY_TIMEOUT": "5.5",
                "PERCY_UPLOAD_CONCURRENCY": "8",
                "PERCY_DEBUG": "true",
            }
        )
        assert config.token == "abc"
        assert config.api_url == "http://localhost:9090/api/v1"
        assert config.timeout == 5.5
        assert config.upload_concurrency == 8
        assert config.debug is True

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["0", "false", "no", ""])
    def test_debug_falsy_values(self, value):
        assert ClientConfig.from_env({"PERCY_DEBUG": value}).debug is False

    @pytest.mark.unit
    def test_reads_os_environ_by_default(self):
        with patch.dict(os.environ, {"PERCY_TOKEN": "from-os"}, clear=True):
            config = ClientConfig.from_env()
        assert config.token == "from-os"
