"""Percy client configuration.

Typed settings for talking to the Percy API. ``ClientConfig`` is a Pydantic
v2 model so values are validated at construction time and can be read from
environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_API_URL = "https://percy.io/api/v1"

_TRUTHY = {"1", "true", "yes", "on"}


class ClientConfig(BaseModel):
    """Settings shared by every request a ``PercyClient`` makes.

    Instances are frozen; build a new one to change a setting.
    """

    model_config = ConfigDict(frozen=True)

    token: str | None = Field(default=None, description="Percy project token")
    api_url: str = Field(default=DEFAULT_API_URL)
    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    upload_concurrency: int = Field(
        default=2, ge=1, description="Maximum resource uploads in flight at once"
    )
    client_info: str | None = Field(
        default=None, description="SDK name/version reported in the User-Agent"
    )
    environment_info: str | None = Field(
        default=None, description="Framework name/version reported in the User-Agent"
    )
    debug: bool = Field(default=False, description="Print every request to the console")

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> "ClientConfig":
        """Build a ``ClientConfig`` from environment variables.

        Recognised variables (all optional):
            PERCY_TOKEN, PERCY_API, PERCY_TIMEOUT, PERCY_UPLOAD_CONCURRENCY,
            PERCY_DEBUG.
        """
        source = os.environ if env is None else env

        kwargs: dict[str, Any] = {}
        if source.get("PERCY_TOKEN"):
            kwargs["token"] = source["PERCY_TOKEN"]
        if source.get("PERCY_API"):
            kwargs["api_url"] = source["PERCY_API"]
        if source.get("PERCY_TIMEOUT"):
            kwargs["timeout"] = float(source["PERCY_TIMEOUT"])
        if source.get("PERCY_UPLOAD_CONCURRENCY"):
            kwargs["upload_concurrency"] = int(source["PERCY_UPLOAD_CONCURRENCY"])
        kwargs["debug"] = source.get("PERCY_DEBUG", "").strip().lower() in _TRUTHY

        return cls(**kwargs)
