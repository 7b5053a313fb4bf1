"""User-Agent string sent with every Percy API request."""

from __future__ import annotations

import platform
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .client import PercyClient

VERSION = "3.0.9"


class UserAgent:
    """Builds a diagnostic User-Agent from the client's configuration.

    Example::

        Percy/v1 percy-capybara/4.0 percy-client-python/3.0.9 (rails/5.2; python/3.12.1; travis)
    """

    def __init__(self, client: "PercyClient | None") -> None:
        if client is None:
            raise ValueError('"client" arg is required to create a UserAgent.')
        self._client = client

    def user_agent(self) -> str:
        client_part = " ".join(
            part
            for part in (
                f"Percy/{self._api_version()}",
                self._client.client_info,
                f"percy-client-python/{VERSION}",
            )
            if part is not None
        )
        environment_part = "; ".join(
            part
            for part in (
                self._client.environment_info,
                f"python/{self._python_version()}",
                self._client.environment.ci,
            )
            if part is not None
        )
        return f"{client_part} ({environment_part})"

    __str__ = user_agent

    @staticmethod
    def _python_version() -> str:
        return platform.python_version()

    def _api_version(self) -> str | None:
        match = re.search(r"\w+$", self._client.api_url)
        return match.group(0) if match else None
