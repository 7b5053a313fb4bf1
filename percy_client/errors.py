"""Exceptions raised by the Percy client."""

from __future__ import annotations

from typing import Any


class PercyClientError(Exception):
    """Base exception for all Percy client errors."""


class ResourceError(PercyClientError, ValueError):
    """Invalid arguments when building a ``Resource``.

    Raised when:
    - ``resource_url`` is missing or contains whitespace
    - neither ``sha`` nor ``content`` is given
    """


class ApiError(PercyClientError):
    """The Percy API answered with a non-2xx status.

    The status code and parsed body are kept so callers can inspect what the
    server rejected.
    """

    def __init__(self, message: str, status_code: int, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
