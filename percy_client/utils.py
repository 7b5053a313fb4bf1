"""Shared helpers for the Percy client.

Content hashing and base64 encoding used for resource identity and uploads,
extraction of missing-resource references from API responses, and the
Rich-based console the client prints diagnostics to.
"""

from __future__ import annotations

import base64
import hashlib
from typing import Any

from rich.console import Console

console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Hashing / encoding
# ---------------------------------------------------------------------------


def _to_bytes(content: str | bytes) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


def sha256hash(content: str | bytes) -> str:
    """Return the lowercase hex SHA-256 digest of *content*.

    Strings are hashed as their UTF-8 encoding, so ``sha256hash("foo")`` and
    ``sha256hash(b"foo")`` agree.

    Examples::

        sha256hash("foo") -> "2c26b46b68ffc68ff99b453c1d30413413422d706483bfa0f98a5e886266e7ae"
    """
    return hashlib.sha256(_to_bytes(content)).hexdigest()


def base64encode(content: str | bytes) -> str:
    """Base64-encode *content* and return it as an ASCII string."""
    return base64.b64encode(_to_bytes(content)).decode("ascii")


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------


def get_missing_resources(body: Any) -> list[dict[str, Any]]:
    """Pull ``data.relationships["missing-resources"].data`` out of a response body.

    Build and snapshot creation responses list the resources the server has
    not stored yet. Returns an empty list when the body has no such entry.
    """
    if not isinstance(body, dict):
        return []
    data = body.get("data") or {}
    relationships = data.get("relationships") or {}
    missing = relationships.get("missing-resources") or {}
    return list(missing.get("data") or [])


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_debug(message: str) -> None:
    """Print a dimmed diagnostic line."""
    console.print(f"[dim]\\[percy] {message}[/dim]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]\\[percy] {message}[/bold yellow]")
