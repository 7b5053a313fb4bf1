"""Resources: the content-addressed assets a snapshot is rendered from.

A resource's identity is the SHA-256 hex digest of its content. Either the
digest or the content must be known when the resource is created; when only
the content is given the digest is derived from it. Identical content across
snapshots therefore maps to the same id and is stored once server-side.
"""

from __future__ import annotations

import mimetypes
import re
from pathlib import Path
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, Field

from .errors import ResourceError
from .utils import sha256hash

# Build artefacts that never need to be rendered.
DEFAULT_SKIPPED_EXTENSIONS: tuple[str, ...] = (".map", ".log")

_WHITESPACE = re.compile(r"\s")


def _check_arguments(data: dict[str, Any]) -> dict[str, Any]:
    """Validate ``Resource`` keyword arguments and fill in a derived ``sha``.

    Raises:
        ResourceError: If ``resource_url`` is missing or contains whitespace,
            or if neither ``sha`` nor ``content`` is given.
    """
    resource_url = data.get("resource_url")
    if not resource_url:
        raise ResourceError('"resource_url" is required to create a Resource.')
    if isinstance(resource_url, str) and _WHITESPACE.search(resource_url):
        raise ResourceError(
            f'"resource_url" includes whitespace and needs to be URL-encoded: {resource_url!r}'
        )

    if not data.get("sha"):
        content = data.get("content")
        if content is None:
            raise ResourceError('Either "sha" or "content" is required to create a Resource.')
        data = {**data, "sha": sha256hash(content)}
    return data


class Resource(BaseModel):
    """One asset contributing to a snapshot."""

    model_config = ConfigDict(frozen=True)

    resource_url: str = Field(description="URL the asset is requested at, already URL-encoded")
    sha: str = Field(description="SHA-256 hex digest of the content")
    content: str | bytes | None = Field(default=None, repr=False)
    mimetype: str | None = None
    is_root: bool | None = None
    local_path: Path | None = Field(
        default=None, description="File the content can be read from when not held in memory"
    )

    def __init__(self, **data: Any) -> None:
        super().__init__(**_check_arguments(data))

    @property
    def id(self) -> str:
        """The resource id, which is its content digest."""
        return self.sha

    def read_content(self) -> str | bytes:
        """Return the in-memory content, falling back to ``local_path`` on disk."""
        if self.content is not None:
            return self.content
        if self.local_path is None:
            raise ResourceError(
                f"Resource {self.resource_url} has neither content nor a local path to read."
            )
        return self.local_path.read_bytes()

    def serialize(self) -> dict[str, Any]:
        """Return the JSON-API representation used in relationship lists.

        ``mimetype`` and ``is-root`` are always present and are ``None`` when
        unset.
        """
        return {
            "type": "resources",
            "id": self.sha,
            "attributes": {
                "resource-url": self.resource_url,
                "mimetype": self.mimetype,
                "is-root": self.is_root,
            },
        }


def gather_build_resources(
    root_dir: str | Path,
    base_url: str = "/",
    skipped_extensions: tuple[str, ...] = DEFAULT_SKIPPED_EXTENSIONS,
) -> list[Resource]:
    """Walk *root_dir* and return a ``Resource`` for every file in it.

    Hidden files and directories (dot-prefixed) and files whose extension is in
    *skipped_extensions* are left out. Each resource URL is *base_url* joined
    with the URL-quoted POSIX path relative to *root_dir*. The digest is
    computed from the file bytes now; the content itself is read again at
    upload time through ``local_path``.

    Args:
        root_dir: Directory of built static assets.
        base_url: URL prefix the directory is served under.
        skipped_extensions: Lower-case extensions (with the dot) to ignore.

    Returns:
        Resources sorted by relative path.

    Raises:
        NotADirectoryError: If *root_dir* is not a directory.
    """
    root = Path(root_dir)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    prefix = base_url if base_url.endswith("/") else base_url + "/"
    skipped = {ext.lower() for ext in skipped_extensions}

    resources: list[Resource] = []
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(root)
        if any(part.startswith(".") for part in relative.parts):
            continue
        if path.suffix.lower() in skipped:
            continue

        mimetype, _ = mimetypes.guess_type(path.name)
        resources.append(
            Resource(
                resource_url=prefix + quote(relative.as_posix()),
                sha=sha256hash(path.read_bytes()),
                mimetype=mimetype,
                local_path=path,
            )
        )
    return resources
