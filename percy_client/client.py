"""Async client for the Percy visual-testing API.

Wraps the JSON-API endpoints used to run a Percy build: create the build,
upload resource content, create snapshots from those resources and finalize
the build. Every call is authenticated with the project token and returns
the server's status code and parsed body unchanged.

Typical usage::

    client = PercyClient(token="...")
    build = await client.create_build("my-org/my-app")
    build_id = build.body["data"]["id"]
    root = client.make_resource(resource_url="/", content=html, is_root=True)
    snapshot = await client.create_snapshot(build_id, [root], {"name": "Home"})
    await client.upload_missing_resources(build_id, snapshot, [root])
    await client.finalize_build(build_id)
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

import httpx
from pydantic import BaseModel, Field

from .config import ClientConfig
from .environment import Environment
from .errors import ApiError
from .resource import Resource
from .user_agent import UserAgent
from .utils import base64encode, get_missing_resources, print_debug, print_warning, sha256hash

JSON_API_CONTENT_TYPE = "application/vnd.api+json"

# Snapshot attribute -> accepted option keys (snake_case first, then the
# camelCase spelling used by the JavaScript SDKs).
SNAPSHOT_OPTIONS: dict[str, tuple[str, ...]] = {
    "name": ("name",),
    "enable-javascript": ("enable_javascript", "enableJavaScript"),
    "widths": ("widths",),
    "minimum-height": ("minimum_height", "minimumHeight"),
}


class ApiResponse(BaseModel):
    """Status code and parsed JSON body of a Percy API response."""

    status_code: int = Field(description="HTTP status returned by the server")
    body: Any = Field(default=None, description="Parsed JSON body, or None when empty")


def _first_set(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


class PercyClient:
    """Async client for the Percy REST API.

    The client uses a short-lived ``httpx.AsyncClient`` per call, so an
    instance holds nothing but immutable configuration and is safe to share
    between tasks.

    Args:
        token: Percy project token. Overrides ``config.token``.
        api_url: API base URL. Overrides ``config.api_url``.
        config: Full client configuration; defaults to ``ClientConfig()``.
        environment: CI metadata source; defaults to ``Environment()``.
        client_info: SDK name/version for the User-Agent.
        environment_info: Framework name/version for the User-Agent.
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str | None = None,
        *,
        config: ClientConfig | None = None,
        environment: Environment | None = None,
        client_info: str | None = None,
        environment_info: str | None = None,
    ) -> None:
        base = config or ClientConfig()
        overrides = {
            key: value
            for key, value in (
                ("token", token),
                ("api_url", api_url),
                ("client_info", client_info),
                ("environment_info", environment_info),
            )
            if value is not None
        }
        self.config = ClientConfig(**{**base.model_dump(), **overrides}) if overrides else base
        self.environment = environment or Environment()

        if not self.config.token:
            print_warning("No Percy token configured; API requests will be rejected.")

    @property
    def token(self) -> str | None:
        return self.config.token

    @property
    def api_url(self) -> str:
        return self.config.api_url

    @property
    def client_info(self) -> str | None:
        return self.config.client_info

    @property
    def environment_info(self) -> str | None:
        return self.config.environment_info

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our timeout."""
        return httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout, connect=10.0))

    def _headers(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = {"User-Agent": UserAgent(self).user_agent()}
        if self.token:
            headers["Authorization"] = f"Token token={self.token}"
        if extra:
            headers.update(extra)
        return headers

    def _to_response(self, method: str, url: str, response: httpx.Response) -> ApiResponse:
        """Turn an ``httpx`` response into an ``ApiResponse``.

        Raises:
            ApiError: If the status is outside the 2xx range.
        """
        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = response.text

        if self.config.debug:
            print_debug(f"{method} {url} -> {response.status_code}")

        if not 200 <= response.status_code < 300:
            raise ApiError(
                f"Percy API returned HTTP {response.status_code} for {method} {url}",
                status_code=response.status_code,
                body=body,
            )
        return ApiResponse(status_code=response.status_code, body=body)

    async def _http_get(self, url: str) -> ApiResponse:
        async with self._client() as client:
            response = await client.get(url, headers=self._headers())
        return self._to_response("GET", url, response)

    async def _http_post(self, url: str, data: dict[str, Any] | None = None) -> ApiResponse:
        async with self._client() as client:
            if data is None:
                response = await client.post(url, headers=self._headers())
            else:
                response = await client.post(
                    url,
                    json=data,
                    headers=self._headers({"Content-Type": JSON_API_CONTENT_TYPE}),
                )
        return self._to_response("POST", url, response)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def make_resource(self, **kwargs: Any) -> Resource:
        """Build a ``Resource``; see ``Resource`` for the accepted fields."""
        return Resource(**kwargs)

    async def upload_resource(self, build_id: str | int, content: str | bytes) -> ApiResponse:
        """Upload the content of one resource to a build.

        The resource id sent is the SHA-256 digest of *content*.
        """
        data = {
            "data": {
                "type": "resources",
                "id": sha256hash(content),
                "attributes": {
                    "base64-content": base64encode(content),
                },
            }
        }
        return await self._http_post(f"{self.api_url}/builds/{build_id}/resources/", data)

    async def upload_resources(
        self, build_id: str | int, resources: Sequence[Resource]
    ) -> list[ApiResponse]:
        """Upload several resources, ``config.upload_concurrency`` at a time.

        Content held only on disk is read in a worker thread. If any upload
        fails, the uploads still pending or in flight are cancelled before the
        error is re-raised.

        Returns:
            One ``ApiResponse`` per resource, in input order.
        """
        semaphore = asyncio.Semaphore(self.config.upload_concurrency)

        async def _upload(resource: Resource) -> ApiResponse:
            async with semaphore:
                content = await asyncio.to_thread(resource.read_content)
                return await self.upload_resource(build_id, content)

        tasks = [asyncio.ensure_future(_upload(r)) for r in resources]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def upload_missing_resources(
        self,
        build_id: str | int,
        response: ApiResponse,
        resources: Sequence[Resource],
    ) -> list[ApiResponse]:
        """Upload only the resources the server reported as missing.

        Args:
            build_id: Build the resources belong to.
            response: Response of ``create_build`` or ``create_snapshot``.
            resources: The resources that were referenced in that request.

        Returns:
            Upload responses; empty when nothing is missing.
        """
        missing = get_missing_resources(response.body)
        if not missing:
            return []

        by_sha = {resource.sha: resource for resource in resources}
        to_upload: list[Resource] = []
        for ref in missing:
            resource = by_sha.get(ref.get("id"))
            if resource is None:
                print_warning(f"Server reported missing resource {ref.get('id')} that was not provided.")
                continue
            to_upload.append(resource)
        return await self.upload_resources(build_id, to_upload)

    # ------------------------------------------------------------------
    # Builds
    # ------------------------------------------------------------------

    async def create_build(
        self,
        repo_slug: str,
        *,
        branch: str | None = None,
        target_branch: str | None = None,
        commit_sha: str | None = None,
        pull_request_number: str | int | None = None,
        parallel_nonce: str | None = None,
        parallel_total_shards: int | None = None,
        resources: Sequence[Resource] | None = None,
    ) -> ApiResponse:
        """Create a build for the repository *repo_slug* (``"org/name"``).

        Metadata arguments left as ``None`` fall back to ``self.environment``.
        When *resources* is given they are attached as the build's
        ``resources`` relationship.
        """
        env = self.environment
        data: dict[str, Any] = {
            "data": {
                "type": "builds",
                "attributes": {
                    "branch": _first_set(branch, env.branch),
                    "target-branch": _first_set(target_branch, env.target_branch),
                    "commit-sha": _first_set(commit_sha, env.commit_sha),
                    "pull-request-number": _first_set(pull_request_number, env.pull_request_number),
                    "parallel-nonce": _first_set(parallel_nonce, env.parallel_nonce),
                    "parallel-total-shards": _first_set(
                        parallel_total_shards, env.parallel_total_shards
                    ),
                },
            }
        }
        if resources is not None:
            data["data"]["relationships"] = {
                "resources": {"data": [resource.serialize() for resource in resources]},
            }
        return await self._http_post(f"{self.api_url}/repos/{repo_slug}/builds/", data)

    async def get_build(self, build_id: str | int) -> ApiResponse:
        return await self._http_get(f"{self.api_url}/builds/{build_id}")

    async def finalize_build(self, build_id: str | int, all_shards: bool = False) -> ApiResponse:
        """Mark a build as complete so the server starts rendering it.

        Args:
            build_id: Build to finalize.
            all_shards: Finalize every parallel shard of the build at once.
        """
        query = "?all-shards=true" if all_shards else ""
        return await self._http_post(f"{self.api_url}/builds/{build_id}/finalize{query}")

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    async def create_snapshot(
        self,
        build_id: str | int,
        resources: Sequence[Resource] | None,
        options: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        """Create a snapshot in a build from a list of resources.

        Args:
            build_id: Build the snapshot belongs to.
            resources: Resources needed to render the snapshot; exactly one
                should have ``is_root=True``.
            options: ``name``, ``enable_javascript``, ``widths`` and
                ``minimum_height`` (camelCase spellings are accepted too).
                Missing options are sent as ``null``.
        """
        options = options or {}
        attributes = {
            attribute: _first_set(*(options.get(key) for key in keys))
            for attribute, keys in SNAPSHOT_OPTIONS.items()
        }
        data = {
            "data": {
                "type": "snapshots",
                "attributes": attributes,
                "relationships": {
                    "resources": {
                        "data": [resource.serialize() for resource in resources or []],
                    },
                },
            }
        }
        return await self._http_post(f"{self.api_url}/builds/{build_id}/snapshots/", data)

    async def finalize_snapshot(self, snapshot_id: str | int) -> ApiResponse:
        return await self._http_post(f"{self.api_url}/snapshots/{snapshot_id}/finalize")
