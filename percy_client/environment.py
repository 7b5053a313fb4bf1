"""Build metadata detected from the process environment.

Percy groups snapshots into builds and shows them against a branch, commit
and pull request. ``Environment`` works those values out from CI-specific
variables, with ``PERCY_*`` variables taking precedence so any CI setup can
be overridden by hand.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping

# Variable that marks a CI provider, in detection order.
CI_MARKERS: dict[str, str] = {
    "travis": "TRAVIS_BUILD_ID",
    "circle": "CIRCLECI",
    "github": "GITHUB_ACTIONS",
    "gitlab": "GITLAB_CI",
    "buildkite": "BUILDKITE",
    "jenkins": "JENKINS_URL",
}

# Per provider: metadata field -> candidate variables, first non-empty wins.
CI_VARIABLES: dict[str, dict[str, tuple[str, ...]]] = {
    "travis": {
        "branch": ("TRAVIS_PULL_REQUEST_BRANCH", "TRAVIS_BRANCH"),
        "commit_sha": ("TRAVIS_COMMIT",),
        "pull_request_number": ("TRAVIS_PULL_REQUEST",),
        "parallel_nonce": ("TRAVIS_BUILD_NUMBER",),
    },
    "circle": {
        "branch": ("CIRCLE_BRANCH",),
        "commit_sha": ("CIRCLE_SHA1",),
        "pull_request_number": ("CIRCLE_PR_NUMBER",),
        "parallel_nonce": ("CIRCLE_WORKFLOW_ID", "CIRCLE_BUILD_NUM"),
    },
    "github": {
        "branch": ("GITHUB_HEAD_REF", "GITHUB_REF"),
        "commit_sha": ("GITHUB_SHA",),
        "parallel_nonce": ("GITHUB_RUN_ID",),
    },
    "gitlab": {
        "branch": ("CI_COMMIT_REF_NAME",),
        "commit_sha": ("CI_COMMIT_SHA",),
        "pull_request_number": ("CI_MERGE_REQUEST_IID",),
        "parallel_nonce": ("CI_PIPELINE_ID",),
    },
    "buildkite": {
        "branch": ("BUILDKITE_BRANCH",),
        "commit_sha": ("BUILDKITE_COMMIT",),
        "pull_request_number": ("BUILDKITE_PULL_REQUEST",),
        "parallel_nonce": ("BUILDKITE_BUILD_ID",),
    },
    "jenkins": {
        "branch": ("ghprbSourceBranch", "GIT_BRANCH"),
        "commit_sha": ("ghprbActualCommit", "GIT_COMMIT"),
        "pull_request_number": ("ghprbPullId",),
        "parallel_nonce": ("BUILD_TAG",),
    },
}

# Placeholder values some providers use for "not set".
_UNSET_VALUES = {"", "false", "HEAD"}

# GitHub Actions checks pull requests out at refs/pull/<number>/merge.
_GITHUB_PULL_REF = re.compile(r"^refs/pull/(\d+)/")


class Environment:
    """Read-only view of CI build metadata.

    Args:
        env: Mapping of environment variables. Defaults to ``os.environ``.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = os.environ if env is None else env

    def _get(self, name: str) -> str | None:
        value = self._env.get(name)
        if value is None or value.strip() in _UNSET_VALUES:
            return None
        return value.strip()

    def _from_ci(self, field: str) -> str | None:
        ci = self.ci
        if ci is None:
            return None
        for name in CI_VARIABLES[ci].get(field, ()):
            value = self._get(name)
            if value is not None:
                return value
        return None

    @property
    def ci(self) -> str | None:
        """Name of the detected CI provider, or ``None`` outside CI."""
        for name, marker in CI_MARKERS.items():
            if self._env.get(marker):
                return name
        return None

    @property
    def branch(self) -> str | None:
        branch = self._get("PERCY_BRANCH") or self._from_ci("branch")
        if branch and branch.startswith("refs/heads/"):
            branch = branch[len("refs/heads/"):]
        return branch

    @property
    def target_branch(self) -> str | None:
        return self._get("PERCY_TARGET_BRANCH")

    @property
    def commit_sha(self) -> str | None:
        return self._get("PERCY_COMMIT") or self._from_ci("commit_sha")

    @property
    def pull_request_number(self) -> str | None:
        number = self._get("PERCY_PULL_REQUEST") or self._from_ci("pull_request_number")
        if number is None and self.ci == "github":
            match = _GITHUB_PULL_REF.match(self._get("GITHUB_REF") or "")
            if match:
                number = match.group(1)
        return number

    @property
    def parallel_nonce(self) -> str | None:
        return self._get("PERCY_PARALLEL_NONCE") or self._from_ci("parallel_nonce")

    @property
    def parallel_total_shards(self) -> int | None:
        """Number of parallel shards, or ``None`` when unset or not an integer."""
        raw = self._get("PERCY_PARALLEL_TOTAL")
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None
