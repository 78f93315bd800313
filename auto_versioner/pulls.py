"""Pull request operations: merge-commit lookup and label management."""

from __future__ import annotations

import json
import subprocess
from abc import ABC, abstractmethod

from loguru import logger

from .errors import PullRequestError, PullRequestNotFoundError
from .shell import describe_failure, gh


class PullRequestClient(ABC):
    """Abstract interface for the pull request collaborator."""

    @abstractmethod
    def find_pull_request_by_merge_commit(self, commit_sha: str) -> int:
        """Return the number of the pull request merged as commit_sha.

        Raises:
            PullRequestNotFoundError: If no pull request matches.
        """
        ...

    @abstractmethod
    def list_labels(self, pr_number: int) -> list[str]:
        """Return the labels currently applied to the pull request."""
        ...

    @abstractmethod
    def add_label(self, pr_number: int, label: str) -> None:
        """Apply a label to the pull request."""
        ...


def _parse_json(output: str, *, what: str):
    try:
        return json.loads(output) if output else None
    except json.JSONDecodeError as exc:
        raise PullRequestError(f"invalid JSON for {what}: {exc}") from exc


class GitHubPullRequests(PullRequestClient):
    """PullRequestClient backed by the GitHub CLI for the current repository."""

    def _run(self, action: str, *args: str) -> str:
        try:
            return gh(*args)
        except subprocess.CalledProcessError as exc:
            raise PullRequestError(f"{action}: {describe_failure(exc)}") from exc

    def find_pull_request_by_merge_commit(self, commit_sha: str) -> int:
        commit = commit_sha.strip()
        if not commit:
            raise PullRequestError("commit sha is empty")

        output = self._run(
            f"finding pull request for {commit}",
            "api", f"repos/{{owner}}/{{repo}}/commits/{commit}/pulls",
        )
        pulls = _parse_json(output, what=f"pulls of {commit}") or []
        for pull in pulls:
            if pull.get("merge_commit_sha") == commit:
                return int(pull["number"])
        raise PullRequestNotFoundError(f"no pull request merged as {commit}")

    def list_labels(self, pr_number: int) -> list[str]:
        output = self._run(
            f"listing labels of #{pr_number}",
            "pr", "view", str(pr_number), "--json", "labels",
        )
        data = _parse_json(output, what=f"labels of #{pr_number}") or {}
        return [label.get("name", "") for label in data.get("labels", []) if label.get("name")]

    def add_label(self, pr_number: int, label: str) -> None:
        name = label.strip()
        if not name:
            raise PullRequestError("label name is empty")
        self._run(f"labelling #{pr_number}", "pr", "edit", str(pr_number), "--add-label", name)
        logger.bind(pr=pr_number, label=name).debug("label added")
