"""Infer a bump intent from the labels of the pull request behind a merge commit."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from .bump import DEFAULT_BUMP, Bump, max_bump
from .errors import PullRequestError, PullRequestNotFoundError, ServiceError
from .labels import LabelResolver
from .pulls import PullRequestClient


class DefaultReason(str, Enum):
    """Why the default bump was applied."""

    NONE = ""
    NO_PULL_REQUEST = "no-pull-request"
    NO_SEMVER_LABELS = "no-semver-labels"


class InferResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    bump: Bump
    commit_sha: str
    pr_number: int = 0
    labels: tuple[str, ...] = ()
    semver_labels: tuple[str, ...] = ()
    defaulted: bool = False
    default_reason: DefaultReason = DefaultReason.NONE


class InferBumpService:
    """Determine the bump for a merge commit from its pull request labels."""

    def __init__(self, pulls: PullRequestClient, labels: LabelResolver) -> None:
        self.pulls = pulls
        self.labels = labels

    def resolve(self, commit_sha: str, *, strict: bool = False) -> InferResult:
        """Return the bump intent for a merge commit.

        Falls back to a patch bump when the commit has no pull request
        (unless strict) or the pull request carries no semver label. With
        several semver labels the highest-impact one wins.

        Raises:
            ServiceError: If commit_sha is blank.
            PullRequestError: If the lookup fails, or in strict mode when
                no pull request is found.
        """
        commit = commit_sha.strip()
        if not commit:
            raise ServiceError("commit sha is empty")

        try:
            pr_number = self.pulls.find_pull_request_by_merge_commit(commit)
        except PullRequestNotFoundError:
            if strict:
                raise
            return InferResult(
                bump=DEFAULT_BUMP,
                commit_sha=commit,
                defaulted=True,
                default_reason=DefaultReason.NO_PULL_REQUEST,
            )
        except PullRequestError as exc:
            raise PullRequestError(f"finding pull request by merge commit: {exc}") from exc

        try:
            labels = self.pulls.list_labels(pr_number)
        except PullRequestError as exc:
            raise PullRequestError(f"listing pull request labels: {exc}") from exc

        semver_labels: list[str] = []
        candidates: list[Bump] = []
        for label in labels:
            bump = self.labels.bump_for_label(label)
            if bump is not None:
                semver_labels.append(label)
                candidates.append(bump)

        if not candidates:
            return InferResult(
                bump=DEFAULT_BUMP,
                commit_sha=commit,
                pr_number=pr_number,
                labels=tuple(labels),
                defaulted=True,
                default_reason=DefaultReason.NO_SEMVER_LABELS,
            )

        return InferResult(
            bump=max_bump(*candidates),
            commit_sha=commit,
            pr_number=pr_number,
            labels=tuple(labels),
            semver_labels=tuple(semver_labels),
        )
