"""Ensure a pull request carries the semver label its branch name implies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .branchmap import BranchResolver
from .bump import Bump
from .errors import PullRequestError, ServiceError
from .labels import Decision, LabelResolver
from .pulls import PullRequestClient


class LabelResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    bump: Bump
    branch_matched: bool
    matched_prefix: str = ""
    decision: Decision
    expected_label: str
    existing_semver: tuple[str, ...] = ()
    label_added: bool = False


class PRLabelService:
    """Apply the branch-derived semver label to a pull request."""

    def __init__(
        self, pulls: PullRequestClient, branches: BranchResolver, labels: LabelResolver
    ) -> None:
        self.pulls = pulls
        self.branches = branches
        self.labels = labels

    def apply(self, pr_number: int, branch: str) -> LabelResult:
        """Add the expected semver label unless it, or a conflicting one, is present.

        Raises:
            ServiceError: If the PR number is not positive or the branch is blank.
            PullRequestError: If listing or adding labels fails.
        """
        if pr_number <= 0:
            raise ServiceError(f"invalid pull request number {pr_number}")
        branch = branch.strip()
        if not branch:
            raise ServiceError("branch is empty")

        bump, prefix, matched = self.branches.resolve(branch)

        try:
            existing = self.pulls.list_labels(pr_number)
        except PullRequestError as exc:
            raise PullRequestError(f"listing pr labels: {exc}") from exc

        decision = self.labels.decide(existing, bump)
        added = False
        if decision.decision is Decision.ADD_EXPECTED:
            try:
                self.pulls.add_label(pr_number, decision.expected_label)
            except PullRequestError as exc:
                raise PullRequestError(f"adding pr label: {exc}") from exc
            added = True

        return LabelResult(
            bump=bump,
            branch_matched=matched,
            matched_prefix=prefix,
            decision=decision.decision,
            expected_label=decision.expected_label,
            existing_semver=decision.existing,
            label_added=added,
        )
