"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest
from loguru import logger

from auto_versioner.errors import PullRequestNotFoundError, TagStoreError
from auto_versioner.models import Tag, TagSpec
from auto_versioner.pulls import PullRequestClient
from auto_versioner.tagstore import TagStore

RELEASE_OID = "1111111111111111111111111111111111111111"
RC_OID = "2222222222222222222222222222222222222222"
OTHER_OID = "3333333333333333333333333333333333333333"


class FakeTagStore(TagStore):
    """In-memory TagStore that records every mutation in call order."""

    def __init__(self, tags: list[Tag] | None = None) -> None:
        self.tags = list(tags or [])
        self.calls: list[tuple[str, str]] = []
        self.created: list[TagSpec] = []
        self.fail_create: set[str] = set()
        self.fail_delete: set[str] = set()

    def list_tags(self) -> list[Tag]:
        self.calls.append(("list", ""))
        return list(self.tags)

    def create_annotated_tag(self, spec: TagSpec) -> None:
        self.calls.append(("create", spec.name))
        if spec.name in self.fail_create:
            raise TagStoreError("remote rejected")
        self.created.append(spec)
        self.tags.append(Tag(name=f"refs/tags/{spec.name}", object_id=spec.commit))

    def delete_tag(self, name: str, expected_object_id: str) -> None:
        self.calls.append(("delete", name))
        if name in self.fail_delete:
            raise TagStoreError("lease mismatch")
        self.tags = [t for t in self.tags if t.name != name]


class FakePullRequests(PullRequestClient):
    """In-memory PullRequestClient keyed by merge commit."""

    def __init__(self, merges: dict[str, int] | None = None, labels: dict[int, list[str]] | None = None) -> None:
        self.merges = dict(merges or {})
        self.labels = {k: list(v) for k, v in (labels or {}).items()}
        self.added: list[tuple[int, str]] = []

    def find_pull_request_by_merge_commit(self, commit_sha: str) -> int:
        if commit_sha not in self.merges:
            raise PullRequestNotFoundError(f"no pull request merged as {commit_sha}")
        return self.merges[commit_sha]

    def list_labels(self, pr_number: int) -> list[str]:
        return list(self.labels.get(pr_number, []))

    def add_label(self, pr_number: int, label: str) -> None:
        self.added.append((pr_number, label))
        self.labels.setdefault(pr_number, []).append(label)


@pytest.fixture
def release_tags() -> list[Tag]:
    """A repository with one release and one RC of the next minor."""
    return [
        Tag(name="refs/tags/v1.2.3", object_id=RELEASE_OID),
        Tag(name="refs/tags/v1.3.0-rc.1", object_id=RC_OID),
    ]


@pytest.fixture
def fake_store(release_tags: list[Tag]) -> FakeTagStore:
    return FakeTagStore(release_tags)


@pytest.fixture
def fake_pulls() -> FakePullRequests:
    return FakePullRequests()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep AV_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("AV_"):
            monkeypatch.delenv(key)


@pytest.fixture
def log_messages():
    """Collect loguru messages (with their bound extras) emitted during a test."""
    records: list[dict] = []
    handler_id = logger.add(
        lambda message: records.append(
            {
                "level": message.record["level"].name,
                "message": message.record["message"],
                "extra": dict(message.record["extra"]),
            }
        ),
        level="DEBUG",
    )
    yield records
    logger.remove(handler_id)
