"""Tag store: list, create and delete tags on a git remote.

The planner only consumes a snapshot of {name, object_id} pairs; this module
is the collaborator that produces it and that performs the remote mutations
a plan calls for.
"""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod

from loguru import logger

from .errors import TagStoreError
from .models import Tag, TagSpec
from .shell import describe_failure, git
from .versions import TAG_REF_PREFIX

PEELED_SUFFIX = "^{}"


class TagStore(ABC):
    """Abstract interface for remote tag operations.

    Implementations must raise TagStoreError for any remote failure and
    must not retry.
    """

    @abstractmethod
    def list_tags(self) -> list[Tag]:
        """Return every tag on the remote with the commit it points at."""
        ...

    @abstractmethod
    def create_annotated_tag(self, spec: TagSpec) -> None:
        """Create an annotated tag on the remote."""
        ...

    @abstractmethod
    def delete_tag(self, name: str, expected_object_id: str) -> None:
        """Delete a tag, provided it still points at expected_object_id."""
        ...


def _parse_refs(output: str) -> dict[str, tuple[str, str]]:
    """Map ref name → (raw object id, peeled object id) from ls-remote output."""
    refs: dict[str, tuple[str, str]] = {}
    for line in output.splitlines():
        if not line.strip():
            continue
        object_id, _, ref = line.partition("\t")
        object_id, ref = object_id.strip(), ref.strip()
        if ref.endswith(PEELED_SUFFIX):
            ref = ref[: -len(PEELED_SUFFIX)]
            raw, _ = refs.get(ref, ("", ""))
            refs[ref] = (raw, object_id)
        else:
            _, peeled = refs.get(ref, ("", ""))
            refs[ref] = (object_id, peeled or object_id)
    return refs


def parse_ls_remote(output: str) -> list[Tag]:
    """Parse `git ls-remote --tags` output into Tags.

    Annotated tags are listed twice: once with the tag object and once,
    suffixed "^{}", with the commit it peels to. The commit wins so that a
    release tag and a floating tag on the same commit compare equal.

    Example:
        "aaa\trefs/tags/v1.0.0\nbbb\trefs/tags/v1.0.0^{}" → [Tag("refs/tags/v1.0.0", "bbb")]
    """
    return [Tag(name=ref, object_id=peeled) for ref, (_, peeled) in _parse_refs(output).items()]


def _ref_name(name: str) -> str:
    name = name.strip()
    return name if name.startswith(TAG_REF_PREFIX) else TAG_REF_PREFIX + name


def _short_name(name: str) -> str:
    return _ref_name(name)[len(TAG_REF_PREFIX) :]


class GitTagStore(TagStore):
    """TagStore backed by the git CLI and a configured remote.

    Args:
        remote: Remote name or URL (default "origin").
    """

    def __init__(self, remote: str = "origin") -> None:
        self.remote = remote

    def _run(self, action: str, *args: str, env: dict[str, str] | None = None) -> str:
        try:
            return git(*args, env=env)
        except subprocess.CalledProcessError as exc:
            raise TagStoreError(f"{action}: {describe_failure(exc)}") from exc

    def _remote_refs(self, *patterns: str) -> dict[str, tuple[str, str]]:
        output = self._run(
            f"listing tags on {self.remote}", "ls-remote", "--tags", self.remote, *patterns
        )
        return _parse_refs(output)

    def list_tags(self) -> list[Tag]:
        output = self._run(f"listing tags on {self.remote}", "ls-remote", "--tags", self.remote)
        tags = parse_ls_remote(output)
        logger.bind(remote=self.remote, count=len(tags)).debug("listed remote tags")
        return tags

    def create_annotated_tag(self, spec: TagSpec) -> None:
        name = _short_name(spec.name)
        message = spec.message or name
        # The tagger identity of an annotated tag is the committer identity.
        env = {
            "GIT_COMMITTER_NAME": spec.tagger_name,
            "GIT_COMMITTER_EMAIL": spec.tagger_email,
        }
        self._run(
            f"creating tag {name}",
            "tag", "--annotate", "--force", "--message", message, name, spec.commit,
            env=env,
        )
        self._run(f"pushing tag {name}", "push", self.remote, _ref_name(name))
        logger.bind(tag=name, commit=spec.commit).debug("pushed annotated tag")

    def delete_tag(self, name: str, expected_object_id: str) -> None:
        ref = _ref_name(name)
        expected = expected_object_id.strip()
        if not expected:
            raise TagStoreError(f"deleting tag {name}: expected object id is empty")

        current = self._remote_refs(ref).get(ref)
        if current is None:
            raise TagStoreError(f"deleting tag {name}: not found on {self.remote}")
        raw, peeled = current
        if expected not in (raw, peeled):
            raise TagStoreError(
                f"deleting tag {name}: points at {peeled}, expected {expected}"
            )

        self._run(
            f"deleting tag {name}",
            "push", f"--force-with-lease={ref}:{raw}", self.remote, f":{ref}",
        )
        git("tag", "--delete", _short_name(name), check=False)
        logger.bind(tag=name, object_id=expected).debug("deleted remote tag")
