"""Data models for auto-versioner.

These Pydantic models represent the values passed between the tag catalog,
the planner and the services. All of them are frozen: a planning call
builds them from the caller's tag snapshot and never mutates them after.
"""

from __future__ import annotations

from enum import Enum

import semver
from pydantic import BaseModel, ConfigDict


class Mode(str, Enum):
    """Which kind of tag a planning call produces."""

    RELEASE = "release"
    RC = "rc"

    def __str__(self) -> str:
        return self.value


class BaseSource(str, Enum):
    """Where the base version of a plan came from."""

    EXISTING = "existing-release"
    CONFIGURED = "configured-base"
    ZERO_DEFAULT = "default-zero"

    def __str__(self) -> str:
        return self.value


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class Tag(_Frozen):
    """A tag reference as reported by the tag store.

    Attributes:
        name: Ref name, with or without the "refs/tags/" namespace.
        object_id: Commit the tag resolves to. Empty when unknown.
    """

    name: str
    object_id: str = ""


class ReleaseEntry(_Frozen):
    """A stable release tag (semver without pre-release identifiers)."""

    version: semver.Version
    tag: Tag


class PrereleaseEntry(_Frozen):
    """A semver tag that carries pre-release identifiers."""

    version: semver.Version
    tag: Tag


class FloatingEntry(_Frozen):
    """A bare "v<major>" convenience tag."""

    major: int
    tag: Tag


class FloatingPlan(_Frozen):
    """Detection and execution details for the floating major tag.

    Attributes:
        tag_name: Floating tag for the target release, always "v<major>".
        existing: Floating tag currently present for that major, if any.
        auto_detected: The highest existing release already has a floating
            tag pointing at it, so the convention is continued.
        auto_detected_major: Major version inspected during auto-detection.
        enabled: Floating tags are maintained for this release.
        deleted_existing: The existing floating tag must be deleted first.
        created: The floating tag is (re)created at the release commit.
    """

    tag_name: str
    existing: Tag | None = None
    auto_detected: bool = False
    auto_detected_major: int | None = None
    enabled: bool = False
    deleted_existing: bool = False
    created: bool = False


class PlanResult(_Frozen):
    """Outcome of a release or RC planning call.

    Attributes:
        mode: Release or RC.
        tag_name: Full tag name to create, including the configured prefix.
        version: Version the new tag represents.
        release_base: Version the bump was applied to.
        base_source: How release_base was chosen.
        target_release: Stable release the new tag leads up to.
        rc_number: RC ordinal; 0 in release mode.
        floating: Floating tag plan; None in RC mode.
    """

    mode: Mode
    tag_name: str
    version: semver.Version
    release_base: semver.Version
    base_source: BaseSource
    target_release: semver.Version
    rc_number: int = 0
    floating: FloatingPlan | None = None


class TagSpec(_Frozen):
    """Everything needed to create an annotated tag on the remote."""

    name: str
    commit: str
    message: str = ""
    tagger_name: str
    tagger_email: str
