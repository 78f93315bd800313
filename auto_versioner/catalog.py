"""Tag catalog: classify raw tags into releases, pre-releases and floating tags.

The catalog is built once per planning call from the caller's tag snapshot.
Each tag goes through classify_tag() exactly once and lands in at most one
category; names that are neither semver nor "v<major>" are skipped.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from .models import FloatingEntry, PrereleaseEntry, ReleaseEntry, Tag
from .versions import parse_floating_major, parse_tag_version

TagEntry = ReleaseEntry | PrereleaseEntry | FloatingEntry


def classify_tag(tag: Tag) -> TagEntry | None:
    """Classify a single tag, returning None for names that are skipped.

    Examples:
        v1.2.3 → ReleaseEntry
        v1.3.0-rc.1 → PrereleaseEntry
        v1 → FloatingEntry(major=1)
        latest → None
    """
    version = parse_tag_version(tag.name)
    if version is not None:
        if version.prerelease:
            return PrereleaseEntry(version=version, tag=tag)
        return ReleaseEntry(version=version, tag=tag)

    major = parse_floating_major(tag.name)
    if major is not None:
        return FloatingEntry(major=major, tag=tag)
    return None


class Catalog(BaseModel):
    """Classified view of a tag snapshot."""

    model_config = ConfigDict(frozen=True)

    releases: tuple[ReleaseEntry, ...] = ()
    prereleases: tuple[PrereleaseEntry, ...] = ()
    floating: tuple[FloatingEntry, ...] = ()

    def highest_release(self) -> ReleaseEntry | None:
        """Return the release with the highest semver precedence.

        Ties (e.g. "v1.0.0" and "1.0.0+build") keep the first one seen.
        """
        highest: ReleaseEntry | None = None
        for entry in self.releases:
            if highest is None or entry.version > highest.version:
                highest = entry
        return highest

    def floating_for_major(self, major: int) -> FloatingEntry | None:
        """Return the first floating tag for the given major, if any."""
        for entry in self.floating:
            if entry.major == major:
                return entry
        return None


def build_catalog(tags: Iterable[Tag]) -> Catalog:
    """Classify every tag in the snapshot into a new Catalog."""
    releases: list[ReleaseEntry] = []
    prereleases: list[PrereleaseEntry] = []
    floating: list[FloatingEntry] = []

    for tag in tags:
        entry = classify_tag(tag)
        if isinstance(entry, ReleaseEntry):
            releases.append(entry)
        elif isinstance(entry, PrereleaseEntry):
            prereleases.append(entry)
        elif isinstance(entry, FloatingEntry):
            floating.append(entry)

    return Catalog(
        releases=tuple(releases),
        prereleases=tuple(prereleases),
        floating=tuple(floating),
    )
