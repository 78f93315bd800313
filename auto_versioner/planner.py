"""Tag planner: compute the next release or release-candidate tag.

Planning is pure. Given a snapshot of the repository's tags and a bump
intent, the planner:
1. Builds a catalog of releases, pre-releases and floating tags
2. Chooses the base version (highest release, configured base, or 0.0.0)
3. Bumps it to the target release
4. For RCs, numbers the candidate after the highest existing "rc.N"
5. For releases, plans the floating "v<major>" tag

Nothing here talks to a remote; TaggingService executes the plan.
"""

from __future__ import annotations

from collections.abc import Iterable

import semver
from loguru import logger

from .bump import Bump
from .catalog import Catalog, build_catalog
from .errors import FloatingTagError, InvalidBaseVersionError
from .models import BaseSource, FloatingPlan, Mode, PlanResult, PrereleaseEntry, ReleaseEntry, Tag
from .versions import ZERO, attach_rc, bump_version, parse_version, rc_number


def choose_base_release(
    releases: Iterable[ReleaseEntry], base_override: str = ""
) -> tuple[semver.Version, BaseSource]:
    """Choose the version to bump from.

    Precedence: highest existing release, then the configured override,
    then 0.0.0. The override is only consulted when no release exists.

    Raises:
        InvalidBaseVersionError: If the override is needed and not semver.
    """
    highest = Catalog(releases=tuple(releases)).highest_release()
    if highest is not None:
        return highest.version, BaseSource.EXISTING

    if base_override and base_override.strip():
        try:
            return parse_version(base_override), BaseSource.CONFIGURED
        except InvalidBaseVersionError as exc:
            raise InvalidBaseVersionError(f"invalid base version: {exc}") from exc

    return ZERO, BaseSource.ZERO_DEFAULT


def next_rc_number(target: semver.Version, prereleases: Iterable[PrereleaseEntry]) -> int:
    """Return the next RC ordinal for the target release.

    Only pre-releases of the same major.minor.patch whose identifiers are
    exactly "rc.N" (N > 0) count; other channels such as "beta.5" never
    influence the sequence.
    """
    highest = 0
    for entry in prereleases:
        version = entry.version
        if (version.major, version.minor, version.patch) != (
            target.major,
            target.minor,
            target.patch,
        ):
            continue
        number = rc_number(version)
        if number is not None and number > highest:
            highest = number
    return highest + 1


def floating_tag_name(major: int) -> str:
    """Name of the floating tag for a major version. Always "v", never the tag prefix."""
    return f"v{major}"


def _auto_detect(catalog: Catalog) -> tuple[bool, int | None]:
    """Check whether the highest release already has a floating tag on it."""
    highest = catalog.highest_release()
    if highest is None:
        return False, None

    major = highest.version.major
    object_id = highest.tag.object_id.strip()
    if not object_id:
        return False, major

    for entry in catalog.floating:
        if entry.major == major and entry.tag.object_id.strip() == object_id:
            return True, major
    return False, major


def plan_floating(
    catalog: Catalog, target: semver.Version, *, use_floating_tags: bool = False
) -> FloatingPlan:
    """Plan the floating "v<major>" tag for a new release.

    The plan is enabled when the caller asks for floating tags, or when the
    repository already follows the convention (auto-detection). An enabled
    plan always creates the tag; if one already exists for the target major
    it is deleted first, since tags cannot be moved in place.

    Raises:
        FloatingTagError: If an existing floating tag must be deleted but
            its object id is unknown.
    """
    name = floating_tag_name(target.major)
    existing_entry = catalog.floating_for_major(target.major)
    existing = existing_entry.tag if existing_entry is not None else None
    auto_detected, detected_major = _auto_detect(catalog)

    enabled = use_floating_tags or auto_detected
    if not enabled:
        return FloatingPlan(
            tag_name=name,
            existing=existing,
            auto_detected=auto_detected,
            auto_detected_major=detected_major,
        )

    if existing is not None and not existing.object_id.strip():
        raise FloatingTagError(f"floating tag {existing.name} missing object id")

    return FloatingPlan(
        tag_name=name,
        existing=existing,
        auto_detected=auto_detected,
        auto_detected_major=detected_major,
        enabled=True,
        deleted_existing=existing is not None,
        created=True,
    )


class Planner:
    """Compute release and RC tag plans from a tag snapshot.

    Args:
        tag_prefix: String prepended to computed tag names (e.g. "v").
    """

    def __init__(self, tag_prefix: str = "") -> None:
        self.tag_prefix = tag_prefix.strip()

    def format_tag_name(self, version: semver.Version) -> str:
        return f"{self.tag_prefix}{version}"

    def _target(
        self, tags: Iterable[Tag], bump: Bump, base_override: str
    ) -> tuple[Catalog, semver.Version, BaseSource, semver.Version]:
        tags = list(tags)
        catalog = build_catalog(tags)
        skipped = len(tags) - len(catalog.releases) - len(catalog.prereleases) - len(catalog.floating)
        logger.bind(
            releases=len(catalog.releases),
            prereleases=len(catalog.prereleases),
            floating=len(catalog.floating),
            skipped=skipped,
        ).debug("tag catalog built")

        base, source = choose_base_release(catalog.releases, base_override)
        target = bump_version(base, bump)
        return catalog, base, source, target

    def plan_release(
        self,
        tags: Iterable[Tag],
        bump: Bump,
        base_override: str = "",
        *,
        use_floating_tags: bool = False,
    ) -> PlanResult:
        """Plan the next stable release tag and its floating tag.

        Example:
            tags [v1.2.3, v1.3.0-rc.1], bump minor → v1.3.0 (base 1.2.3, existing)
        """
        catalog, base, source, target = self._target(tags, bump, base_override)
        return PlanResult(
            mode=Mode.RELEASE,
            tag_name=self.format_tag_name(target),
            version=target,
            release_base=base,
            base_source=source,
            target_release=target,
            floating=plan_floating(catalog, target, use_floating_tags=use_floating_tags),
        )

    def plan_rc(self, tags: Iterable[Tag], bump: Bump, base_override: str = "") -> PlanResult:
        """Plan the next release-candidate tag for the release the bump implies.

        Example:
            tags [v2.0.0, v2.1.0-rc.3, v2.1.0-beta.1], bump minor → v2.1.0-rc.4
        """
        catalog, base, source, target = self._target(tags, bump, base_override)
        number = next_rc_number(target, catalog.prereleases)
        version = attach_rc(target, number)
        return PlanResult(
            mode=Mode.RC,
            tag_name=self.format_tag_name(version),
            version=version,
            release_base=base,
            base_source=source,
            target_release=target,
            rc_number=number,
        )
