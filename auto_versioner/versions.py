"""Version parsing and bumping utilities.

Handles conversion between tag names and semver objects. Tag names may carry
the "refs/tags/" namespace and a leading "v"; everything after that must be
strict SemVer 2.0.0.
"""

from __future__ import annotations

import re

import semver

from .bump import Bump
from .errors import InvalidBaseVersionError, InvalidRCStateError, VersionBumpError

TAG_REF_PREFIX = "refs/tags/"

# Version components are unsigned 64-bit; RC ordinals must fit a signed one.
MAX_COMPONENT = 2**64 - 1
MAX_RC_NUMBER = 2**63 - 1

_FLOATING_RE = re.compile(r"[vV]([0-9]+)")
_NUMERIC_RE = re.compile(r"[0-9]+")

ZERO = semver.Version(0, 0, 0)


def strip_ref(name: str) -> str:
    """Trim whitespace and the "refs/tags/" namespace from a tag name."""
    name = name.strip()
    if name.startswith(TAG_REF_PREFIX):
        name = name[len(TAG_REF_PREFIX) :]
    return name


def parse_tag_version(name: str) -> semver.Version | None:
    """Parse a tag name into a semver.Version, or None if it is not one.

    Examples:
        "refs/tags/v1.2.3" → 1.2.3
        "V2.0.0-rc.1" → 2.0.0-rc.1
        "v1" → None (floating tags are not semver)
        "release-1.2.3" → None
        "v18446744073709551616.0.0" → None (component beyond 64 bits)
    """
    normalized = strip_ref(name)
    if not normalized:
        return None

    candidates = [normalized]
    if len(normalized) > 1 and normalized[0] in "vV":
        candidates.append(normalized[1:])

    for candidate in candidates:
        try:
            version = semver.Version.parse(candidate)
        except ValueError:
            continue
        return version if _in_range(version) else None
    return None


def _in_range(version: semver.Version) -> bool:
    """Check that every numeric identifier fits an unsigned 64-bit integer."""
    if max(version.major, version.minor, version.patch) > MAX_COMPONENT:
        return False
    for part in (version.prerelease or "").split("."):
        if _NUMERIC_RE.fullmatch(part) and int(part) > MAX_COMPONENT:
            return False
    return True


def parse_version(version_str: str) -> semver.Version:
    """Parse a user-supplied version such as a configured base version.

    Accepts the same optional "refs/tags/" and "v" prefixes as tag names,
    but unlike parse_tag_version() a failure is an error.

    Raises:
        InvalidBaseVersionError: If the string is empty or not semver.
    """
    if not strip_ref(version_str):
        raise InvalidBaseVersionError("base version is empty")

    version = parse_tag_version(version_str)
    if version is None:
        raise InvalidBaseVersionError(f"invalid semver {version_str!r}")
    return version


def parse_floating_major(name: str) -> int | None:
    """Return N for a floating tag name "vN", or None for anything else."""
    match = _FLOATING_RE.fullmatch(strip_ref(name))
    if not match:
        return None
    major = int(match.group(1))
    if major > MAX_COMPONENT:
        return None
    return major


def bump_version(base: semver.Version, bump: Bump) -> semver.Version:
    """Apply a bump intent and return a new, clean version.

    The base is never modified. The result never carries pre-release or
    build metadata, even if the base did.

    Examples:
        1.2.3 + major → 2.0.0
        1.2.3 + minor → 1.3.0
        1.2.3-rc.1+build.5 + patch → 1.2.4

    Raises:
        VersionBumpError: If the bumped component would overflow.
    """
    if bump is Bump.MAJOR:
        component, value = "major", base.major
        bumped = base.bump_major()
    elif bump is Bump.MINOR:
        component, value = "minor", base.minor
        bumped = base.bump_minor()
    else:
        component, value = "patch", base.patch
        bumped = base.bump_patch()

    if value >= MAX_COMPONENT:
        raise VersionBumpError(f"cannot bump {component} of {base}: component overflow")
    return bumped.replace(prerelease=None, build=None)


def rc_number(version: semver.Version) -> int | None:
    """Return N if the version's pre-release is exactly "rc.N" with N > 0.

    "RC.2" counts; "rc.0", "rc", "rc.1.1", "beta.2" and ordinals beyond the
    signed 64-bit range do not.
    """
    if not version.prerelease:
        return None

    parts = version.prerelease.split(".")
    if len(parts) != 2:
        return None

    label, number = parts
    if label.lower() != "rc":
        return None
    if not _NUMERIC_RE.fullmatch(number):
        return None

    value = int(number)
    if value == 0 or value > MAX_RC_NUMBER:
        return None
    return value


def attach_rc(target: semver.Version, number: int) -> semver.Version:
    """Return target with pre-release "rc.<number>" and no build metadata.

    Raises:
        InvalidRCStateError: If number is not positive.
    """
    if number <= 0:
        raise InvalidRCStateError(f"invalid rc number {number}")
    return target.replace(prerelease=f"rc.{number}", build=None)
