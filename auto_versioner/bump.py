"""Semantic version bump intents."""

from __future__ import annotations

from enum import Enum


class Bump(str, Enum):
    """Magnitude of the next version increment."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    def __str__(self) -> str:
        return self.value

    @property
    def weight(self) -> int:
        return _WEIGHTS[self]

    def higher_impact_than(self, other: Bump) -> bool:
        """Return True if this bump changes a more significant component."""
        return self.weight > other.weight


_WEIGHTS = {Bump.MAJOR: 3, Bump.MINOR: 2, Bump.PATCH: 1}

DEFAULT_BUMP = Bump.PATCH


def parse_bump(value: str) -> Bump:
    """Convert user input ("major", "minor", "patch") into a Bump.

    Raises:
        ValueError: If the value names no known bump.
    """
    try:
        return Bump(value.strip().lower())
    except ValueError:
        raise ValueError(f"invalid bump {value!r}") from None


def max_bump(*values: Bump) -> Bump:
    """Return the highest-impact bump, defaulting to patch when empty."""
    highest = DEFAULT_BUMP
    for value in values:
        if value.higher_impact_than(highest):
            highest = value
    return highest
