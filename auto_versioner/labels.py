"""Semver pull request labels and conflict decisions."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from .bump import Bump

DEFAULT_LABEL_PREFIX = "semver-"


class Decision(str, Enum):
    """What to do about a pull request's semver labels."""

    NOOP = "noop"
    ADD_EXPECTED = "add-expected"
    CONFLICT = "conflict"


class LabelDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    decision: Decision
    expected_label: str
    existing: tuple[str, ...] = ()


class LabelResolver:
    """Derive semver label names and decide how to reconcile them.

    Args:
        prefix: Prefix for generated labels (default "semver-").
        major_label: Explicit label for major bumps, overriding prefix.
        minor_label: Explicit label for minor bumps, overriding prefix.
        patch_label: Explicit label for patch bumps, overriding prefix.
    """

    def __init__(
        self,
        prefix: str = "",
        major_label: str = "",
        minor_label: str = "",
        patch_label: str = "",
    ) -> None:
        prefix = prefix or DEFAULT_LABEL_PREFIX
        overrides = {Bump.MAJOR: major_label, Bump.MINOR: minor_label, Bump.PATCH: patch_label}
        self._labels = {
            bump: (overrides[bump] or "").strip() or f"{prefix}{bump.value}" for bump in Bump
        }
        self._lower = {label.lower(): bump for bump, label in self._labels.items()}

    @property
    def labels(self) -> dict[Bump, str]:
        return dict(self._labels)

    def label_for(self, bump: Bump) -> str:
        return self._labels[bump]

    def bump_for_label(self, label: str) -> Bump | None:
        """Return the bump a label stands for (case-insensitive), if any."""
        if not label:
            return None
        return self._lower.get(label.lower())

    def semver_labels(self, existing: Iterable[str]) -> list[str]:
        return [label for label in existing if self.bump_for_label(label) is not None]

    def decide(self, existing: Iterable[str], desired: Bump) -> LabelDecision:
        """Decide whether to add the expected label, leave it, or flag a conflict.

        - NOOP: the expected label is already present.
        - CONFLICT: other semver labels are present; nothing is changed.
        - ADD_EXPECTED: no semver label yet.
        """
        expected = self.label_for(desired)
        present = self.semver_labels(existing)

        if any(label.lower() == expected.lower() for label in present):
            return LabelDecision(decision=Decision.NOOP, expected_label=expected, existing=tuple(present))
        if present:
            return LabelDecision(
                decision=Decision.CONFLICT, expected_label=expected, existing=tuple(present)
            )
        return LabelDecision(decision=Decision.ADD_EXPECTED, expected_label=expected)
