"""Branch name conventions: map a source branch to a bump intent."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from .bump import Bump


def _clean(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(v.strip() for v in values if v and v.strip())


class BranchMapping(BaseModel):
    """Branch prefixes that imply each bump intent."""

    model_config = ConfigDict(frozen=True)

    major_prefixes: tuple[str, ...] = ("breaking/", "major/")
    minor_prefixes: tuple[str, ...] = ("feature/", "minor/")
    patch_prefixes: tuple[str, ...] = ("bugfix/", "fix/", "hotfix/", "chore/", "patch/")

    def sanitized(self) -> BranchMapping:
        """Drop blank prefixes; an entirely empty mapping means the defaults."""
        cleaned = BranchMapping(
            major_prefixes=_clean(self.major_prefixes),
            minor_prefixes=_clean(self.minor_prefixes),
            patch_prefixes=_clean(self.patch_prefixes),
        )
        if not (cleaned.major_prefixes or cleaned.minor_prefixes or cleaned.patch_prefixes):
            return BranchMapping()
        return cleaned


DEFAULT_MAPPING = BranchMapping()


class BranchResolver:
    """Resolve bump intents from branch names."""

    def __init__(self, mapping: BranchMapping | None = None) -> None:
        self.mapping = (mapping or DEFAULT_MAPPING).sanitized()

    def resolve(self, branch: str) -> tuple[Bump, str, bool]:
        """Return (bump, matched prefix, matched) for a branch.

        Major prefixes are checked first, then minor, then patch. Branches
        matching nothing fall back to a patch bump.

        Example:
            "feature/login" → (Bump.MINOR, "feature/", True)
            "main" → (Bump.PATCH, "", False)
        """
        for bump, prefixes in (
            (Bump.MAJOR, self.mapping.major_prefixes),
            (Bump.MINOR, self.mapping.minor_prefixes),
            (Bump.PATCH, self.mapping.patch_prefixes),
        ):
            for prefix in prefixes:
                if branch.startswith(prefix):
                    return bump, prefix, True
        return Bump.PATCH, "", False
