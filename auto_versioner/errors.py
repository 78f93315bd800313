"""Exception hierarchy for auto-versioner.

Planner errors are fatal: a planning call either returns a complete result
or raises one of these. Malformed tag names are never errors; the catalog
simply skips them.
"""

from __future__ import annotations


class AutoVersionerError(Exception):
    """Base class for every error raised by auto-versioner."""


class InvalidBaseVersionError(AutoVersionerError):
    """The configured base version is not valid semver."""


class VersionBumpError(AutoVersionerError):
    """A version component would overflow while bumping."""


class InvalidRCStateError(AutoVersionerError):
    """A computed release-candidate number is not positive."""


class FloatingTagError(AutoVersionerError):
    """A floating tag cannot be moved because its target is unknown."""


class TagStoreError(AutoVersionerError):
    """Listing, creating or deleting a tag on the remote failed."""


class PullRequestError(AutoVersionerError):
    """A pull request lookup or label update failed."""


class PullRequestNotFoundError(PullRequestError):
    """No pull request has the given merge commit."""


class ConfigError(AutoVersionerError):
    """A configuration value could not be interpreted."""


class ServiceError(AutoVersionerError):
    """A service was called with incomplete or invalid input."""
