"""Error hierarchy for the release pipeline.

Each error kind carries the process exit code the CLI reports for it, so
scripts wrapping ``plugin-release`` can tell failures apart without parsing
messages.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .pipeline import PipelineState

__all__ = [
    "ArchiveError",
    "ArtifactExistsError",
    "ChangelogEntryMissingError",
    "ChangelogFormatError",
    "ChangelogMissingError",
    "ConfigError",
    "ConfigMissingError",
    "PublishAuthError",
    "PublishError",
    "PublishNetworkError",
    "ReleaseError",
    "StagingError",
    "StampError",
    "VersionArgumentMissingError",
    "VersionFormatError",
]


class ReleaseError(RuntimeError):
    """Raised when the release pipeline cannot continue."""

    exit_code: typ.ClassVar[int] = 1
    state: PipelineState | None = None


class ConfigMissingError(ReleaseError):
    """Raised when ``plugin-release.toml`` does not exist."""

    exit_code = 2


class ConfigError(ReleaseError):
    """Raised when the configuration file is malformed."""

    exit_code = 2


class ChangelogMissingError(ReleaseError):
    """Raised when the project has no changelog document."""

    exit_code = 3


class ChangelogEntryMissingError(ReleaseError):
    """Raised when the changelog lacks a heading for the requested version."""

    exit_code = 4


class ChangelogFormatError(ChangelogEntryMissingError):
    """Raised when the changelog holds no recognisable version heading."""


class VersionArgumentMissingError(ReleaseError):
    """Raised when no target version was supplied."""

    exit_code = 5


class VersionFormatError(VersionArgumentMissingError):
    """Raised when the target version is not a plain version string."""


class StampError(ReleaseError):
    """Raised when version markers cannot be rewritten."""

    exit_code = 6


class StagingError(ReleaseError):
    """Raised when the staging tree cannot be prepared or populated."""

    exit_code = 7


class ArchiveError(ReleaseError):
    """Raised when the release archive cannot be produced."""

    exit_code = 8


class ArtifactExistsError(ArchiveError):
    """Raised when the artefact for a version has already been packaged."""


class PublishError(ReleaseError):
    """Raised when the release cannot be published."""

    exit_code = 9


class PublishAuthError(PublishError):
    """Raised when the remote rejects the supplied credentials."""

    exit_code = 10


class PublishNetworkError(PublishError):
    """Raised when the publish call fails or times out."""

    exit_code = 11
