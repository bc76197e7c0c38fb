"""Tests for the changelog checks."""

from __future__ import annotations

import pytest
from release_test_helpers import create_file

from plugin_release import changelog
from plugin_release.config import ProjectConfig
from plugin_release.errors import ChangelogFormatError, ChangelogMissingError


def test_has_changelog_reports_presence(project_config: ProjectConfig) -> None:
    """The changelog fixture should be detected, and its removal noticed."""
    assert changelog.has_changelog(project_config), "CHANGELOG.md should be found"

    project_config.changelog_path.unlink()

    assert not changelog.has_changelog(
        project_config
    ), "A deleted changelog must not be reported as present"


@pytest.mark.parametrize("version", ["2.0.0", "1.2.0"])
def test_version_exists_for_documented_versions(
    project_config: ProjectConfig, version: str
) -> None:
    """Every version with a heading is found."""
    assert changelog.version_exists(
        project_config, version
    ), f"Version {version} should be documented"


@pytest.mark.parametrize("version", ["9.9.9", "2.0", "Unreleased", "1.2.0.1"])
def test_version_exists_rejects_undocumented_versions(
    project_config: ProjectConfig, version: str
) -> None:
    """Versions without a ``## [v] - detail`` heading are reported missing."""
    assert not changelog.version_exists(
        project_config, version
    ), f"Version {version} must not be reported as documented"


def test_version_exists_matches_version_literally(
    project_config: ProjectConfig,
) -> None:
    """Dots in the version are not treated as regex wildcards."""
    create_file(project_config.changelog_path, "## [2x0x0] - 2024-01-01\n")

    assert not changelog.version_exists(
        project_config, "2.0.0"
    ), "'2.0.0' must not match the heading for '2x0x0'"


def test_version_exists_fails_closed_without_changelog(
    project_config: ProjectConfig,
) -> None:
    """A missing changelog yields ``False`` rather than an exception."""
    project_config.changelog_path.unlink()

    assert changelog.version_exists(project_config, "2.0.0") is False


def test_version_exists_ignores_headings_inside_lines(
    project_config: ProjectConfig,
) -> None:
    """Headings must start a line to count."""
    create_file(
        project_config.changelog_path, "See ## [3.0.0] - soon for details.\n"
    )

    assert not changelog.version_exists(project_config, "3.0.0")


def test_latest_version_returns_topmost_heading(
    project_config: ProjectConfig,
) -> None:
    """The first dated heading wins and ``[Unreleased]`` is skipped."""
    assert changelog.latest_version(project_config) == "2.0.0"


def test_latest_version_handles_crlf_documents(
    project_config: ProjectConfig,
) -> None:
    """Windows line endings do not leak into the version token."""
    project_config.changelog_path.write_bytes(
        b"# Changelog\r\n\r\n## [3.1.0] - 2024-02-02\r\n## [3.0.0] - 2024-01-01\r\n"
    )

    assert changelog.latest_version(project_config) == "3.1.0"


def test_latest_version_raises_without_headings(
    project_config: ProjectConfig,
) -> None:
    """A changelog without entries is an error, not an empty version."""
    create_file(project_config.changelog_path, "# Changelog\n\n## [Unreleased]\n")

    with pytest.raises(ChangelogFormatError, match="No '## \\[<version>\\]"):
        changelog.latest_version(project_config)


def test_latest_version_raises_when_changelog_missing(
    project_config: ProjectConfig,
) -> None:
    """Reading the latest version of a missing changelog raises."""
    project_config.changelog_path.unlink()

    with pytest.raises(ChangelogMissingError):
        changelog.latest_version(project_config)
