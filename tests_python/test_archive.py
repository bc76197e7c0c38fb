"""Tests for building the release archive."""

from __future__ import annotations

import dataclasses
import hashlib
import zipfile

import pytest
from release_test_helpers import create_file

from plugin_release.archive import archive, ensure_artifact_absent
from plugin_release.config import ProjectConfig
from plugin_release.errors import ArchiveError, ArtifactExistsError
from plugin_release.staging import populate, prepare_staging_area


def test_archive_writes_versioned_zip(project_config: ProjectConfig) -> None:
    """The zip lands under ``versions/<version>`` with a module folder inside."""
    area = prepare_staging_area(project_config)
    populate(area, project_config)

    artifact = archive(area, "2.0.0", project_config)

    expected = project_config.root / "releases" / "versions" / "2.0.0" / "my-plugin.zip"
    assert artifact.path == expected
    assert artifact.version == "2.0.0"
    assert artifact.module_name == "my-plugin"
    assert artifact.checksum is None
    with zipfile.ZipFile(expected) as bundle:
        names = set(bundle.namelist())
    assert names == {
        "my-plugin/my-plugin.php",
        "my-plugin/uninstall.php",
        "my-plugin/includes/api.php",
        "my-plugin/includes/admin/settings.php",
    }


def test_archive_refuses_empty_staging_tree(project_config: ProjectConfig) -> None:
    """An empty staging tree is an error, and no zip is written."""
    area = prepare_staging_area(project_config)

    with pytest.raises(ArchiveError, match="empty archive"):
        archive(area, "2.0.0", project_config)

    assert not project_config.artifact_path("2.0.0").exists()


def test_archive_never_overwrites_existing_artifact(
    project_config: ProjectConfig,
) -> None:
    """An existing artefact for the version is left untouched."""
    existing = create_file(project_config.artifact_path("2.0.0"), "original")
    area = prepare_staging_area(project_config)
    populate(area, project_config)

    with pytest.raises(ArtifactExistsError):
        archive(area, "2.0.0", project_config)

    assert existing.read_text(encoding="utf-8") == "original"


def test_ensure_artifact_absent_returns_target(project_config: ProjectConfig) -> None:
    """A free slot yields the artefact path."""
    assert ensure_artifact_absent(project_config, "3.0.0") == (
        project_config.artifact_path("3.0.0")
    )


def test_archive_writes_checksum_sidecar(project_config: ProjectConfig) -> None:
    """A configured checksum algorithm produces a sidecar and digest."""
    config = dataclasses.replace(project_config, checksum_algorithm="sha256")
    area = prepare_staging_area(config)
    populate(area, config)

    artifact = archive(area, "2.0.0", config)

    digest = hashlib.sha256(artifact.path.read_bytes()).hexdigest()
    sidecar = artifact.path.with_name("my-plugin.zip.sha256")
    assert artifact.checksum == digest
    assert sidecar.read_text(encoding="utf-8") == f"{digest}  my-plugin.zip\n"


def test_archive_reports_blocked_version_directory(
    project_config: ProjectConfig,
) -> None:
    """A file occupying the version directory is a write failure, not a rerun."""
    blocker = create_file(project_config.release_root / "versions" / "2.0.0", "x")
    area = prepare_staging_area(project_config)
    populate(area, project_config)

    with pytest.raises(ArchiveError, match="Cannot create release directory") as exc:
        archive(area, "2.0.0", project_config)

    assert not isinstance(exc.value, ArtifactExistsError), (
        "A blocked directory must not be reported as an existing artefact"
    )
    assert blocker.read_text(encoding="utf-8") == "x"
