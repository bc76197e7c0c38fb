"""Compress the staged tree into the versioned release artefact."""

from __future__ import annotations

import contextlib
import dataclasses
import hashlib
import typing as typ
import zipfile
from pathlib import Path

from .errors import ArchiveError, ArtifactExistsError

if typ.TYPE_CHECKING:
    from .config import ProjectConfig
    from .staging import StagingArea

__all__ = ["ReleaseArtifact", "archive", "ensure_artifact_absent"]


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseArtifact:
    """Zip file produced for a release."""

    path: Path
    version: str
    module_name: str
    checksum: str | None = None


def ensure_artifact_absent(config: ProjectConfig, version: str) -> Path:
    """Return the artefact path for ``version`` if nothing occupies it.

    Raises
    ------
    ArtifactExistsError
        Raised when ``version`` has already been packaged. Remove the old
        artefact to package it again.
    """
    path = config.artifact_path(version)
    if path.exists():
        message = (
            f"Artefact for version {version} already exists at {path}; "
            "remove it to package this version again"
        )
        raise ArtifactExistsError(message)
    return path


def _staged_files(root: Path) -> list[Path]:
    return sorted(path for path in root.rglob("*") if path.is_file())


def _write_zip(destination: Path, root: Path, files: typ.Iterable[Path]) -> None:
    with zipfile.ZipFile(destination, "x", compression=zipfile.ZIP_DEFLATED) as bundle:
        for path in files:
            bundle.write(path, arcname=path.relative_to(root).as_posix())


def _sidecar_path(artifact: Path, algorithm: str) -> Path:
    return artifact.with_name(f"{artifact.name}.{algorithm}")


def _record_digest(artifact: Path, algorithm: str) -> str:
    """Write ``<digest>  <name>`` beside ``artifact`` and return the digest."""
    with artifact.open("rb") as handle:
        digest = hashlib.file_digest(handle, algorithm).hexdigest()
    _sidecar_path(artifact, algorithm).write_text(
        f"{digest}  {artifact.name}\n", encoding="utf-8"
    )
    return digest


def _discard(destination: Path, algorithm: str | None) -> None:
    """Remove a partially written archive and its sidecar."""
    with contextlib.suppress(FileNotFoundError):
        destination.unlink()
    if algorithm:
        with contextlib.suppress(FileNotFoundError):
            _sidecar_path(destination, algorithm).unlink()


def archive(area: StagingArea, version: str, config: ProjectConfig) -> ReleaseArtifact:
    """Zip ``area.temp_root`` into ``releases/versions/<version>/``.

    Entries are stored relative to the staging root, so every file sits
    under a top-level ``<module_name>/`` folder inside the archive.

    Parameters
    ----------
    area : StagingArea
        Populated staging tree.
    version : str
        Release version naming the output directory.
    config : ProjectConfig
        Supplies the artefact filename and optional checksum algorithm.

    Returns
    -------
    ReleaseArtifact
        Descriptor of the written archive.

    Raises
    ------
    ArtifactExistsError
        Raised when an artefact for ``version`` is already present.
    ArchiveError
        Raised when the staging tree is empty or the archive cannot be
        written.
    """
    destination = ensure_artifact_absent(config, version)
    files = _staged_files(area.temp_root)
    if not files:
        message = (
            "Refusing to create an empty archive: nothing staged in "
            f"{area.temp_root}"
        )
        raise ArchiveError(message)

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        message = f"Cannot create release directory {destination.parent}: {exc}"
        raise ArchiveError(message) from exc

    try:
        _write_zip(destination, area.temp_root, files)
    except FileExistsError as exc:
        message = (
            f"Artefact for version {version} appeared at {destination} "
            "while packaging"
        )
        raise ArtifactExistsError(message) from exc
    except (OSError, zipfile.LargeZipFile) as exc:
        _discard(destination, config.checksum_algorithm)
        message = f"Cannot write archive {destination}: {exc}"
        raise ArchiveError(message) from exc

    digest: str | None = None
    if config.checksum_algorithm:
        try:
            digest = _record_digest(destination, config.checksum_algorithm)
        except OSError as exc:
            _discard(destination, config.checksum_algorithm)
            message = f"Cannot write checksum for {destination}: {exc}"
            raise ArchiveError(message) from exc

    print(f"Created {destination} ({len(files)} file(s))")
    return ReleaseArtifact(
        path=destination,
        version=version,
        module_name=config.module_name,
        checksum=digest,
    )
