"""Staging tree lifecycle: prepare, populate and clean up."""

from __future__ import annotations

import contextlib
import dataclasses
import shutil
import sys
import typing as typ
from pathlib import Path

from ..config import CONFIG_FILENAME
from ..errors import StagingError
from .resolution import select_files

if typ.TYPE_CHECKING:
    from ..config import ProjectConfig

__all__ = [
    "StagingArea",
    "cleanup",
    "populate",
    "prepare_staging_area",
    "staging_area",
]

TEMP_DIR_NAME = "tmp_dir"
VERSIONS_DIR_NAME = "versions"


@dataclasses.dataclass(frozen=True, slots=True)
class StagingArea:
    """Directories owned by the staging manager for one packaging run.

    Attributes
    ----------
    release_root : Path
        ``releases/`` directory holding versions and the staging tree.
    versions_dir : Path
        ``releases/versions/`` directory receiving artefacts.
    temp_root : Path
        ``releases/tmp_dir/``; removed once packaging finishes.
    package_dir : Path
        ``releases/tmp_dir/<module_name>/``; receives the copied files.
    """

    release_root: Path
    versions_dir: Path
    temp_root: Path
    package_dir: Path


def prepare_staging_area(config: ProjectConfig) -> StagingArea:
    """Create the release directories and a fresh staging tree.

    ``releases/`` and ``releases/versions/`` are created when absent and left
    alone otherwise. A staging tree left behind by an earlier run is removed
    before the new one is created.

    Raises
    ------
    StagingError
        Raised when the directories cannot be created.
    """
    release_root = config.release_root
    area = StagingArea(
        release_root=release_root,
        versions_dir=release_root / VERSIONS_DIR_NAME,
        temp_root=release_root / TEMP_DIR_NAME,
        package_dir=release_root / TEMP_DIR_NAME / config.module_name,
    )
    try:
        area.versions_dir.mkdir(parents=True, exist_ok=True)
        if area.temp_root.exists():
            shutil.rmtree(area.temp_root)
        area.package_dir.mkdir(parents=True)
    except OSError as exc:
        message = f"Cannot prepare staging directory {area.temp_root}: {exc}"
        raise StagingError(message) from exc
    return area


def _safe_destination_path(package_dir: Path, relative: Path) -> Path:
    """Resolve ``relative`` beneath ``package_dir`` and create its parent."""
    target = (package_dir / relative).resolve()
    if not target.is_relative_to(package_dir.resolve()):
        message = f"Destination escapes staging directory: {relative}"
        raise StagingError(message)
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


def populate(area: StagingArea, config: ProjectConfig) -> list[Path]:
    """Copy the configured file set into ``area.package_dir``.

    The release directory and ``plugin-release.toml``, which may hold the
    publish token, are never staged, whatever the include patterns say.

    Parameters
    ----------
    area : StagingArea
        Staging tree returned by :func:`prepare_staging_area`.
    config : ProjectConfig
        Supplies the project root and include/exclude globs.

    Returns
    -------
    list[Path]
        Staged file paths, in copy order.

    Raises
    ------
    StagingError
        Raised when no include patterns are configured, a pattern escapes
        the project root, or a copy fails.
    """
    if not config.include_patterns:
        message = "No include patterns configured under [package] include"
        raise StagingError(message)

    selection = select_files(
        config.root,
        config.include_patterns,
        config.exclude_patterns,
        skip_paths=[Path(config.release_dir), Path(CONFIG_FILENAME)],
    )
    for pattern in selection.unmatched:
        print(f"warning: include pattern matched no files: {pattern}", file=sys.stderr)

    staged: list[Path] = []
    for relative in selection.files:
        source = config.root / relative
        try:
            destination = _safe_destination_path(area.package_dir, relative)
            shutil.copy2(source, destination)
        except OSError as exc:
            message = f"Cannot stage '{relative.as_posix()}': {exc}"
            raise StagingError(message) from exc
        staged.append(destination)

    print(f"Staged {len(staged)} file(s) into '{area.package_dir}'")
    return staged


def cleanup(area: StagingArea) -> None:
    """Remove the staging tree; a missing tree is not an error."""
    shutil.rmtree(area.temp_root, ignore_errors=True)
    if area.temp_root.exists():
        print(
            f"warning: staging directory {area.temp_root} could not be removed",
            file=sys.stderr,
        )


@contextlib.contextmanager
def staging_area(config: ProjectConfig) -> typ.Iterator[StagingArea]:
    """Yield a prepared :class:`StagingArea` and always clean it up.

    Examples
    --------
    >>> with staging_area(config) as area:  # doctest: +SKIP
    ...     populate(area, config)
    """
    area = prepare_staging_area(config)
    try:
        yield area
    finally:
        cleanup(area)
