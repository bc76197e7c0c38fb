"""Glob resolution for the include and exclude file sets."""

from __future__ import annotations

import dataclasses
import fnmatch
import glob
import typing as typ
from pathlib import Path, PurePosixPath, PureWindowsPath

from ..errors import StagingError

__all__ = ["FileSelection", "expand_pattern", "select_files"]


@dataclasses.dataclass(frozen=True, slots=True)
class FileSelection:
    """Files chosen for staging, relative to the project root."""

    files: tuple[Path, ...]
    unmatched: tuple[str, ...]


def _pattern_parts(pattern: str) -> tuple[str, ...]:
    return PurePosixPath(pattern.replace("\\", "/")).parts


def _reject_escaping_pattern(pattern: str) -> None:
    if PurePosixPath(pattern).is_absolute() or PureWindowsPath(pattern).is_absolute():
        message = f"Glob patterns must be relative to the project root: {pattern}"
        raise StagingError(message)
    if ".." in _pattern_parts(pattern):
        message = f"Glob pattern escapes the project root: {pattern}"
        raise StagingError(message)


def _names_hidden_parts(relative: Path, pattern: str) -> bool:
    """Return ``True`` when every dot-entry in ``relative`` is named by ``pattern``.

    Dot-entries such as ``.git`` or ``.env`` only match a pattern segment that
    itself starts with a dot, so ``*`` and ``**`` never reach them.

    Examples
    --------
    >>> _names_hidden_parts(Path(".github/workflows/ci.yml"), ".github/**")
    True
    >>> _names_hidden_parts(Path(".env"), "*")
    False
    """
    dot_segments = [part for part in _pattern_parts(pattern) if part.startswith(".")]
    return all(
        any(fnmatch.fnmatchcase(part, segment) for segment in dot_segments)
        for part in relative.parts
        if part.startswith(".")
    )


def _files_below(path: Path) -> typ.Iterator[Path]:
    if path.is_file():
        yield path
    elif path.is_dir():
        yield from (child for child in path.rglob("*") if child.is_file())


def expand_pattern(
    root: Path, pattern: str, *, match_hidden: bool = False
) -> set[Path]:
    """Return files under ``root`` matched by ``pattern``, relative to ``root``.

    A matched directory contributes every file beneath it. Patterns without
    glob magic are treated as literal paths. Hidden files and directories are
    skipped unless the pattern names them or ``match_hidden`` is set.

    Example:
        >>> root = Path("/tmp/plugin")
        >>> (root / "includes").mkdir(parents=True, exist_ok=True)
        >>> _ = (root / "includes" / "api.php").write_text("<?php", encoding="utf-8")
        >>> sorted(expand_pattern(root, "includes"))
        [PosixPath('includes/api.php')]
    """
    _reject_escaping_pattern(pattern)
    if glob.has_magic(pattern):
        matches: typ.Iterable[Path] = root.glob(pattern)
    else:
        matches = [root / pattern]
    found = {
        path.relative_to(root) for match in matches for path in _files_below(match)
    }
    if match_hidden:
        return found
    return {path for path in found if _names_hidden_parts(path, pattern)}


def _is_below(path: Path, directories: typ.Iterable[Path]) -> bool:
    return any(path == parent or parent in path.parents for parent in directories)


def select_files(
    root: Path,
    include_patterns: typ.Sequence[str],
    exclude_patterns: typ.Sequence[str],
    *,
    skip_paths: typ.Iterable[Path] = (),
) -> FileSelection:
    """Return the include set minus anything excluded.

    Parameters
    ----------
    root : Path
        Directory every pattern is resolved against.
    include_patterns : Sequence[str]
        Globs expanded independently and unioned in order. Hidden entries
        are only included when a pattern names them explicitly.
    exclude_patterns : Sequence[str]
        Globs whose matches are dropped; excludes win over includes and also
        match hidden entries.
    skip_paths : Iterable[Path]
        Files or directories relative to ``root`` that never contribute
        files.

    Returns
    -------
    FileSelection
        Sorted relative file paths plus the include patterns that matched
        nothing.
    """
    included: set[Path] = set()
    unmatched: list[str] = []
    for pattern in include_patterns:
        matched = expand_pattern(root, pattern)
        if not matched:
            unmatched.append(pattern)
        included |= matched

    excluded: set[Path] = set()
    for pattern in exclude_patterns:
        excluded |= expand_pattern(root, pattern, match_hidden=True)

    skipped = [Path(entry) for entry in skip_paths]
    selected = sorted(
        path
        for path in included
        if path not in excluded and not _is_below(path, skipped)
    )
    return FileSelection(files=tuple(selected), unmatched=tuple(unmatched))
