"""Changelog checks used to gate a release.

The changelog follows the Keep a Changelog convention: each released version
has a level-two heading such as ``## [1.2.0] - 2024-01-01`` and the newest
entry sits at the top of the file.
"""

from __future__ import annotations

import re
import typing as typ

from .errors import ChangelogFormatError, ChangelogMissingError

if typ.TYPE_CHECKING:
    from .config import ProjectConfig

__all__ = ["has_changelog", "latest_version", "version_exists"]

_HEADING_RE = re.compile(r"^## \[(?P<version>[^\]]+)\] -.*$", re.MULTILINE)


def _heading_pattern(version: str) -> re.Pattern[str]:
    return re.compile(rf"^## \[{re.escape(version)}\] -.*$", re.MULTILINE)


def has_changelog(config: ProjectConfig) -> bool:
    """Return ``True`` when the changelog document exists."""
    return config.changelog_path.is_file()


def version_exists(config: ProjectConfig, version: str) -> bool:
    """Return ``True`` when the changelog has a heading for ``version``.

    An unreadable or missing changelog yields ``False``.

    Examples
    --------
    >>> version_exists(config, "1.2.0")  # doctest: +SKIP
    True
    """
    try:
        text = config.changelog_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False
    return _heading_pattern(version).search(text) is not None


def latest_version(config: ProjectConfig) -> str:
    """Return the version of the topmost changelog heading.

    Raises
    ------
    ChangelogMissingError
        Raised when the changelog cannot be read.
    ChangelogFormatError
        Raised when no ``## [<version>] - <detail>`` heading is present.
    """
    path = config.changelog_path
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        message = f"Cannot read changelog at {path}: {exc}"
        raise ChangelogMissingError(message) from exc

    if (match := _HEADING_RE.search(text)) is None:
        message = f"No '## [<version>] - <date>' heading found in {path}"
        raise ChangelogFormatError(message)
    return match["version"]
