"""Rewrite version markers in the plugin's main source file.

Two doc-comment markers are recognised, each replaced wherever it appears::

    * @version 1.2.0
    * Version: 1.2.0

Only the value after the marker changes. Indentation, the comment prefix,
line endings and every other byte of the file are written back untouched.
"""

from __future__ import annotations

import re
from pathlib import Path

from .errors import StampError

__all__ = ["VERSION_PATTERNS", "stamp_text", "stamp_version"]

VERSION_PATTERNS = (
    re.compile(r"(?P<prefix>\*[ \t]*@version[ \t]+)[^\r\n]*"),
    re.compile(r"(?P<prefix>\*[ \t]*Version:[ \t]*)[^\r\n]*"),
)


def stamp_text(text: str, version: str) -> tuple[str, int]:
    """Return ``text`` with every version marker set to ``version``.

    Examples
    --------
    >>> stamp_text(" * Version: 1.0.0\\n * @version 1.0.0\\n", "1.1.0")
    (' * Version: 1.1.0\\n * @version 1.1.0\\n', 2)
    """
    total = 0
    for pattern in VERSION_PATTERNS:
        text, count = pattern.subn(
            lambda match: f"{match['prefix']}{version}", text
        )
        total += count
    return text, total


def stamp_version(source_file: Path, version: str) -> int:
    """Rewrite the version markers of ``source_file`` in place.

    Parameters
    ----------
    source_file : Path
        File holding the plugin header and ``@version`` tags.
    version : str
        Version written after each marker.

    Returns
    -------
    int
        Number of marker lines rewritten.

    Raises
    ------
    StampError
        Raised when the file is missing, cannot be decoded or cannot be
        written.
    """
    path = Path(source_file)
    try:
        with path.open(encoding="utf-8", newline="") as handle:
            original = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        message = f"Cannot read {path} to stamp version {version}: {exc}"
        raise StampError(message) from exc

    stamped, count = stamp_text(original, version)
    if stamped == original:
        return count

    try:
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(stamped)
    except OSError as exc:
        message = f"Cannot write version {version} to {path}: {exc}"
        raise StampError(message) from exc
    return count
