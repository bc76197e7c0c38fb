"""Environment helpers shared by the release toolchain."""

from __future__ import annotations

import os
import typing as typ

__all__ = ["TOKEN_ENV_VARS", "lookup_token"]

TOKEN_ENV_VARS = ("PLUGIN_RELEASE_TOKEN", "GH_TOKEN", "GITHUB_TOKEN")


def lookup_token(environ: typ.Mapping[str, str] | None = None) -> str:
    """Return the first non-empty token from :data:`TOKEN_ENV_VARS`.

    Parameters
    ----------
    environ:
        Mapping to search; defaults to :data:`os.environ`.

    Returns
    -------
    str
        The token value, or an empty string when none of the variables are
        set.
    """
    source = os.environ if environ is None else environ
    for name in TOKEN_ENV_VARS:
        if value := (source.get(name) or "").strip():
            return value
    return ""
