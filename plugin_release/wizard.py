"""Interactive creation of ``plugin-release.toml``."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

from .config import config_path, default_module_name

__all__ = ["render_config", "run_wizard"]

_QUESTIONS = (
    ("account", "GitHub username or organisation"),
    ("repo", "GitHub repository name"),
    (
        "token",
        "Token with 'repo' scope (needed for private repositories; leave "
        "empty to use GH_TOKEN or the gh login)",
    ),
)


def _toml_string(value: str) -> str:
    # JSON string escapes are valid TOML basic strings.
    return json.dumps(value)


def render_config(module_name: str, answers: typ.Mapping[str, str]) -> str:
    """Return the text of a starter configuration file.

    Examples
    --------
    >>> answers = {"account": "acme", "repo": "hello"}
    >>> print(render_config("hello", answers))  # doctest: +ELLIPSIS
    [remote]
    account = "acme"
    ...
    """
    lines = [
        "[remote]",
        f"account = {_toml_string(answers.get('account', ''))}",
        f"repo = {_toml_string(answers.get('repo', ''))}",
        f"token = {_toml_string(answers.get('token', ''))}",
        "",
        "[package]",
        f"module_name = {_toml_string(module_name)}",
        f"main_file = {_toml_string(f'{module_name}.php')}",
        f"package_name = {_toml_string(f'{module_name}.zip')}",
        '# Glob patterns relative to the plugin root, e.g. ["*.php", "includes/**"]',
        "include = []",
        "exclude = []",
        "",
    ]
    return "\n".join(lines)


def run_wizard(
    project_root: Path, prompt: typ.Callable[[str], str] | None = None
) -> Path:
    """Ask for the remote settings and write ``plugin-release.toml``.

    Parameters
    ----------
    project_root : Path
        Plugin root receiving the configuration file.
    prompt : Callable[[str], str] | None
        Reads one answer; defaults to :func:`input`.

    Returns
    -------
    Path
        Location of the written configuration file.
    """
    ask = prompt or input
    answers = {key: ask(f"{question}: ").strip() for key, question in _QUESTIONS}
    path = config_path(project_root)
    path.write_text(
        render_config(default_module_name(project_root), answers), encoding="utf-8"
    )
    print(
        f"Created {path.name}; list the files to ship under [package] include "
        "before creating a package"
    )
    return path
