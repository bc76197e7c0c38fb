"""Shared helpers for the release test suites."""

from __future__ import annotations

import dataclasses
import json
import typing as typ
from pathlib import Path

__all__ = [
    "CHANGELOG_TEXT",
    "PLUGIN_SOURCE",
    "RecordingPublisher",
    "create_file",
    "write_config",
    "write_project",
]

PLUGIN_SOURCE = """\
<?php
/**
 * Plugin Name: My Plugin
 * Description: Demo plugin used by the test-suite.
 * Version: 1.2.0
 * Author: Acme
 */

/**
 * Bootstrap the plugin.
 *
 * @version 1.2.0
 */
function my_plugin_boot() {}
"""

CHANGELOG_TEXT = """\
# Changelog

## [Unreleased]

## [2.0.0] - 2024-01-01
### Added
- Settings page.

## [1.2.0] - 2023-06-01
### Fixed
- Activation hook.
"""


def create_file(path: Path, content: str = "data") -> Path:
    """Create ``path`` with ``content``, ensuring parent directories exist."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_config(
    root: Path,
    *,
    include: typ.Sequence[str] = ("*.php",),
    exclude: typ.Sequence[str] = (),
    account: str = "acme",
    repo: str = "my-plugin",
    token: str = "",
    extra: str = "",
) -> Path:
    """Write ``plugin-release.toml`` under ``root``."""
    text = (
        "[remote]\n"
        f"account = {json.dumps(account)}\n"
        f"repo = {json.dumps(repo)}\n"
        f"token = {json.dumps(token)}\n"
        "\n"
        "[package]\n"
        f"include = {json.dumps(list(include))}\n"
        f"exclude = {json.dumps(list(exclude))}\n"
        f"{extra}"
    )
    return create_file(root / "plugin-release.toml", text)


def write_project(
    root: Path,
    *,
    include: typ.Sequence[str] = ("*.php", "includes/**"),
    exclude: typ.Sequence[str] = (),
    changelog: str | None = CHANGELOG_TEXT,
    extra: str = "",
) -> Path:
    """Populate ``root`` with a small plugin checkout and return it."""
    module_name = root.name
    create_file(root / f"{module_name}.php", PLUGIN_SOURCE)
    create_file(root / "uninstall.php", "<?php // uninstall\n")
    create_file(root / "includes" / "api.php", "<?php // api\n")
    create_file(root / "includes" / "admin" / "settings.php", "<?php // settings\n")
    create_file(root / "node_modules" / "left-pad" / "index.js", "exports.a = 1;\n")
    create_file(root / "README.md", "# My Plugin\n")
    if changelog is not None:
        create_file(root / "CHANGELOG.md", changelog)
    write_config(root, include=include, exclude=exclude, extra=extra)
    return root


@dataclasses.dataclass
class RecordingPublisher:
    """Publisher double that records each call instead of contacting GitHub."""

    error: Exception | None = None
    calls: list[dict[str, typ.Any]] = dataclasses.field(default_factory=list)

    def __call__(
        self,
        artifact: object,
        config: object,
        *,
        tag: str,
        title: str,
        message: str,
        dry_run: bool = False,
    ) -> None:
        self.calls.append(
            {
                "artifact": artifact,
                "config": config,
                "tag": tag,
                "title": title,
                "message": message,
                "dry_run": dry_run,
            }
        )
        if self.error is not None:
            raise self.error
