"""Behavioural tests for the ``plugin-release`` command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from release_test_helpers import PLUGIN_SOURCE, create_file

from plugin_release import cli


def _artifact(root: Path, version: str) -> Path:
    return root / "releases" / "versions" / version / "my-plugin.zip"


def test_create_package_command_builds_local_package(
    plugin_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """``--git-release=false`` produces the zip and exits cleanly."""
    code = cli.create_package_command(
        version="2.0.0", git_release="false", project_dir=plugin_root
    )

    assert code == 0
    assert _artifact(plugin_root, "2.0.0").is_file()
    assert "Creating my-plugin 2.0.0" in capsys.readouterr().out


def test_create_package_command_dry_run_prints_release(
    plugin_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Dry runs package locally and print the release command."""
    code = cli.create_package_command(
        version="2.0.0",
        release_message="Fixes",
        dry_run=True,
        project_dir=plugin_root,
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "[dry-run] gh release create v2.0.0" in out
    assert "Release created on GitHub" not in out


@pytest.mark.parametrize(
    ("kwargs", "expected_code", "fragment"),
    [
        ({"version": "9.9.9"}, 4, "No '## [9.9.9] - ...' entry"),
        ({}, 5, "Specify a release version"),
        ({"version": "2.0.0", "git_release": "maybe"}, 1, "--git-release"),
    ],
)
def test_create_package_command_reports_failures(
    plugin_root: Path,
    capsys: pytest.CaptureFixture[str],
    kwargs: dict[str, str],
    expected_code: int,
    fragment: str,
) -> None:
    """Failures print a diagnostic and return the error kind's exit code."""
    code = cli.create_package_command(project_dir=plugin_root, **kwargs)

    assert code == expected_code
    assert fragment in capsys.readouterr().err
    assert (plugin_root / "my-plugin.php").read_text(encoding="utf-8") == PLUGIN_SOURCE


def test_create_package_command_without_config_points_to_wizard(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A missing configuration exits with code 2 and suggests the wizard."""
    code = cli.create_package_command(version="1.0.0", project_dir=tmp_path)

    assert code == 2
    assert "without arguments" in capsys.readouterr().err


def test_main_last_prints_latest_version(
    plugin_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """``--last`` prints the topmost changelog version."""
    assert cli.main(last=True, project_dir=plugin_root) == 0
    assert "Current plugin version is: 2.0.0" in capsys.readouterr().out


def test_main_last_works_without_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """``--last`` only needs the changelog."""
    create_file(tmp_path / "CHANGELOG.md", "## [0.3.0] - 2024-03-03\n")

    assert cli.main(last=True, project_dir=tmp_path) == 0
    assert "0.3.0" in capsys.readouterr().out


def test_main_last_without_entries_fails(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A changelog without headings exits non-zero."""
    create_file(tmp_path / "CHANGELOG.md", "# Changelog\n")

    assert cli.main(last=True, project_dir=tmp_path) == 4
    assert "error:" in capsys.readouterr().err


def test_main_describes_configured_project(
    plugin_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """With configuration present the default command summarises the project."""
    assert cli.main(project_dir=plugin_root) == 0

    out = capsys.readouterr().out
    assert "Plugin: my-plugin" in out
    assert "Latest changelog version: 2.0.0" in out


def test_main_rejects_non_plugin_folder(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Without a main plugin file the wizard does not start."""
    assert cli.main(project_dir=tmp_path) == 1
    assert "does not look like a plugin root" in capsys.readouterr().err
    assert not (tmp_path / "plugin-release.toml").exists()


def test_main_runs_wizard_when_config_missing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A plugin folder without configuration gets one from the wizard."""
    root = tmp_path / "my-plugin"
    create_file(root / "my-plugin.php", PLUGIN_SOURCE)
    answers = iter(["acme", "my-plugin", ""])
    monkeypatch.setattr("builtins.input", lambda _prompt: next(answers))

    assert cli.main(project_dir=root) == 0

    text = (root / "plugin-release.toml").read_text(encoding="utf-8")
    assert 'account = "acme"' in text
    assert 'module_name = "my-plugin"' in text


def test_run_parses_create_package_tokens(plugin_root: Path) -> None:
    """The cyclopts app accepts the documented flag spellings."""
    code = cli.run(
        [
            "create-package",
            "--version=2.0.0",
            "--git-release=false",
            "--project-dir",
            str(plugin_root),
        ]
    )

    assert code == 0
    assert _artifact(plugin_root, "2.0.0").is_file()


def test_run_last_flag(plugin_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """``--last`` is accepted on the default command."""
    assert cli.run(["--last", "--project-dir", str(plugin_root)]) == 0
    assert "2.0.0" in capsys.readouterr().out
