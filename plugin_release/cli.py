"""Command-line entry point for ``plugin-release``.

Examples
--------
Create the configuration file interactively::

    plugin-release

Package version 1.2.0 and publish it as a GitHub release::

    plugin-release create-package --version=1.2.0 --release-message="Bug fixes"

Package locally without publishing::

    plugin-release create-package --version=1.2.0 --git-release=false
"""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

import cyclopts

from .changelog import has_changelog, latest_version
from .config import ProjectConfig, default_config, load_config
from .errors import ConfigMissingError, ReleaseError
from .pipeline import PipelineState, ReleaseRequest, create_package
from .wizard import run_wizard

__all__ = ["app", "create_package_command", "main", "run"]

app = cyclopts.App(
    name="plugin-release",
    help="Stamp, package and publish plugin releases.",
    version_flags=[],
)


def _coerce_bool(value: object) -> bool:
    """Return ``value`` as a strict boolean."""
    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        message = f"Cannot interpret {value!r} as a boolean"
        raise TypeError(message)
    normalised = value.strip().lower()
    if normalised in {"false", "0", "no", "off"}:
        return False
    if normalised in {"", "true", "1", "yes", "on"}:
        return True
    message = f"Cannot interpret {value!r} as a boolean"
    raise ValueError(message)


def _report(exc: ReleaseError) -> int:
    print(f"error: {exc}", file=sys.stderr)
    if isinstance(exc, ConfigMissingError):
        print(
            "Run plugin-release without arguments to create the configuration.",
            file=sys.stderr,
        )
    return exc.exit_code


def _print_last(project_dir: Path) -> int:
    try:
        config = load_config(project_dir)
    except ConfigMissingError:
        config = default_config(project_dir)
    except ReleaseError as exc:
        return _report(exc)

    try:
        version = latest_version(config)
    except ReleaseError as exc:
        return _report(exc)
    print(f"Current plugin version is: {version}")
    return 0


def _describe_environment(config: ProjectConfig) -> int:
    print(f"Plugin: {config.module_name}")
    main_file = config.main_file_path
    if not main_file.is_file():
        print(
            f"error: {main_file.name} not found; run plugin-release inside the "
            "plugin root folder",
            file=sys.stderr,
        )
        return 1
    print(f"Main file: {main_file.name}")

    if has_changelog(config):
        try:
            print(f"Latest changelog version: {latest_version(config)}")
        except ReleaseError as exc:
            print(f"warning: {exc}", file=sys.stderr)
    else:
        print(f"warning: {config.changelog_file} not found", file=sys.stderr)

    if not config.include_patterns:
        print("warning: no include patterns configured", file=sys.stderr)
    if not (config.remote_account and config.remote_repo):
        print(
            "warning: [remote] account/repo not set; publishing disabled",
            file=sys.stderr,
        )
    return 0


@app.default
def main(*, last: bool = False, project_dir: Path = Path(".")) -> int:
    """Create the configuration on first use, otherwise check the project.

    Parameters
    ----------
    last:
        Print the most recent version recorded in the changelog and exit.
    project_dir:
        Plugin root folder. Defaults to the current directory.
    """
    if last:
        return _print_last(project_dir)

    try:
        config = load_config(project_dir)
    except ConfigMissingError:
        config = default_config(project_dir)
        if not config.main_file_path.is_file():
            print(
                f"error: {config.main_file_path.name} not found; this does not "
                "look like a plugin root folder",
                file=sys.stderr,
            )
            return 1
        print("plugin-release.toml not found, let's create it!")
        run_wizard(project_dir)
        return 0
    except ReleaseError as exc:
        return _report(exc)
    return _describe_environment(config)


@app.command(name="create-package")
def create_package_command(
    *,
    version: str | None = None,
    release_message: str = "",
    skip_check: bool = False,
    git_release: str = "true",
    dry_run: bool = False,
    project_dir: Path = Path("."),
) -> int:
    """Stamp the version, build the zip package and publish the release.

    Parameters
    ----------
    version:
        Version to release; ``CHANGELOG.md`` must already document it.
    release_message:
        Body text of the GitHub release.
    skip_check:
        Package even when the changelog has no entry for ``version``.
    git_release:
        Set to ``false`` to build only the local zip package.
    dry_run:
        Print the GitHub release command instead of running it.
    project_dir:
        Plugin root folder. Defaults to the current directory.
    """
    try:
        publish_remote = _coerce_bool(git_release)
    except ValueError as exc:
        print(f"error: --git-release: {exc}", file=sys.stderr)
        return 1

    request = ReleaseRequest(
        target_version=version,
        release_message=release_message,
        skip_changelog_check=skip_check,
        publish_remote=publish_remote,
        dry_run=dry_run,
    )
    try:
        result = create_package(request, project_dir)
    except ReleaseError as exc:
        return _report(exc)

    if result.stamp_error is not None:
        print("warning: version markers were not updated", file=sys.stderr)
    if result.state is PipelineState.PUBLISHED and not dry_run:
        print("Release created on GitHub")
    return 0


def run(tokens: typ.Sequence[str] | None = None) -> int:
    """Parse ``tokens`` (``sys.argv`` by default) and return the exit code."""
    result = app(tokens)
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    raise SystemExit(run())
