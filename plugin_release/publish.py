"""Publish a release artefact to GitHub using the ``gh`` CLI.

Examples
--------
Publish ``releases/versions/1.2.3/my-plugin.zip`` as release ``v1.2.3``::

    publish_release(
        artifact,
        config,
        tag="v1.2.3",
        title="my-plugin v1.2.3",
        message="Bug fixes",
    )
"""

from __future__ import annotations

import shlex
import typing as typ

from plumbum import local
from plumbum.commands import CommandNotFound
from plumbum.commands.processes import ProcessTimedOut

from .errors import PublishAuthError, PublishError, PublishNetworkError

if typ.TYPE_CHECKING:
    from .archive import ReleaseArtifact
    from .config import ProjectConfig

__all__ = ["Publisher", "publish_release", "release_tag", "release_title"]

GH_AUTH_EXIT_CODE = 4
_AUTH_MARKERS = (
    "http 401",
    "http 403",
    "bad credentials",
    "authentication",
    "gh auth login",
)
_STDERR_LIMIT = 1024


class Publisher(typ.Protocol):
    """Callable that publishes an artefact as a remote release."""

    def __call__(
        self,
        artifact: ReleaseArtifact,
        config: ProjectConfig,
        *,
        tag: str,
        title: str,
        message: str,
        dry_run: bool = False,
    ) -> None: ...


def release_tag(version: str) -> str:
    """Return the git tag for ``version``, e.g. ``v1.2.3``."""
    return f"v{version}"


def release_title(module_name: str, version: str) -> str:
    """Return the release title, e.g. ``my-plugin v1.2.3``."""
    return f"{module_name} {release_tag(version)}"


def _release_arguments(
    artifact: ReleaseArtifact,
    config: ProjectConfig,
    *,
    tag: str,
    title: str,
    notes: str,
) -> list[str]:
    if not config.remote_account or not config.remote_repo:
        reason = "Set [remote] account and repo in plugin-release.toml to publish"
        raise PublishError(reason)
    return [
        "release",
        "create",
        tag,
        str(artifact.path),
        "--repo",
        f"{config.remote_account}/{config.remote_repo}",
        "--title",
        title,
        "--notes",
        notes,
    ]


def _is_auth_failure(retcode: int, stderr: str) -> bool:
    if retcode == GH_AUTH_EXIT_CODE:
        return True
    lowered = stderr.lower()
    return any(marker in lowered for marker in _AUTH_MARKERS)


def publish_release(
    artifact: ReleaseArtifact,
    config: ProjectConfig,
    *,
    tag: str,
    title: str,
    message: str,
    dry_run: bool = False,
) -> None:
    """Create release ``tag`` on GitHub with ``artifact`` attached.

    Parameters
    ----------
    artifact : ReleaseArtifact
        Zip file uploaded as the release asset.
    config : ProjectConfig
        Supplies the owner, repository, token and timeout.
    tag : str
        Git tag created for the release.
    title : str
        Release title.
    message : str
        Release body; may be empty.
    dry_run : bool
        When ``True``, print the planned ``gh`` invocation without running
        it.

    Raises
    ------
    PublishAuthError
        Raised when GitHub rejects the credentials.
    PublishNetworkError
        Raised when ``gh`` fails for any other reason or times out.
    PublishError
        Raised when the remote is not configured or ``gh`` is not installed.
    """
    arguments = _release_arguments(
        artifact, config, tag=tag, title=title, notes=message
    )
    if dry_run:
        print(f"[dry-run] gh {shlex.join(arguments)}")
        return

    try:
        command = local["gh"][arguments]
    except CommandNotFound as exc:
        reason = "The GitHub CLI (gh) is required to publish releases"
        raise PublishError(reason) from exc
    if config.remote_token:
        command = command.with_env(GH_TOKEN=config.remote_token)

    try:
        retcode, _stdout, stderr = command.run(
            retcode=None, timeout=config.publish_timeout
        )
    except ProcessTimedOut as exc:
        reason = f"gh release create timed out after {config.publish_timeout:g}s"
        raise PublishNetworkError(reason) from exc

    repository = f"{config.remote_account}/{config.remote_repo}"
    if retcode == 0:
        print(f"Published release {tag} to {repository}")
        return

    detail = (stderr or "").strip()[:_STDERR_LIMIT]
    if _is_auth_failure(retcode, detail):
        reason = f"GitHub rejected the credentials for {repository}: {detail}"
        raise PublishAuthError(reason)
    reason = f"gh release create exited with status {retcode}: {detail}"
    raise PublishNetworkError(reason)
