"""Release pipeline orchestrating validation, stamping, packaging and publishing.

Steps run strictly in order and each one returns only after its filesystem or
process work has finished::

    IDLE -> CONFIG_LOADED -> CHANGELOG_CHECKED -> VERSION_STAMPED
         -> STAGED -> ARCHIVED -> PUBLISHED | DONE

Any blocking failure raises a :class:`~plugin_release.errors.ReleaseError`
whose ``state`` attribute records the last state reached. Preconditions are
all checked before the source file is touched, and the staging tree is
removed before :func:`create_package` returns or raises.
"""

from __future__ import annotations

import dataclasses
import enum
import re
import sys
from pathlib import Path

from .archive import ReleaseArtifact, archive, ensure_artifact_absent
from .changelog import has_changelog, version_exists
from .config import ProjectConfig, load_config
from .errors import (
    ChangelogEntryMissingError,
    ChangelogMissingError,
    PublishError,
    ReleaseError,
    StampError,
    VersionArgumentMissingError,
    VersionFormatError,
)
from .publish import Publisher, publish_release, release_tag, release_title
from .staging import populate, staging_area
from .version_stamp import stamp_version

__all__ = [
    "PipelineResult",
    "PipelineState",
    "ReleaseRequest",
    "check_preconditions",
    "create_package",
]

_VERSION_RE = re.compile(r"[0-9A-Za-z][0-9A-Za-z._+-]*")


class PipelineState(enum.Enum):
    """States traversed by :func:`create_package`."""

    IDLE = "idle"
    CONFIG_LOADED = "config-loaded"
    CHANGELOG_CHECKED = "changelog-checked"
    VERSION_STAMPED = "version-stamped"
    STAGED = "staged"
    ARCHIVED = "archived"
    PUBLISHED = "published"
    DONE = "done"
    ABORTED = "aborted"


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Parameters of one ``create-package`` invocation.

    Attributes
    ----------
    target_version : str | None
        Version to package. ``None`` or blank aborts the pipeline.
    release_message : str
        Body text of the published release.
    skip_changelog_check : bool
        Skip the changelog heading check.
    publish_remote : bool
        Publish the artefact as a GitHub release after packaging.
    dry_run : bool
        Print the publish command instead of running it.
    """

    target_version: str | None
    release_message: str = ""
    skip_changelog_check: bool = False
    publish_remote: bool = True
    dry_run: bool = False


@dataclasses.dataclass(slots=True)
class PipelineResult:
    """Outcome of a completed pipeline run."""

    state: PipelineState
    states: list[PipelineState]
    artifact: ReleaseArtifact | None = None
    stamp_error: StampError | None = None
    stamped_markers: int = 0


class _Run:
    """Track the state of one pipeline run."""

    def __init__(self) -> None:
        self.states = [PipelineState.IDLE]

    @property
    def state(self) -> PipelineState:
        return self.states[-1]

    def advance(self, state: PipelineState) -> None:
        self.states.append(state)

    def abort(self, exc: ReleaseError) -> None:
        exc.state = self.state
        self.states.append(PipelineState.ABORTED)


def check_preconditions(config: ProjectConfig, request: ReleaseRequest) -> str:
    """Validate the request before anything is modified.

    Returns
    -------
    str
        The version to package.

    Raises
    ------
    ChangelogMissingError
        Raised when the project has no changelog.
    VersionArgumentMissingError
        Raised when the request carries no version.
    VersionFormatError
        Raised when the version could not be used as a directory name, such
        as ``../1.0`` or ``/tmp/x``.
    ChangelogEntryMissingError
        Raised when the changelog lacks the version's heading and the check
        was not skipped.
    ArtifactExistsError
        Raised when the version has already been packaged.
    """
    if not has_changelog(config):
        message = (
            f"{config.changelog_file} not found; the plugin must keep a changelog "
            "in the https://keepachangelog.com/en/1.0.0/ format"
        )
        raise ChangelogMissingError(message)

    version = (request.target_version or "").strip()
    if not version:
        message = "Specify a release version with --version"
        raise VersionArgumentMissingError(message)
    if not _VERSION_RE.fullmatch(version):
        message = (
            f"Invalid release version {version!r}; use letters, digits, "
            "'.', '-', '+' or '_', starting with a letter or digit"
        )
        raise VersionFormatError(message)

    if not request.skip_changelog_check and not version_exists(config, version):
        message = (
            f"No '## [{version}] - ...' entry in {config.changelog_file}; "
            "document the release before packaging it"
        )
        raise ChangelogEntryMissingError(message)

    ensure_artifact_absent(config, version)
    return version


def _stamp(config: ProjectConfig, version: str, result: PipelineResult) -> None:
    try:
        result.stamped_markers = stamp_version(config.main_file_path, version)
    except StampError as exc:
        result.stamp_error = exc
        print(f"warning: {exc}; packaging continues", file=sys.stderr)
        return
    if result.stamped_markers == 0:
        print(
            f"warning: no version markers found in {config.main_file_path}",
            file=sys.stderr,
        )


def create_package(
    request: ReleaseRequest,
    project_root: Path,
    *,
    publisher: Publisher = publish_release,
) -> PipelineResult:
    """Run the release pipeline for ``request`` in ``project_root``.

    Parameters
    ----------
    request : ReleaseRequest
        Version and options for this run.
    project_root : Path
        Plugin root holding ``plugin-release.toml`` and ``CHANGELOG.md``.
    publisher : Publisher
        Callable used to publish the artefact; replaced in tests.

    Returns
    -------
    PipelineResult
        Final state, artefact, and any non-fatal stamping error.

    Raises
    ------
    ReleaseError
        Raised on any blocking failure. A publish failure leaves the local
        artefact in place so publishing can be retried separately.
    """
    run = _Run()
    try:
        config = load_config(project_root)
        run.advance(PipelineState.CONFIG_LOADED)

        version = check_preconditions(config, request)
        run.advance(PipelineState.CHANGELOG_CHECKED)

        print(f"Creating {config.module_name} {version}...")
        result = PipelineResult(state=run.state, states=run.states)
        _stamp(config, version, result)
        run.advance(PipelineState.VERSION_STAMPED)

        with staging_area(config) as area:
            populate(area, config)
            run.advance(PipelineState.STAGED)
            artifact = archive(area, version, config)
        result.artifact = artifact
        run.advance(PipelineState.ARCHIVED)

        if request.publish_remote:
            _publish(artifact, config, request, publisher)
            run.advance(PipelineState.PUBLISHED)
        else:
            run.advance(PipelineState.DONE)
    except ReleaseError as exc:
        run.abort(exc)
        raise

    result.state = run.state
    return result


def _publish(
    artifact: ReleaseArtifact,
    config: ProjectConfig,
    request: ReleaseRequest,
    publisher: Publisher,
) -> None:
    try:
        publisher(
            artifact,
            config,
            tag=release_tag(artifact.version),
            title=release_title(artifact.module_name, artifact.version),
            message=request.release_message,
            dry_run=request.dry_run,
        )
    except PublishError:
        print(
            f"Local artefact kept at {artifact.path}; publish it again once "
            "the problem is fixed",
            file=sys.stderr,
        )
        raise
