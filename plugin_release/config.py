"""Project configuration model and loader.

The configuration lives in ``plugin-release.toml`` at the plugin root and is
read once per invocation. The resulting :class:`ProjectConfig` is passed
explicitly to every pipeline component.

Usage
-----
Load the configuration for the current plugin checkout::

    from pathlib import Path
    from plugin_release.config import load_config

    config = load_config(Path("."))
    print(f"Main file: {config.main_file_path}")
"""

from __future__ import annotations

import dataclasses
import hashlib
import typing as typ
from pathlib import Path

import tomllib

from .environment import lookup_token
from .errors import ConfigError, ConfigMissingError

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_PUBLISH_TIMEOUT",
    "ProjectConfig",
    "config_path",
    "default_config",
    "default_module_name",
    "load_config",
]

CONFIG_FILENAME = "plugin-release.toml"
DEFAULT_PUBLISH_TIMEOUT = 300.0


@dataclasses.dataclass(frozen=True, slots=True)
class ProjectConfig:
    """Concrete configuration produced by :func:`load_config`.

    Parameters
    ----------
    root : Path
        Plugin project root; every relative path resolves against it.
    module_name : str
        Plugin slug. Names the staged directory and the default artefact.
    package_name : str
        Filename of the zip artefact written for each version.
    include_patterns : tuple[str, ...]
        Glob patterns selecting the files that ship in the package.
    exclude_patterns : tuple[str, ...]
        Glob patterns removed from the include set. Excludes always win.
    remote_account : str
        GitHub owner receiving the release.
    remote_repo : str
        GitHub repository receiving the release.
    remote_token : str
        Token used to authenticate the publish call. May be empty.
    main_file : str, default=""
        Source file whose version markers are stamped. Defaults to
        ``<module_name>.php``.
    changelog_file : str, default="CHANGELOG.md"
        Changelog path relative to :attr:`root`.
    release_dir : str, default="releases"
        Directory holding versioned artefacts and the transient staging tree.
    checksum_algorithm : str | None, optional
        When set, a checksum sidecar is written next to each artefact.
    publish_timeout : float, default=300.0
        Seconds allowed for the publish call before it is abandoned.

    Examples
    --------
    >>> config = ProjectConfig(  # doctest: +SKIP
    ...     root=Path("/src/my-plugin"),
    ...     module_name="my-plugin",
    ...     package_name="my-plugin.zip",
    ...     include_patterns=("*.php",),
    ...     exclude_patterns=(),
    ...     remote_account="acme",
    ...     remote_repo="my-plugin",
    ...     remote_token="",
    ... )
    >>> config.main_file_path  # doctest: +SKIP
    PosixPath('/src/my-plugin/my-plugin.php')
    """

    root: Path
    module_name: str
    package_name: str
    include_patterns: tuple[str, ...]
    exclude_patterns: tuple[str, ...]
    remote_account: str = ""
    remote_repo: str = ""
    remote_token: str = ""
    main_file: str = ""
    changelog_file: str = "CHANGELOG.md"
    release_dir: str = "releases"
    checksum_algorithm: str | None = None
    publish_timeout: float = DEFAULT_PUBLISH_TIMEOUT

    @property
    def main_file_path(self) -> Path:
        """Return the absolute path of the file carrying version markers."""
        return self.root / (self.main_file or f"{self.module_name}.php")

    @property
    def changelog_path(self) -> Path:
        """Return the absolute changelog path."""
        return self.root / self.changelog_file

    @property
    def release_root(self) -> Path:
        """Return the directory that holds versions and staging."""
        return self.root / self.release_dir

    def artifact_path(self, version: str) -> Path:
        """Return where the artefact for ``version`` is written."""
        return self.release_root / "versions" / version / self.package_name


def config_path(project_root: Path) -> Path:
    """Return the configuration file location for ``project_root``."""
    return Path(project_root) / CONFIG_FILENAME


def default_module_name(project_root: Path) -> str:
    """Return the plugin slug implied by the project directory name."""
    return Path(project_root).resolve().name


def default_config(project_root: Path) -> ProjectConfig:
    """Return the configuration implied by ``project_root`` alone.

    Used where a command only needs default paths, such as reading the
    changelog before ``plugin-release.toml`` exists.
    """
    root = Path(project_root)
    module_name = default_module_name(root)
    return ProjectConfig(
        root=root,
        module_name=module_name,
        package_name=f"{module_name}.zip",
        include_patterns=(),
        exclude_patterns=(),
    )


def load_config(
    project_root: Path, environ: typ.Mapping[str, str] | None = None
) -> ProjectConfig:
    """Load the project configuration stored under ``project_root``.

    Parameters
    ----------
    project_root : Path
        Plugin root containing ``plugin-release.toml``.
    environ : Mapping[str, str] | None, optional
        Environment consulted for a token when the file does not set one.

    Returns
    -------
    ProjectConfig
        Validated configuration with defaults applied.

    Raises
    ------
    ConfigMissingError
        Raised when the configuration file does not exist.
    ConfigError
        Raised when the file is not valid TOML or holds invalid values.
    """
    root = Path(project_root)
    path = config_path(root)
    if not path.is_file():
        message = (
            f"Configuration file not found at {path}; "
            "run plugin-release without arguments to create it"
        )
        raise ConfigMissingError(message)

    data = _load_toml(path)
    remote = _table(data, "remote", path)
    package = _table(data, "package", path)

    module_name = _string(package, "module_name", path) or default_module_name(root)
    token = _string(remote, "token", path) or lookup_token(environ)

    return ProjectConfig(
        root=root,
        module_name=module_name,
        package_name=_string(package, "package_name", path) or f"{module_name}.zip",
        include_patterns=_patterns(package, "include", path),
        exclude_patterns=_patterns(package, "exclude", path),
        remote_account=_string(remote, "account", path),
        remote_repo=_string(remote, "repo", path),
        remote_token=token,
        main_file=_string(package, "main_file", path),
        changelog_file=_string(package, "changelog", path) or "CHANGELOG.md",
        release_dir=_string(package, "release_dir", path) or "releases",
        checksum_algorithm=_validate_checksum(
            _string(package, "checksum_algorithm", path) or None
        ),
        publish_timeout=_timeout(package, path),
    )


def _load_toml(path: Path) -> dict[str, typ.Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        message = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(message) from exc


def _table(data: dict[str, typ.Any], key: str, config_file: Path) -> dict[str, typ.Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        message = f"[{key}] must be a table in {config_file}"
        raise ConfigError(message)
    return value


def _string(section: dict[str, typ.Any], key: str, config_file: Path) -> str:
    value = section.get(key, "")
    if not isinstance(value, str):
        message = f"'{key}' must be a string in {config_file}"
        raise ConfigError(message)
    return value.strip()


def _patterns(
    section: dict[str, typ.Any], key: str, config_file: Path
) -> tuple[str, ...]:
    """Return ``section[key]`` as a tuple of glob patterns.

    Examples
    --------
    >>> _patterns({"include": ["*.php", "assets/**"]}, "include", Path("cfg"))
    ('*.php', 'assets/**')
    >>> _patterns({"include": "*.php"}, "include", Path("cfg"))
    ('*.php',)
    """
    value = section.get(key, [])
    if isinstance(value, str):
        return (value,) if value else ()
    if not isinstance(value, list):
        message = f"'{key}' must be a list of glob patterns in {config_file}"
        raise ConfigError(message)
    patterns: list[str] = []
    for pattern in value:
        if not isinstance(pattern, str):
            message = f"'{key}' entries must be strings in {config_file}"
            raise ConfigError(message)
        if pattern:
            patterns.append(pattern)
    return tuple(patterns)


def _timeout(section: dict[str, typ.Any], config_file: Path) -> float:
    value = section.get("publish_timeout", DEFAULT_PUBLISH_TIMEOUT)
    if isinstance(value, bool) or not isinstance(value, int | float) or value <= 0:
        message = f"'publish_timeout' must be a positive number in {config_file}"
        raise ConfigError(message)
    return float(value)


def _validate_checksum(name: str | None) -> str | None:
    if name is None:
        return None
    algorithm = name.lower()
    supported = {item.lower() for item in hashlib.algorithms_guaranteed}
    if algorithm not in supported:
        message = f"Unsupported checksum algorithm: {algorithm}"
        raise ConfigError(message)
    return algorithm
