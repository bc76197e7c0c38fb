"""Shared fixtures for the release test suite."""

from __future__ import annotations

from pathlib import Path

import pytest
from release_test_helpers import RecordingPublisher, write_project

from plugin_release.config import ProjectConfig, load_config


@pytest.fixture(autouse=True)
def isolated_token_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tokens from the developer's shell out of the tests."""
    for name in ("PLUGIN_RELEASE_TOKEN", "GH_TOKEN", "GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def plugin_root(tmp_path: Path) -> Path:
    """Create a plugin checkout named ``my-plugin`` with config and changelog."""
    return write_project(tmp_path / "my-plugin")


@pytest.fixture
def project_config(plugin_root: Path) -> ProjectConfig:
    """Load the configuration of :func:`plugin_root`."""
    return load_config(plugin_root)


@pytest.fixture
def publisher() -> RecordingPublisher:
    """Provide a publisher double that records calls."""
    return RecordingPublisher()
