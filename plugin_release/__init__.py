"""Release packaging for plugin projects.

The package stamps a version into the plugin's main file, checks the
changelog, builds a filtered zip archive and optionally publishes it as a
GitHub release.
"""

from .archive import ReleaseArtifact
from .config import ProjectConfig, load_config
from .errors import ReleaseError
from .pipeline import PipelineResult, PipelineState, ReleaseRequest, create_package

__all__ = [
    "PipelineResult",
    "PipelineState",
    "ProjectConfig",
    "ReleaseArtifact",
    "ReleaseError",
    "ReleaseRequest",
    "create_package",
    "load_config",
]
