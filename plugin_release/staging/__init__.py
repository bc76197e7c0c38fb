"""Staging package exposing the scoped staging tree helpers."""

from .pipeline import (
    StagingArea,
    cleanup,
    populate,
    prepare_staging_area,
    staging_area,
)
from .resolution import FileSelection, expand_pattern, select_files

__all__ = [
    "FileSelection",
    "StagingArea",
    "cleanup",
    "expand_pattern",
    "populate",
    "prepare_staging_area",
    "select_files",
    "staging_area",
]
