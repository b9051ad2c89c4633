"""
Project model and loaders.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from phoneme_timing.errors import ProjectLoadError, ProjectNotFoundError
from phoneme_timing.project.model import (
    DEFAULT_PHONEMIZER,
    Note,
    Part,
    Project,
    Tempo,
    Track,
    link_notes,
)
from phoneme_timing.project.time_axis import TimeAxis

USTX_SUFFIXES = {".ustx", ".yaml", ".yml"}
MUSICXML_SUFFIXES = {".xml", ".musicxml", ".mxl"}


def load_project(path: Union[str, Path]) -> Project:
    """Load a project file, choosing the loader by file suffix."""
    project_path = Path(path)
    if not project_path.is_file():
        raise ProjectNotFoundError(f"Project file not found: {project_path}")
    suffix = project_path.suffix.lower()
    if suffix in USTX_SUFFIXES:
        from phoneme_timing.project.ustx import load_ustx

        return load_ustx(project_path)
    if suffix in MUSICXML_SUFFIXES:
        from phoneme_timing.project.musicxml import load_musicxml

        return load_musicxml(project_path)
    raise ProjectLoadError(
        f"Unsupported project format '{suffix}' for {project_path}. "
        f"Expected one of {sorted(USTX_SUFFIXES | MUSICXML_SUFFIXES)}."
    )


__all__ = [
    "DEFAULT_PHONEMIZER",
    "Note",
    "Part",
    "Project",
    "Tempo",
    "TimeAxis",
    "Track",
    "link_notes",
    "load_project",
]
