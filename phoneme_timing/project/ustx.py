"""
USTX (OpenUtau YAML project) loading.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from phoneme_timing.errors import ProjectLoadError
from phoneme_timing.logging_utils import get_logger
from phoneme_timing.project.model import (
    DEFAULT_PHONEMIZER,
    NoteSpec,
    Part,
    Project,
    Tempo,
    Track,
    link_notes,
)
from phoneme_timing.project.time_axis import TimeAxis

logger = get_logger(__name__)

DEFAULT_RESOLUTION = 480
DEFAULT_BPM = 120.0


def load_ustx(path: Path) -> Project:
    """
    Load a USTX project file.

    Args:
        path: Path to a ``.ustx`` file

    Returns:
        Project with linked notes and a TimeAxis built from its tempo map.

    Raises:
        ProjectLoadError: when the YAML is invalid or the structure is unusable.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8-sig"))
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ProjectLoadError(f"Invalid USTX file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ProjectLoadError(f"Invalid USTX file {path}: top level must be a mapping.")
    try:
        return _build_project(data, default_name=path.stem)
    except (KeyError, TypeError, ValueError) as exc:
        raise ProjectLoadError(f"Invalid USTX structure in {path}: {exc}") from exc


def _build_project(data: Dict[str, Any], *, default_name: str) -> Project:
    resolution = int(data.get("resolution") or DEFAULT_RESOLUTION)
    tempos = _read_tempos(data)
    tracks = tuple(_read_track(entry) for entry in _as_list(data.get("tracks"), "tracks"))
    parts = []
    for entry in _as_list(data.get("voice_parts"), "voice_parts"):
        part = _read_part(entry)
        if part.track_no < 0 or part.track_no >= len(tracks):
            raise ValueError(f"voice part {part.name!r} refers to missing track {part.track_no}")
        parts.append(part)
    logger.debug(
        "Loaded USTX project name=%s tracks=%d parts=%d tempos=%d",
        data.get("name"),
        len(tracks),
        len(parts),
        len(tempos),
    )
    return Project(
        name=str(data.get("name") or default_name),
        resolution=resolution,
        tempos=tempos,
        tracks=tracks,
        parts=tuple(parts),
        time_axis=TimeAxis(tempos, resolution),
    )


def _read_tempos(data: Dict[str, Any]) -> Tuple[Tempo, ...]:
    tempos = []
    for entry in _as_list(data.get("tempos"), "tempos"):
        entry = _as_mapping(entry, "tempo")
        tempos.append(Tempo(position=int(entry.get("position", 0)), bpm=float(entry["bpm"])))
    if not tempos:
        # Pre-0.6 projects carry a single project-wide bpm.
        tempos = [Tempo(position=0, bpm=float(data.get("bpm") or DEFAULT_BPM))]
    return tuple(sorted(tempos, key=lambda t: t.position))


def _read_track(entry: Any) -> Track:
    entry = _as_mapping(entry, "track")
    singer = entry.get("singer")
    return Track(
        name=str(entry.get("track_name") or ""),
        phonemizer=str(entry.get("phonemizer") or DEFAULT_PHONEMIZER),
        singer=str(singer) if singer else None,
    )


def _read_part(entry: Any) -> Part:
    entry = _as_mapping(entry, "voice part")
    specs: List[NoteSpec] = []
    for note in _as_list(entry.get("notes"), "notes"):
        note = _as_mapping(note, "note")
        duration = int(note["duration"])
        if duration < 0:
            raise ValueError(f"note at {note.get('position')} has negative duration")
        specs.append(
            (
                int(note["position"]),
                duration,
                int(note.get("tone", 60)),
                str(note.get("lyric", "a") or ""),
            )
        )
    return Part(
        name=str(entry.get("name") or ""),
        track_no=int(entry.get("track_no", 0)),
        position=int(entry.get("position", 0)),
        notes=link_notes(specs),
    )


def _as_list(value: Any, what: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _as_mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{what} entry must be a mapping, got {value!r}")
    return value
