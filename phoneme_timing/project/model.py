"""Project model: tracks, voice parts and their linked notes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

if TYPE_CHECKING:
    from phoneme_timing.project.time_axis import TimeAxis

DEFAULT_PHONEMIZER = "OpenUtau.Core.DefaultPhonemizer"
EXTENSION_PREFIX = "+"


@dataclass(frozen=True)
class Tempo:
    position: int
    bpm: float


@dataclass(frozen=True)
class Note:
    """A note inside a part. ``extends`` and ``next`` index into ``Part.notes``."""

    index: int
    position: int
    duration: int
    tone: int
    lyric: str
    extends: Optional[int] = None
    overlap_error: bool = False
    next: Optional[int] = None

    @property
    def end(self) -> int:
        return self.position + self.duration


@dataclass(frozen=True)
class Track:
    name: str = ""
    phonemizer: str = DEFAULT_PHONEMIZER
    singer: Optional[str] = None


@dataclass(frozen=True)
class Part:
    name: str
    track_no: int
    position: int
    notes: Tuple[Note, ...]

    @property
    def display_name(self) -> str:
        return self.name


@dataclass(frozen=True)
class Project:
    name: str
    resolution: int
    tempos: Tuple[Tempo, ...]
    tracks: Tuple[Track, ...]
    parts: Tuple[Part, ...]
    time_axis: "TimeAxis" = field(compare=False, repr=False)

    def track_of(self, part: Part) -> Track:
        if part.track_no < 0 or part.track_no >= len(self.tracks):
            raise IndexError(f"part {part.name!r} refers to missing track {part.track_no}")
        return self.tracks[part.track_no]


# (position, duration, tone, lyric) in part-relative ticks.
NoteSpec = Tuple[int, int, int, str]


def link_notes(specs: Iterable[NoteSpec]) -> Tuple[Note, ...]:
    """Sort notes and derive ``next``, ``overlap_error`` and ``extends`` links.

    A note overlaps when the last valid note ends after it starts. A ``+`` lyric
    right after a touching valid note extends that note's anchor.
    """
    ordered: List[NoteSpec] = sorted(specs, key=lambda spec: spec[0])
    notes: List[Note] = []
    last_valid: Optional[Note] = None
    for index, (position, duration, tone, lyric) in enumerate(ordered):
        overlap_error = last_valid is not None and last_valid.end > position
        extends = None
        if (
            not overlap_error
            and lyric.startswith(EXTENSION_PREFIX)
            and last_valid is not None
            and last_valid.index == index - 1
            and last_valid.end == position
        ):
            extends = last_valid.extends if last_valid.extends is not None else last_valid.index
        note = Note(
            index=index,
            position=int(position),
            duration=int(duration),
            tone=int(tone),
            lyric=lyric,
            extends=extends,
            overlap_error=overlap_error,
            next=index + 1 if index + 1 < len(ordered) else None,
        )
        notes.append(note)
        if not overlap_error:
            last_valid = note
    return tuple(notes)
