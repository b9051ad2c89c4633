"""
Engine-facing types and the phonemizer capability every engine provides.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

if TYPE_CHECKING:
    from phoneme_timing.project.model import Project, Track
    from phoneme_timing.project.time_axis import TimeAxis
    from phoneme_timing.singer.voicebank import Singer

# Symbol substituted for a group whose processing raised.
ERROR_PHONEME = "error"

_HINT_PATTERN = re.compile(r"^(.*)\[(.*)\]\s*$")


@dataclass
class PhonemizerNote:
    """A note as engines see it: absolute ticks, lyric and pitch."""

    lyric: str
    tone: int
    position: int
    duration: int
    phonetic_hint: Optional[str] = None

    @property
    def end(self) -> int:
        return self.position + self.duration


@dataclass
class Phoneme:
    """A produced symbol; ``position`` is relative to the group start until normalized."""

    phoneme: str
    position: int = 0


@runtime_checkable
class PhonemizerEngine(Protocol):
    """Stateful transcription engine: set_singer/set_timing, setup, process per group, cleanup.

    Instances are not re-entrant; use one per part.
    """

    legacy_mapping: bool

    def set_singer(self, singer: "Singer") -> None: ...

    def set_timing(self, time_axis: "TimeAxis") -> None: ...

    def setup(
        self,
        groups: Sequence[Sequence[PhonemizerNote]],
        project: "Project",
        track: "Track",
    ) -> None: ...

    def process(
        self,
        notes: Sequence[PhonemizerNote],
        prev: Optional[PhonemizerNote],
        next: Optional[PhonemizerNote],
        prev_neighbour: Optional[PhonemizerNote],
        next_neighbour: Optional[PhonemizerNote],
        prev_neighbours: Sequence[PhonemizerNote],
    ) -> List[Phoneme]: ...

    def cleanup(self) -> None: ...


EngineFactory = Callable[[], PhonemizerEngine]


def split_phonetic_hint(lyric: str) -> Tuple[str, Optional[str]]:
    """Split ``word[h ih n t]`` into ``("word", "h ih n t")``."""
    match = _HINT_PATTERN.match(lyric)
    if not match:
        return lyric, None
    text, hint = match.group(1).strip(), match.group(2).strip()
    return text, hint or None
