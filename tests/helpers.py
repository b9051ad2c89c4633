"""Shared builders for projects, singers and scripted engines."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence, Tuple

from phoneme_timing.phonemizer.base import Phoneme, PhonemizerNote
from phoneme_timing.project.model import Part, Project, Tempo, Track, link_notes
from phoneme_timing.project.time_axis import TimeAxis

# 120 bpm at 480 ticks per quarter: 480 ticks == 500 ms.
MS_PER_TICK = 60000.0 / (120.0 * 480)


def make_part(specs, *, name: str = "Part 1", position: int = 0, track_no: int = 0) -> Part:
    return Part(name=name, track_no=track_no, position=position, notes=link_notes(specs))


def make_project(
    parts: Sequence[Part],
    *,
    tracks: Optional[Sequence[Track]] = None,
    tempos: Sequence[Tempo] = (Tempo(0, 120.0),),
    resolution: int = 480,
) -> Project:
    if tracks is None:
        track_count = max((p.track_no for p in parts), default=0) + 1
        tracks = [Track(name=f"Track {i + 1}") for i in range(track_count)]
    return Project(
        name="test",
        resolution=resolution,
        tempos=tuple(tempos),
        tracks=tuple(tracks),
        parts=tuple(parts),
        time_axis=TimeAxis(tempos, resolution),
    )


def make_group(*spans: Tuple[int, int], lyric: str = "a", tone: int = 60) -> List[PhonemizerNote]:
    return [PhonemizerNote(lyric=lyric, tone=tone, position=p, duration=d) for p, d in spans]


class FakeSinger:
    def __init__(self, aliases: Optional[Dict[Tuple[str, int], str]] = None) -> None:
        self.aliases = aliases or {}
        self.lookups: List[Tuple[str, int]] = []

    def try_get_mapped_alias(self, phoneme: str, tone: int) -> Optional[str]:
        self.lookups.append((phoneme, tone))
        return self.aliases.get((phoneme, tone))


def lyric_output(notes: Sequence[PhonemizerNote]) -> List[Phoneme]:
    return [Phoneme(notes[0].lyric, 0)]


class ScriptedEngine:
    """Records every lifecycle call; ``output`` decides what ``process`` returns."""

    def __init__(
        self,
        *,
        output: Callable[[Sequence[PhonemizerNote]], List[Phoneme]] = lyric_output,
        fail_lyrics: Sequence[str] = (),
        fail_setup: bool = False,
        legacy_mapping: bool = False,
    ) -> None:
        self.output = output
        self.fail_lyrics = set(fail_lyrics)
        self.fail_setup = fail_setup
        self.legacy_mapping = legacy_mapping
        self.calls: List[str] = []
        self.processed: List[dict] = []
        self.setup_groups = None

    def set_singer(self, singer) -> None:
        self.calls.append("set_singer")

    def set_timing(self, time_axis) -> None:
        self.calls.append("set_timing")

    def setup(self, groups, project, track) -> None:
        self.calls.append("setup")
        if self.fail_setup:
            raise RuntimeError("setup exploded")
        self.setup_groups = groups

    def process(self, notes, prev, next, prev_neighbour, next_neighbour, prev_neighbours):
        self.calls.append("process")
        self.processed.append(
            {
                "lyric": notes[0].lyric,
                "durations": [n.duration for n in notes],
                "prev": prev,
                "next": next,
                "prev_neighbour": prev_neighbour,
                "next_neighbour": next_neighbour,
                "prev_neighbours": list(prev_neighbours),
            }
        )
        if notes[0].lyric in self.fail_lyrics:
            raise ValueError(f"cannot phonemize {notes[0].lyric}")
        return self.output(notes)

    def cleanup(self) -> None:
        self.calls.append("cleanup")
