from __future__ import annotations

from typing import List, Optional, Sequence

from phoneme_timing.phonemizer.base import Phoneme, PhonemizerNote


class DefaultPhonemizer:
    """One phoneme per group: the phonetic hint, else the lyric, resolved through oto aliases."""

    legacy_mapping = True

    def __init__(self) -> None:
        self.singer = None
        self.time_axis = None

    def set_singer(self, singer) -> None:
        self.singer = singer

    def set_timing(self, time_axis) -> None:
        self.time_axis = time_axis

    def setup(self, groups, project, track) -> None:
        pass

    def process(
        self,
        notes: Sequence[PhonemizerNote],
        prev: Optional[PhonemizerNote],
        next: Optional[PhonemizerNote],
        prev_neighbour: Optional[PhonemizerNote],
        next_neighbour: Optional[PhonemizerNote],
        prev_neighbours: Sequence[PhonemizerNote],
    ) -> List[Phoneme]:
        note = notes[0]
        return [Phoneme(phoneme=note.phonetic_hint or note.lyric, position=0)]

    def cleanup(self) -> None:
        pass
