"""
English phonemizer: ARPABET-style symbols placed around each note.

Onset consonants lead the note start, the vowel sits on the note start and is
carried across extension notes, and coda consonants close out the trailing note.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import yaml

from phoneme_timing.logging_utils import get_logger
from phoneme_timing.phonemizer.base import Phoneme, PhonemizerNote
from phoneme_timing.phonemizer.g2p import EnglishG2p, distribute_slur, find_dictionary

logger = get_logger(__name__)

GroupKey = Tuple[int, str]


class EnglishPhonemizer:
    legacy_mapping = False

    def __init__(self, *, consonant_ms: float = 60.0, allow_g2p: bool = True) -> None:
        if consonant_ms <= 0:
            raise ValueError(f"consonant_ms must be positive, got {consonant_ms}")
        self.consonant_ms = consonant_ms
        self.allow_g2p = allow_g2p
        self.singer = None
        self.time_axis = None
        self._g2p: Optional[EnglishG2p] = None
        self._symbols: Dict[GroupKey, List[str]] = {}
        self._errors: Dict[GroupKey, Exception] = {}

    def set_singer(self, singer) -> None:
        self.singer = singer
        dictionary_path = find_dictionary(singer.location) if singer is not None else None
        try:
            self._g2p = EnglishG2p(dictionary_path=dictionary_path, allow_g2p=self.allow_g2p)
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to load %s: %s", dictionary_path, exc)
            self._g2p = EnglishG2p(allow_g2p=self.allow_g2p)

    def set_timing(self, time_axis) -> None:
        self.time_axis = time_axis

    def setup(self, groups: Sequence[Sequence[PhonemizerNote]], project, track) -> None:
        if self.time_axis is None:
            raise RuntimeError("set_timing must be called before setup.")
        g2p = self._require_g2p()
        self._symbols.clear()
        self._errors.clear()
        for group in groups:
            anchor = group[0]
            key = (anchor.position, anchor.lyric)
            try:
                self._symbols[key] = self._transcribe(anchor, g2p)
            except Exception as exc:
                # Reported when the group is processed so only that group fails.
                self._errors[key] = exc
        logger.debug(
            "English setup: %d groups, %d lyric lookups failed", len(groups), len(self._errors)
        )

    def process(
        self,
        notes: Sequence[PhonemizerNote],
        prev: Optional[PhonemizerNote],
        next: Optional[PhonemizerNote],
        prev_neighbour: Optional[PhonemizerNote],
        next_neighbour: Optional[PhonemizerNote],
        prev_neighbours: Sequence[PhonemizerNote],
    ) -> List[Phoneme]:
        g2p = self._require_g2p()
        anchor = notes[0]
        key = (anchor.position, anchor.lyric)
        if key in self._errors:
            raise self._errors[key]
        symbols = self._symbols.get(key)
        if symbols is None:
            symbols = self._transcribe(anchor, g2p)

        distribution = distribute_slur(symbols, len(notes), g2p)
        if distribution is None:
            step = self._consonant_ticks(anchor.position)
            return [Phoneme(symbol, i * step) for i, symbol in enumerate(symbols)]

        phonemes: List[Phoneme] = []
        for index, (note, chunk) in enumerate(zip(notes, distribution)):
            phonemes.extend(
                self._place_chunk(
                    note,
                    chunk,
                    base=anchor.position,
                    g2p=g2p,
                    prev_neighbour=prev_neighbour if index == 0 else None,
                )
            )
        return phonemes

    def cleanup(self) -> None:
        self._symbols.clear()
        self._errors.clear()

    def _require_g2p(self) -> EnglishG2p:
        if self._g2p is None:
            raise RuntimeError("set_singer must be called before phonemizing.")
        return self._g2p

    @staticmethod
    def _transcribe(anchor: PhonemizerNote, g2p: EnglishG2p) -> List[str]:
        if anchor.phonetic_hint:
            return anchor.phonetic_hint.split()
        return g2p.query(anchor.lyric)

    def _consonant_ticks(self, position: int) -> int:
        start_ms = self.time_axis.tick_to_ms(position)
        end_tick = self.time_axis.ms_to_tick(start_ms + self.consonant_ms)
        return max(1, int(round(end_tick - position)))

    def _place_chunk(
        self,
        note: PhonemizerNote,
        chunk: Sequence[str],
        *,
        base: int,
        g2p: EnglishG2p,
        prev_neighbour: Optional[PhonemizerNote],
    ) -> List[Phoneme]:
        vowel_idx = next(i for i, symbol in enumerate(chunk) if g2p.is_vowel(symbol))
        onset, vowel, coda = chunk[:vowel_idx], chunk[vowel_idx], chunk[vowel_idx + 1 :]
        start = note.position - base
        end = note.end - base
        step = self._consonant_ticks(note.position)
        placed: List[Phoneme] = []

        if onset:
            onset_step = step
            if prev_neighbour is not None:
                # Leave at least half of the attached previous note sounding.
                room = max(prev_neighbour.duration // 2, 0)
                onset_step = max(1, min(step, room // len(onset)))
            for i, symbol in enumerate(onset):
                placed.append(Phoneme(symbol, start - (len(onset) - i) * onset_step))

        placed.append(Phoneme(vowel, start))

        if coda:
            room = max(note.duration // 2, 0)
            coda_step = max(1, min(step, room // len(coda)))
            for j, symbol in enumerate(coda):
                position = end - (len(coda) - j) * coda_step
                placed.append(Phoneme(symbol, max(position, start + j + 1)))
        return placed
