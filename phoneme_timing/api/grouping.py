"""Partition a part's notes into phonemization groups and resolve group neighbours."""

from __future__ import annotations

from typing import List, Sequence

from phoneme_timing.phonemizer.base import PhonemizerNote, split_phonetic_hint
from phoneme_timing.project.model import Note, Part, Track

Group = List[PhonemizerNote]


def partition_notes(part: Part) -> List[List[int]]:
    """Return note indices per group, anchors in part order.

    Overlapping notes and extension notes never anchor a group. Following ``next``
    from an anchor, a note joins while its ``extends`` points at the anchor or at
    the chain's preceding note.
    """
    notes = part.notes
    partition: List[List[int]] = []
    for note in notes:
        if note.overlap_error or note.extends is not None:
            continue
        members = [note.index]
        next_index = note.next
        while next_index is not None:
            candidate = notes[next_index]
            if candidate.extends is None or candidate.extends not in (note.index, members[-1]):
                break
            members.append(candidate.index)
            next_index = candidate.next
        partition.append(members)
    return partition


def to_phonemizer_note(note: Note, track: Track, part: Part) -> PhonemizerNote:
    lyric, hint = split_phonetic_hint(note.lyric)
    return PhonemizerNote(
        lyric=lyric,
        tone=note.tone,
        position=part.position + note.position,
        duration=note.duration,
        phonetic_hint=hint,
    )


def build_groups(part: Part, track: Track) -> List[Group]:
    return [
        [to_phonemizer_note(part.notes[i], track, part) for i in members]
        for members in partition_notes(part)
    ]


def is_prev_neighbour(groups: Sequence[Group], index: int) -> bool:
    """True when group ``index - 1`` ends at or after group ``index`` starts."""
    if index <= 0 or index >= len(groups):
        return False
    return groups[index - 1][-1].end >= groups[index][0].position


def is_next_neighbour(groups: Sequence[Group], index: int) -> bool:
    """True when group ``index`` ends at or after group ``index + 1`` starts."""
    if index < 0 or index >= len(groups) - 1:
        return False
    return groups[index][-1].end >= groups[index + 1][0].position
