"""Timing report: absolute-tick phonemes to millisecond records."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO, Union

import numpy as np

from phoneme_timing.phonemizer.base import Phoneme
from phoneme_timing.project.time_axis import TimeAxis


@dataclass(frozen=True)
class TimingRecord:
    part_name: str
    note_index: int
    phoneme: str
    time_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "PartName": self.part_name,
            "NoteIndex": self.note_index,
            "Phoneme": self.phoneme,
            "TimeMs": self.time_ms,
        }


def assemble_records(
    part_name: str,
    phonemes: Sequence[Sequence[Phoneme]],
    time_axis: TimeAxis,
) -> List[TimingRecord]:
    """One record per phoneme; the note index counts groups from 0."""
    flat = [
        (group_index, phoneme)
        for group_index, group_phonemes in enumerate(phonemes)
        for phoneme in group_phonemes
    ]
    if not flat:
        return []
    times = time_axis.ticks_to_ms(np.array([p.position for _, p in flat], dtype=np.float64))
    return [
        TimingRecord(
            part_name=part_name,
            note_index=group_index,
            phoneme=phoneme.phoneme,
            time_ms=float(time_ms),
        )
        for (group_index, phoneme), time_ms in zip(flat, times)
    ]


def records_to_json(records: Sequence[TimingRecord]) -> str:
    return json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)


def write_report(
    records: Sequence[TimingRecord],
    output: Optional[Union[str, Path]] = None,
    *,
    stream: Optional[TextIO] = None,
) -> None:
    """Write the JSON report to ``output``, or to ``stream`` (stdout) when not given."""
    payload = records_to_json(records)
    if output:
        Path(output).write_text(payload, encoding="utf-8")
        return
    target = stream if stream is not None else sys.stdout
    target.write(payload + "\n")
    target.flush()
