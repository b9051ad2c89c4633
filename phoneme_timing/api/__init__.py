"""
Phoneme timing API.

This module exposes the note grouping, phonemization driver and report steps.
"""

from phoneme_timing.api.aliases import resolve_aliases
from phoneme_timing.api.driver import PartPhonemes, phonemize_groups, phonemize_part, trim_trailing_note
from phoneme_timing.api.grouping import (
    build_groups,
    is_next_neighbour,
    is_prev_neighbour,
    partition_notes,
    to_phonemizer_note,
)
from phoneme_timing.api.report import TimingRecord, assemble_records, records_to_json, write_report
from phoneme_timing.api.timings import (
    extract_phoneme_timings,
    phonemize_project,
    track_engine_factory,
)

__all__ = [
    # Grouping
    "partition_notes",
    "build_groups",
    "to_phonemizer_note",
    "is_prev_neighbour",
    "is_next_neighbour",
    # Driver
    "PartPhonemes",
    "trim_trailing_note",
    "phonemize_groups",
    "phonemize_part",
    "resolve_aliases",
    # Report
    "TimingRecord",
    "assemble_records",
    "records_to_json",
    "write_report",
    # Convenience
    "extract_phoneme_timings",
    "phonemize_project",
    "track_engine_factory",
]
