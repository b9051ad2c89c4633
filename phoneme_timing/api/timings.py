"""
End-to-end phoneme timing extraction for a loaded project.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional

from phoneme_timing.api.driver import PartPhonemes, phonemize_part
from phoneme_timing.api.report import TimingRecord, assemble_records
from phoneme_timing.logging_utils import clear_log_context, get_logger
from phoneme_timing.phonemizer.base import PhonemizerEngine
from phoneme_timing.phonemizer.registry import get_phonemizer
from phoneme_timing.project.model import Project, Track

logger = get_logger(__name__)

TrackEngineFactory = Callable[[Track], PhonemizerEngine]


def track_engine_factory(override: Optional[str] = None, **options: Any) -> TrackEngineFactory:
    """
    Build engines per track.

    Args:
        override: Engine name used for every track instead of the track's own setting
        **options: Engine options such as ``consonant_ms``

    Returns:
        Callable returning a new engine instance on every call.
    """
    def build(track: Track) -> PhonemizerEngine:
        return get_phonemizer(override or track.phonemizer, **options)()

    return build


def phonemize_project(
    project: Project,
    singer,
    engine_factory: TrackEngineFactory,
) -> List[PartPhonemes]:
    """
    Phonemize every voice part in project order.

    Each part gets its own engine instance. Setup failures skip only that part and
    group failures only that group.
    """
    results: List[PartPhonemes] = []
    try:
        for part in project.parts:
            engine = engine_factory(project.track_of(part))
            logger.debug("Using phonemizer %s for part %r", engine.__class__.__name__, part.display_name)
            results.append(phonemize_part(part, project, singer, engine))
    finally:
        clear_log_context()
    return results


def extract_phoneme_timings(
    project: Project,
    singer,
    engine_factory: TrackEngineFactory,
) -> List[TimingRecord]:
    """
    Convert a project into ordered timing records.

    Returns:
        Records in part order, then group order, then phoneme order.
    """
    records: List[TimingRecord] = []
    for part_result in phonemize_project(project, singer, engine_factory):
        records.extend(
            assemble_records(part_result.part.display_name, part_result.phonemes, project.time_axis)
        )
    return records
