"""
Phonemization driver: runs one engine over a part's groups in reverse order.

Groups are processed last to first so that each group's trailing note can be
trimmed against the already-known start of the next group's first phoneme.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence

from phoneme_timing.api.aliases import resolve_aliases
from phoneme_timing.api.grouping import Group, build_groups, is_next_neighbour, is_prev_neighbour
from phoneme_timing.errors import PhonemizerFailure
from phoneme_timing.logging_utils import get_logger, set_log_context, summarize_payload
from phoneme_timing.phonemizer.base import ERROR_PHONEME, Phoneme, PhonemizerEngine
from phoneme_timing.project.model import Part, Project

logger = get_logger(__name__)


@dataclass
class PartPhonemes:
    """Groups of a part and their absolute-tick phonemes, index-aligned."""

    part: Part
    groups: List[Group]
    phonemes: List[List[Phoneme]]
    failures: List[PhonemizerFailure] = field(default_factory=list)
    skipped: bool = False


def trim_trailing_note(group: Group, next_start: int) -> int:
    """Shorten the group's last note so it ends no later than ``next_start``.

    Returns the applied change, always <= 0. The note is replaced, not mutated.
    """
    last = group[-1]
    push = min(0, next_start - last.end)
    if push:
        group[-1] = replace(last, duration=last.duration + push)
    return push


def phonemize_groups(
    engine: PhonemizerEngine,
    groups: List[Group],
    *,
    part_name: str = "",
    failures: Optional[List[PhonemizerFailure]] = None,
) -> List[List[Phoneme]]:
    """Process groups last to first; return absolute-tick phonemes in group order."""
    if failures is None:
        failures = []
    results: List[List[Phoneme]] = []
    try:
        for i in range(len(groups) - 1, -1, -1):
            group = groups[i]
            set_log_context(group=i)
            prev = next_note = prev_neighbour = next_neighbour = None
            prev_neighbours: Sequence = ()
            if i > 0:
                prev = groups[i - 1][-1]
                if is_prev_neighbour(groups, i):
                    prev_neighbour = prev
                    prev_neighbours = groups[i - 1]
            if i < len(groups) - 1:
                next_note = groups[i + 1][0]
                if is_next_neighbour(groups, i):
                    next_neighbour = next_note

            if next_note is not None and results and results[0]:
                push = trim_trailing_note(group, results[0][0].position)
                if push:
                    logger.debug("Group %d trailing note trimmed by %d ticks", i, -push)

            logger.debug("Group %d input lyrics: %s", i, " ".join(f'"{n.lyric}"' for n in group))
            try:
                produced = engine.process(
                    group,
                    prev,
                    next_note,
                    prev_neighbour,
                    next_neighbour,
                    list(prev_neighbours),
                )
                produced = list(produced)
            except Exception as exc:
                logger.error("Phonemizer error on note group %d: %s", i, exc)
                failures.append(
                    PhonemizerFailure(
                        stage="process",
                        part_name=part_name,
                        detail=str(exc),
                        group_index=i,
                        error_type=exc.__class__.__name__,
                    )
                )
                produced = [Phoneme(ERROR_PHONEME, 0)]
            logger.debug("Group %d raw phonemes: %s", i, " ".join(p.phoneme for p in produced))

            base = group[0].position
            results.insert(0, [Phoneme(p.phoneme, p.position + base) for p in produced])
    finally:
        set_log_context(group="-")
    return results


def phonemize_part(
    part: Part,
    project: Project,
    singer,
    engine: PhonemizerEngine,
) -> PartPhonemes:
    """Drive ``engine`` through set-up, per-group processing and clean-up for one part."""
    track = project.track_of(part)
    set_log_context(part=part.display_name)
    groups = build_groups(part, track)
    result = PartPhonemes(part=part, groups=groups, phonemes=[])
    logger.info(
        "Phonemizing part %r with %s: %d notes, %d groups",
        part.display_name,
        engine.__class__.__name__,
        len(part.notes),
        len(groups),
    )
    try:
        engine.set_singer(singer)
        engine.set_timing(project.time_axis)
        engine.setup(groups, project, track)
    except Exception as exc:
        logger.exception("Phonemizer setup failed for part %r", part.display_name)
        result.failures.append(
            PhonemizerFailure(
                stage="setup",
                part_name=part.display_name,
                detail=str(exc),
                error_type=exc.__class__.__name__,
            )
        )
        result.skipped = True
        return result

    try:
        result.phonemes = phonemize_groups(
            engine, groups, part_name=part.display_name, failures=result.failures
        )
    finally:
        try:
            engine.cleanup()
        except Exception as exc:
            logger.exception("Phonemizer cleanup failed for part %r", part.display_name)
            result.failures.append(
                PhonemizerFailure(
                    stage="cleanup",
                    part_name=part.display_name,
                    detail=str(exc),
                    error_type=exc.__class__.__name__,
                )
            )

    if getattr(engine, "legacy_mapping", False):
        resolve_aliases(groups, result.phonemes, singer)
    if result.failures:
        logger.warning(
            "Part %r finished with %d contained failures: %s",
            part.display_name,
            len(result.failures),
            summarize_payload([f.to_payload() for f in result.failures]),
        )
    return result
