from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from music21 import chord, converter, note, stream, tempo

from phoneme_timing.errors import ProjectLoadError
from phoneme_timing.logging_utils import get_logger
from phoneme_timing.project.model import (
    DEFAULT_PHONEMIZER,
    EXTENSION_PREFIX,
    NoteSpec,
    Part,
    Project,
    Tempo,
    Track,
    link_notes,
)
from phoneme_timing.project.time_axis import TimeAxis

logger = get_logger(__name__)

DEFAULT_RESOLUTION = 480
DEFAULT_LYRIC = "a"


def load_musicxml(path: Path, *, resolution: int = DEFAULT_RESOLUTION) -> Project:
    """Parse MusicXML (.xml, .musicxml or .mxl) into a project with one track per part.

    Quarter-note offsets become ticks at ``resolution``. Lyric extensions and tie
    continuations become ``+`` notes so they join the preceding syllable.
    """
    try:
        score = converter.parse(str(path))
    except Exception as exc:
        raise ProjectLoadError(f"Failed to parse MusicXML {path}: {exc}") from exc
    tempos = _extract_tempos(score, resolution)
    tracks: List[Track] = []
    parts: List[Part] = []
    for index, score_part in enumerate(score.parts):
        name = score_part.partName or str(score_part.id or f"Part {index + 1}")
        tracks.append(Track(name=name, phonemizer=DEFAULT_PHONEMIZER))
        parts.append(
            Part(
                name=name,
                track_no=index,
                position=0,
                notes=link_notes(_collect_part_notes(score_part, resolution)),
            )
        )
    title = score.metadata.title if score.metadata and score.metadata.title else path.stem
    logger.debug("Loaded MusicXML project title=%s parts=%d tempos=%d", title, len(parts), len(tempos))
    return Project(
        name=str(title),
        resolution=resolution,
        tempos=tempos,
        tracks=tuple(tracks),
        parts=tuple(parts),
        time_axis=TimeAxis(tempos, resolution),
    )


def _to_ticks(quarter_length: float, resolution: int) -> int:
    return int(round(float(quarter_length) * resolution))


def _extract_tempos(score: stream.Score, resolution: int) -> Tuple[Tempo, ...]:
    tempo_events = []
    for mark in score.recurse().getElementsByClass(tempo.MetronomeMark):
        bpm = _metronome_bpm(mark)
        if bpm is None:
            continue
        offset = mark.getOffsetInHierarchy(score)
        tempo_events.append(Tempo(position=_to_ticks(offset, resolution), bpm=float(bpm)))
    if not tempo_events:
        tempo_events = [Tempo(position=0, bpm=120.0)]
    tempo_events.sort(key=lambda event: event.position)
    return tuple(tempo_events)


def _metronome_bpm(mark: tempo.MetronomeMark) -> Optional[float]:
    if hasattr(mark, "getQuarterBPM"):
        bpm = mark.getQuarterBPM()
        if bpm is not None:
            return float(bpm)
    if mark.number is not None:
        return float(mark.number)
    return None


def _collect_part_notes(part: stream.Part, resolution: int) -> Sequence[NoteSpec]:
    elements = [element for element in part.recurse().notes]
    elements.sort(
        key=lambda element: (
            float(element.getOffsetInHierarchy(part)),
            getattr(element, "priority", 0),
        )
    )
    has_lyric_text = any(_extract_lyric_text(element)[0] is not None for element in elements)
    specs: List[NoteSpec] = []
    in_extension = False
    for element in elements:
        lyric_text, is_extended = _extract_lyric_text(element)
        tie_type = element.tie.type if element.tie is not None else None
        continues = tie_type in ("stop", "continue")
        if lyric_text is not None:
            lyric = lyric_text
        elif specs and (in_extension or continues):
            lyric = EXTENSION_PREFIX
        elif has_lyric_text:
            continue
        else:
            lyric = DEFAULT_LYRIC
        if lyric_text is not None:
            in_extension = is_extended
        specs.append(
            (
                _to_ticks(element.getOffsetInHierarchy(part), resolution),
                _to_ticks(element.duration.quarterLength, resolution),
                _top_midi(element),
                lyric,
            )
        )
    return specs


def _top_midi(element: note.NotRest) -> int:
    if isinstance(element, chord.Chord):
        return int(max(p.midi for p in element.pitches))
    return int(element.pitch.midi)


def _extract_lyric_text(element: note.NotRest) -> tuple[Optional[str], bool]:
    if not element.lyrics:
        return None, False
    lyric = element.lyrics[0]
    text = lyric.text if lyric.text is not None else ""
    text = text.strip() or None
    is_extended = False
    if hasattr(lyric, "isExtended"):
        is_extended = bool(lyric.isExtended)
    elif hasattr(lyric, "extend"):
        is_extended = bool(lyric.extend)
    return text, is_extended
