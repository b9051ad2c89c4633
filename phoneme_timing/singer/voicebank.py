"""
Classic UTAU voicebank loading: character metadata, oto.ini alias table and prefix.map.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

import yaml

from phoneme_timing.logging_utils import get_logger

logger = get_logger(__name__)

NOTE_NAMES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
_TONE_PATTERN = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)$")


@dataclass(frozen=True)
class Oto:
    alias: str
    wav: str
    offset: float = 0.0
    consonant: float = 0.0
    cutoff: float = 0.0
    preutter: float = 0.0
    overlap: float = 0.0


class Singer:
    """A voicebank on disk, exposing alias lookups for legacy phonemizers."""

    def __init__(
        self,
        *,
        singer_id: str,
        name: str,
        location: Path,
        otos: Dict[str, Oto],
        prefix_map: Optional[Dict[int, Tuple[str, str]]] = None,
    ) -> None:
        self.id = singer_id
        self.name = name
        self.location = location
        self.otos = otos
        self.prefix_map = prefix_map or {}

    def try_get_mapped_oto(self, phoneme: str, tone: int) -> Optional[Oto]:
        """Look up ``prefix + phoneme + suffix`` for the tone, then the bare phoneme."""
        mapped = self.prefix_map.get(tone)
        if mapped is not None:
            prefix, suffix = mapped
            oto = self.otos.get(f"{prefix}{phoneme}{suffix}")
            if oto is not None:
                return oto
        return self.otos.get(phoneme)

    def try_get_mapped_alias(self, phoneme: str, tone: int) -> Optional[str]:
        oto = self.try_get_mapped_oto(phoneme, tone)
        return oto.alias if oto is not None else None

    def __repr__(self) -> str:
        return f"Singer(id={self.id!r}, name={self.name!r}, otos={len(self.otos)})"


def load_singer(path: Union[str, Path], singer_id: Optional[str] = None) -> Singer:
    """
    Load a voicebank directory.

    Args:
        path: Voicebank directory
        singer_id: Identifier to report (default: directory name)

    Returns:
        Singer with every oto.ini under the directory merged into one alias table.
    """
    location = Path(path).resolve()
    if not location.is_dir():
        raise FileNotFoundError(f"Voicebank directory not found: {location}")
    otos: Dict[str, Oto] = {}
    for oto_path in sorted(location.rglob("oto.ini"), key=lambda p: (len(p.parts), p)):
        subdir = oto_path.parent.relative_to(location)
        for oto in parse_oto_ini(read_voicebank_text(oto_path), subdir=subdir):
            # First definition of an alias wins.
            otos.setdefault(oto.alias, oto)
    prefix_map: Dict[int, Tuple[str, str]] = {}
    prefix_map_path = location / "prefix.map"
    if prefix_map_path.exists():
        prefix_map = parse_prefix_map(read_voicebank_text(prefix_map_path))
    singer = Singer(
        singer_id=singer_id or location.name,
        name=read_singer_name(location),
        location=location,
        otos=otos,
        prefix_map=prefix_map,
    )
    logger.debug("Loaded singer %r from %s with %d aliases", singer.name, location, len(otos))
    return singer


def is_voicebank_dir(path: Path) -> bool:
    if not path.is_dir():
        return False
    if (path / "character.txt").exists() or (path / "character.yaml").exists():
        return True
    return next(path.rglob("oto.ini"), None) is not None


def read_voicebank_text(path: Path) -> str:
    """Read a voicebank text file as UTF-8, falling back to Shift-JIS."""
    raw = path.read_bytes()
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("cp932", errors="replace")


def read_singer_name(location: Path) -> str:
    char_yaml = location / "character.yaml"
    if char_yaml.exists():
        try:
            data = yaml.safe_load(read_voicebank_text(char_yaml))
        except yaml.YAMLError as exc:
            logger.warning("Ignoring unreadable %s: %s", char_yaml, exc)
            data = None
        if isinstance(data, dict) and data.get("name"):
            return str(data["name"])
    char_txt = location / "character.txt"
    if char_txt.exists():
        for line in read_voicebank_text(char_txt).splitlines():
            key, sep, value = line.partition("=")
            if sep and key.strip().lower() == "name" and value.strip():
                return value.strip()
    return location.name


def parse_oto_ini(text: str, *, subdir: Path = Path(".")) -> Iterable[Oto]:
    """Parse ``wav=alias,offset,consonant,cutoff,preutter,overlap`` lines."""
    for line in text.splitlines():
        line = line.strip()
        if not line or "=" not in line:
            continue
        wav, _, params = line.partition("=")
        fields = params.split(",")
        wav_path = (subdir / wav.strip()).as_posix()
        alias = fields[0].strip() or Path(wav.strip()).stem
        numbers = [_parse_float(value) for value in fields[1:6]]
        numbers.extend([0.0] * (5 - len(numbers)))
        yield Oto(alias, wav_path, *numbers)


def parse_prefix_map(text: str) -> Dict[int, Tuple[str, str]]:
    """Parse ``TONE<TAB>PREFIX<TAB>SUFFIX`` lines into a tone -> (prefix, suffix) map."""
    mapping: Dict[int, Tuple[str, str]] = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        fields = line.rstrip("\r\n").split("\t")
        tone = tone_from_name(fields[0].strip())
        if tone is None:
            continue
        prefix = fields[1] if len(fields) > 1 else ""
        suffix = fields[2] if len(fields) > 2 else ""
        mapping[tone] = (prefix, suffix)
    return mapping


def tone_from_name(name: str) -> Optional[int]:
    """Convert a note name such as ``C4`` or ``A#3`` to a MIDI number (C4 = 60)."""
    match = _TONE_PATTERN.match(name)
    if not match:
        return None
    letter, accidental, octave = match.groups()
    semitone = NOTE_NAMES[letter.upper()]
    if accidental == "#":
        semitone += 1
    elif accidental == "b":
        semitone -= 1
    return (int(octave) + 1) * 12 + semitone


def _parse_float(value: str) -> float:
    try:
        return float(value.strip())
    except ValueError:
        return 0.0
