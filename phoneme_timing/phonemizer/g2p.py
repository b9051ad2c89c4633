from __future__ import annotations

from pathlib import Path
import re
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set

import yaml

if TYPE_CHECKING:
    from g2p_en import G2p

ARPABET_TO_SYMBOL = {
    "AA": "aa",
    "AE": "ae",
    "AH": "ah",
    "AO": "ao",
    "AW": "aw",
    "AX": "ax",
    "AXR": "er",
    "AY": "ay",
    "B": "b",
    "CH": "ch",
    "D": "d",
    "DH": "dh",
    "DX": "dx",
    "EH": "eh",
    "ER": "er",
    "EY": "ey",
    "F": "f",
    "G": "g",
    "HH": "hh",
    "IH": "ih",
    "IX": "ih",
    "IY": "iy",
    "JH": "jh",
    "K": "k",
    "L": "l",
    "M": "m",
    "N": "n",
    "NG": "ng",
    "OW": "ow",
    "OY": "oy",
    "P": "p",
    "R": "r",
    "S": "s",
    "SH": "sh",
    "T": "t",
    "TH": "th",
    "UH": "uh",
    "UW": "uw",
    "UX": "uw",
    "V": "v",
    "W": "w",
    "Y": "y",
    "Z": "z",
    "ZH": "zh",
}

ARPABET_VOWELS = {
    "aa", "ae", "ah", "ao", "aw", "ax", "ay", "eh", "er", "ey",
    "ih", "iy", "ow", "oy", "uh", "uw",
}

DICTIONARY_CANDIDATES = (
    Path("enunux.yaml"),
    Path("enunux") / "enunux.yaml",
)


class EnglishG2p:
    """Grapheme-to-phoneme lookup: voicebank dictionary first, then g2p_en ARPABET."""

    def __init__(
        self,
        *,
        dictionary_path: Optional[Path] = None,
        allow_g2p: bool = True,
    ) -> None:
        self.allow_g2p = allow_g2p
        self.dictionary_path = Path(dictionary_path) if dictionary_path else None
        self._dictionary: Dict[str, List[str]] = {}
        self._vowel_symbols: Set[str] = set(ARPABET_VOWELS)
        if self.dictionary_path is not None:
            data = self._read_yaml(self.dictionary_path)
            self._dictionary = self._load_dictionary(data)
            self._vowel_symbols |= self._load_vowels(data)
        self._g2p: Optional[G2p] = None

    def query(self, word: str) -> List[str]:
        raw = word.strip()
        normalized = self._normalize_grapheme(raw)
        if normalized and normalized in self._dictionary:
            return list(self._dictionary[normalized])
        if not normalized:
            raise KeyError(f"Lyric '{raw}' has no usable letters for G2P lookup.")
        if not self.allow_g2p:
            where = self.dictionary_path or "the voicebank"
            raise KeyError(
                f"No dictionary entry for lyric '{raw}' in {where}, and G2P fallback is disabled."
            )
        phones = [p for p in self._get_g2p()(normalized) if self._is_arpabet(p)]
        if not phones:
            raise KeyError(f"G2P produced no phonemes for lyric '{raw}'.")
        return [self._map_arpabet(p) for p in phones]

    def is_vowel(self, phoneme: str) -> bool:
        return phoneme in self._vowel_symbols

    @staticmethod
    def _normalize_grapheme(value: str) -> str:
        return re.sub(r"[^A-Za-z']+", "", value).lower()

    @staticmethod
    def _is_arpabet(value: str) -> bool:
        return bool(re.search(r"[A-Za-z]", value))

    @staticmethod
    def _map_arpabet(phone: str) -> str:
        base = re.sub(r"[0-9]", "", phone).upper()
        if base not in ARPABET_TO_SYMBOL:
            raise KeyError(f"Unsupported ARPABET symbol '{phone}' in G2P output.")
        return ARPABET_TO_SYMBOL[base]

    def _get_g2p(self) -> G2p:
        if self._g2p is None:
            from g2p_en import G2p

            try:
                self._g2p = G2p()
            except LookupError as exc:
                raise RuntimeError(
                    "g2p_en requires the NLTK cmudict corpus. "
                    "Install it with: python -m nltk.downloader cmudict"
                ) from exc
        return self._g2p

    @staticmethod
    def _read_yaml(path: Path) -> object:
        if not path.exists():
            raise FileNotFoundError(f"G2P dictionary not found at {path}.")
        return yaml.safe_load(path.read_text(encoding="utf8"))

    def _load_dictionary(self, data: object) -> Dict[str, List[str]]:
        entries = data.get("entries", []) if isinstance(data, dict) else []
        dictionary: Dict[str, List[str]] = {}
        for entry in entries or []:
            if not isinstance(entry, dict):
                continue
            grapheme = entry.get("grapheme")
            phonemes = entry.get("phonemes")
            if not grapheme or not phonemes:
                continue
            key = self._normalize_grapheme(str(grapheme))
            if key and key not in dictionary:
                dictionary[key] = [str(p) for p in phonemes]
        return dictionary

    @staticmethod
    def _load_vowels(data: object) -> Set[str]:
        symbols = data.get("symbols", []) if isinstance(data, dict) else []
        vowels = set()
        for entry in symbols or []:
            if not isinstance(entry, dict):
                continue
            symbol = str(entry.get("symbol", "")).strip()
            if symbol and str(entry.get("type", "")).strip().lower() == "vowel":
                vowels.add(symbol)
        return vowels


def find_dictionary(singer_location: Path) -> Optional[Path]:
    """Return the first G2P dictionary present in a voicebank folder."""
    for candidate in DICTIONARY_CANDIDATES:
        path = singer_location / candidate
        if path.exists():
            return path
    return None


def distribute_slur(
    phonemes: Sequence[str], note_count: int, g2p: EnglishG2p
) -> Optional[List[List[str]]]:
    """
    Distribute a word's phonemes across the notes of a slur.

    Structure:
      - Note 0: Onset + Vowel
      - Middle Notes: Vowel only
      - Last Note: Vowel + Coda

    Returns None when the word has no vowel to carry.
    """
    is_vowel = [g2p.is_vowel(p) for p in phonemes]
    try:
        vowel_idx = is_vowel.index(True)
    except ValueError:
        return None
    if note_count <= 1:
        return [list(phonemes)]

    primary_vowel = phonemes[vowel_idx]
    distribution: List[List[str]] = [list(phonemes[: vowel_idx + 1])]
    for _ in range(1, note_count - 1):
        distribution.append([primary_vowel])
    distribution.append([primary_vowel] + list(phonemes[vowel_idx + 1 :]))
    return distribution
