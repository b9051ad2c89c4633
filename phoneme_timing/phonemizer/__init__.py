"""
Phonemizer engines and the registry that selects them by name.
"""

from phoneme_timing.phonemizer.base import (
    ERROR_PHONEME,
    EngineFactory,
    Phoneme,
    PhonemizerEngine,
    PhonemizerNote,
    split_phonetic_hint,
)
from phoneme_timing.phonemizer.registry import get_phonemizer, list_engines, normalize_engine_name

__all__ = [
    "ERROR_PHONEME",
    "EngineFactory",
    "Phoneme",
    "PhonemizerEngine",
    "PhonemizerNote",
    "get_phonemizer",
    "list_engines",
    "normalize_engine_name",
    "split_phonetic_hint",
]
