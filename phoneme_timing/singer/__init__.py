"""
Singer (voicebank) loading and lookup.
"""

from phoneme_timing.singer.resolve import list_singers, resolve_singer
from phoneme_timing.singer.voicebank import Oto, Singer, load_singer, tone_from_name

__all__ = [
    "Oto",
    "Singer",
    "list_singers",
    "load_singer",
    "resolve_singer",
    "tone_from_name",
]
