from __future__ import annotations

from typing import List, Sequence

from phoneme_timing.logging_utils import get_logger
from phoneme_timing.phonemizer.base import Phoneme, PhonemizerNote

logger = get_logger(__name__)


def resolve_aliases(
    groups: Sequence[Sequence[PhonemizerNote]],
    phonemes: Sequence[List[Phoneme]],
    singer,
) -> int:
    """Rewrite symbols in place through the singer's alias table.

    Looks up each symbol at the pitch of its group's first note. A miss keeps the
    symbol unchanged. Returns the number of misses.
    """
    misses = 0
    for group, group_phonemes in zip(groups, phonemes):
        tone = group[0].tone
        for phoneme in group_phonemes:
            alias = singer.try_get_mapped_alias(phoneme.phoneme, tone)
            if alias is None:
                misses += 1
                continue
            phoneme.phoneme = alias
    if misses:
        logger.debug("Alias lookup kept %d symbols unchanged", misses)
    return misses
