from __future__ import annotations

import importlib
from typing import Any, Dict, Optional

from phoneme_timing.logging_utils import get_logger
from phoneme_timing.phonemizer.base import EngineFactory

logger = get_logger(__name__)

DEFAULT_ENGINE = "default"

# Engine alias -> "module:Class". Modules are imported on first use so optional
# G2P dependencies load only for engines that need them.
_ENGINES: Dict[str, str] = {
    "default": "phoneme_timing.phonemizer.default:DefaultPhonemizer",
    "defaultphonemizer": "phoneme_timing.phonemizer.default:DefaultPhonemizer",
    "english": "phoneme_timing.phonemizer.english:EnglishPhonemizer",
    "en": "phoneme_timing.phonemizer.english:EnglishPhonemizer",
    "englishphonemizer": "phoneme_timing.phonemizer.english:EnglishPhonemizer",
    "arpasingphonemizer": "phoneme_timing.phonemizer.english:EnglishPhonemizer",
    "enunuonnxenglishphonemizer": "phoneme_timing.phonemizer.english:EnglishPhonemizer",
}

# Constructor options each engine accepts.
_ENGINE_OPTIONS: Dict[str, tuple] = {
    "phoneme_timing.phonemizer.english:EnglishPhonemizer": ("consonant_ms", "allow_g2p"),
}


def normalize_engine_name(name: Optional[str]) -> str:
    """``OpenUtau.Core.DefaultPhonemizer`` -> ``defaultphonemizer``."""
    if not name:
        return DEFAULT_ENGINE
    return name.strip().rsplit(".", 1)[-1].lower()


def list_engines() -> Dict[str, str]:
    return dict(_ENGINES)


def get_phonemizer(name: Optional[str], **options: Any) -> EngineFactory:
    """Return a factory that builds a fresh engine instance per call.

    Unknown names fall back to the default engine with a warning.
    """
    key = normalize_engine_name(name)
    target = _ENGINES.get(key)
    if target is None:
        logger.warning("Unknown phonemizer %r, falling back to %s", name, DEFAULT_ENGINE)
        target = _ENGINES[DEFAULT_ENGINE]
    module_name, class_name = target.split(":")
    engine_cls = getattr(importlib.import_module(module_name), class_name)
    accepted = _ENGINE_OPTIONS.get(target, ())
    kwargs = {k: v for k, v in options.items() if k in accepted and v is not None}

    def factory():
        return engine_cls(**kwargs)

    factory.engine_name = class_name
    return factory
