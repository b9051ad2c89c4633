from __future__ import annotations

"""Runtime settings loaded from environment variables."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os


PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SINGERS_PATH = PROJECT_ROOT / "assets" / "singers"


def _env_float(name: str, default: float) -> float:
    """Read a float env var with a default."""
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def _env_path(name: str, default: Path) -> Path:
    """Read a path env var with a default, expanding ``~``."""
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return Path(value).expanduser()


@dataclass(frozen=True)
class Settings:
    """Configuration values parsed from the environment."""
    singers_path: Path
    phonemizer: Optional[str]
    consonant_ms: float

    @classmethod
    def from_env(cls) -> "Settings":
        """Construct settings from environment variables."""
        singers_path = _env_path("PHONEME_TIMING_SINGERS_PATH", DEFAULT_SINGERS_PATH)
        phonemizer = os.getenv("PHONEME_TIMING_PHONEMIZER", "").strip() or None
        consonant_ms = _env_float("PHONEME_TIMING_CONSONANT_MS", 60.0)
        if consonant_ms <= 0:
            raise ValueError("PHONEME_TIMING_CONSONANT_MS must be positive.")
        return cls(
            singers_path=singers_path,
            phonemizer=phonemizer,
            consonant_ms=consonant_ms,
        )
