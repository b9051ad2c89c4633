"""Error types shared by project loading, singer lookup and phonemization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


class PhonemeTimingError(Exception):
    """Base class for errors that abort a whole run."""


class ProjectNotFoundError(PhonemeTimingError, FileNotFoundError):
    """Raised when the input project file does not exist."""


class ProjectLoadError(PhonemeTimingError, ValueError):
    """Raised when a project file cannot be parsed into a project model."""


class SingerNotFoundError(PhonemeTimingError, LookupError):
    """Raised when no lookup strategy resolves the requested singer."""


@dataclass
class PhonemizerFailure:
    """A contained engine failure for one part (setup) or one group (process)."""

    stage: str
    part_name: str
    detail: str
    group_index: Optional[int] = None
    error_type: str = "Exception"

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error_type": self.error_type,
            "stage": self.stage,
            "part_name": self.part_name,
            "detail": self.detail,
        }
        if self.group_index is not None:
            payload["group_index"] = int(self.group_index)
        return payload

    def __str__(self) -> str:
        where = f" group={self.group_index}" if self.group_index is not None else ""
        return f"{self.stage} failed: part={self.part_name!r}{where} {self.error_type}: {self.detail}"
