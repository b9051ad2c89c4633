"""Tick <-> millisecond conversion over a piecewise-constant tempo map."""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from phoneme_timing.project.model import Tempo

ArrayLike = Union[Sequence[float], np.ndarray]


class TimeAxis:
    def __init__(self, tempos: Sequence[Tempo], resolution: int = 480):
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        ordered = sorted(tempos, key=lambda t: t.position)
        if not ordered:
            ordered = [Tempo(position=0, bpm=120.0)]
        for tempo in ordered:
            if tempo.bpm <= 0:
                raise ValueError(f"tempo at tick {tempo.position} has non-positive bpm {tempo.bpm}")
        self.resolution = resolution
        self.tempos = ordered

        # The first tempo governs everything before the second one, including tick 0.
        ticks = np.array([t.position for t in ordered], dtype=np.float64)
        ticks[0] = 0.0
        # Ticks per minute for each segment.
        ticks_per_minute = np.array([t.bpm * resolution for t in ordered], dtype=np.float64)
        ms_offsets = np.zeros(len(ordered), dtype=np.float64)
        if len(ordered) > 1:
            ms_offsets[1:] = np.cumsum(np.diff(ticks) * 60000.0 / ticks_per_minute[:-1])
        self._ticks = ticks
        self._ticks_per_minute = ticks_per_minute
        self._ms_offsets = ms_offsets

    def ticks_to_ms(self, ticks: ArrayLike) -> np.ndarray:
        values = np.asarray(ticks, dtype=np.float64)
        idx = np.clip(np.searchsorted(self._ticks, values, side="right") - 1, 0, None)
        return self._ms_offsets[idx] + (values - self._ticks[idx]) * 60000.0 / self._ticks_per_minute[idx]

    def tick_to_ms(self, tick: float) -> float:
        return float(self.ticks_to_ms([tick])[0])

    def ms_to_tick(self, ms: float) -> float:
        idx = max(int(np.searchsorted(self._ms_offsets, ms, side="right")) - 1, 0)
        return float(self._ticks[idx] + (ms - self._ms_offsets[idx]) * self._ticks_per_minute[idx] / 60000.0)
