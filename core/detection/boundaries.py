from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence, Tuple

import numpy as np

from shared.models import BurstEvent, InvalidInput


def first_crossing(values: np.ndarray, peak: int, level: float) -> Tuple[Optional[int], Optional[int]]:
    """Indices of the nearest samples strictly below `level` on each side of `peak`.

    ``None`` is returned for a side where the values never drop below
    `level` before the end of the array.
    """
    before = np.flatnonzero(values[:peak][::-1] < level)
    after = np.flatnonzero(values[peak + 1:] < level)
    lower = peak - 1 - int(before[0]) if before.size else None
    upper = peak + 1 + int(after[0]) if after.size else None
    return lower, upper


def event_extent(
    power: np.ndarray,
    f0s: np.ndarray,
    sample_rate: float,
    prop_pwr: float,
    event: BurstEvent,
) -> BurstEvent:
    """Return `event` with its start/end times and lower/upper frequencies filled in."""
    level = event.power * prop_pwr
    start, end = first_crossing(power[event.freq_index, :], event.time_index, level)
    lower, upper = first_crossing(power[:, event.time_index], event.freq_index, level)
    return replace(
        event,
        start_sec=None if start is None else start / sample_rate,
        end_sec=None if end is None else end / sample_rate,
        lower_freq_hz=None if lower is None else float(f0s[lower]),
        upper_freq_hz=None if upper is None else float(f0s[upper]),
    )


def estimate_boundaries(
    power: np.ndarray,
    f0s: np.ndarray,
    sample_rate: float,
    prop_pwr: float,
    events: Sequence[BurstEvent],
) -> list[BurstEvent]:
    """Temporal and spectral extent of each event at `prop_pwr` times its peak power."""
    if not np.isfinite(prop_pwr) or prop_pwr <= 0:
        raise InvalidInput("prop_pwr must be positive")
    if sample_rate <= 0:
        raise InvalidInput("sample_rate must be positive")
    data = np.asarray(power, dtype=np.float64)
    f0s = np.asarray(f0s, dtype=np.float64)
    return [event_extent(data, f0s, sample_rate, prop_pwr, event) for event in events]


__all__ = ["first_crossing", "event_extent", "estimate_boundaries"]
