from __future__ import annotations

from typing import NamedTuple, Tuple

from .models import InvalidInput


class Candidate(NamedTuple):
    """Peak coordinate in a power surface, not yet validated."""

    freq_index: int
    time_index: int


FrequencyRange = Tuple[float, float]


def as_frequency_range(value, *, name: str = "range") -> FrequencyRange:
    """Coerce a two-element sequence into an ordered ``(lo_hz, hi_hz)`` pair."""
    try:
        lo, hi = (float(v) for v in value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be a pair of frequencies in Hz, got {value!r}") from None
    if not (lo == lo and hi == hi):
        raise InvalidInput(f"{name} must not contain NaN")
    if lo > hi:
        raise InvalidInput(f"{name} lower edge {lo} exceeds upper edge {hi}")
    return lo, hi
