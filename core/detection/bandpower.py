from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from shared.models import BurstEvent
from shared.types import as_frequency_range

logger = logging.getLogger(__name__)


def band_rows(f0s: np.ndarray, bands: Sequence[Sequence[float]]) -> List[np.ndarray]:
    """Frequency row indices selected by each ``[lo, hi]`` band (edges inclusive)."""
    f0s = np.asarray(f0s, dtype=np.float64)
    rows = []
    for i, band in enumerate(bands):
        lo, hi = as_frequency_range(band, name=f"bands[{i}]")
        selected = np.flatnonzero((f0s >= lo) & (f0s <= hi))
        if selected.size == 0:
            logger.warning("band %g-%g Hz contains no analysed frequencies", lo, hi)
        rows.append(selected)
    return rows


def band_powers_at(power: np.ndarray, rows: Sequence[np.ndarray], time_index: int) -> Tuple[Optional[float], ...]:
    return tuple(
        float(np.mean(power[selected, time_index])) if selected.size else None
        for selected in rows
    )


def sample_band_power(
    power: np.ndarray,
    f0s: np.ndarray,
    bands: Sequence[Sequence[float]],
    events: Sequence[BurstEvent],
) -> List[BurstEvent]:
    """Attach the mean power of every band at each event's peak time."""
    if not bands:
        return list(events)
    data = np.asarray(power, dtype=np.float64)
    rows = band_rows(f0s, bands)
    logger.info("finding power in requested frequency bands")
    return [replace(event, band_powers=band_powers_at(data, rows, event.time_index)) for event in events]


__all__ = ["band_rows", "band_powers_at", "sample_band_power"]
