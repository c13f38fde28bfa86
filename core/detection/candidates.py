"""Candidate acceptance and temporal de-duplication.

Two passes turn raw surface maxima into burst peaks:

- :func:`accept_candidates` keeps maxima that reach the per-frequency
  threshold and whose frequency lies inside the band of interest.
- :func:`resolve_proximity` removes near-duplicates. Each candidate defines
  its own cluster of neighbours closer than the event gap; within a cluster
  only the time point with the largest column power survives. Clusters are
  evaluated per candidate and may overlap, so a chain of candidates spaced
  just under the gap is not merged into one group.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from shared.models import InvalidInput
from shared.types import Candidate, as_frequency_range

logger = logging.getLogger(__name__)


def accept_candidates(
    candidates: Iterable[Tuple[int, int]],
    power: np.ndarray,
    thresholds: np.ndarray,
    f0s: np.ndarray,
    peak_freq_range: Sequence[float],
) -> List[Candidate]:
    lo, hi = as_frequency_range(peak_freq_range, name="peak_freq_range")
    f0s = np.asarray(f0s, dtype=np.float64)
    accepted: List[Candidate] = []
    for f_idx, t_idx in candidates:
        if power[f_idx, t_idx] < thresholds[f_idx]:
            continue
        if lo <= f0s[f_idx] <= hi:
            accepted.append(Candidate(int(f_idx), int(t_idx)))
    return accepted


def resolve_proximity(
    candidates: Sequence[Candidate],
    power: np.ndarray,
    event_gap_samples: int,
) -> np.ndarray:
    """Return a keep-mask over `candidates` after per-candidate cluster resolution."""
    n = len(candidates)
    keep = np.ones(n, dtype=bool)
    if n == 0:
        return keep

    times = np.array([c.time_index for c in candidates], dtype=np.int64)
    column_max = np.max(power, axis=0)
    for i in range(n):
        members = np.flatnonzero(np.abs(times - times[i]) < event_gap_samples)
        if members.size <= 1:
            continue
        winner = times[members[int(np.argmax(column_max[times[members]]))]]
        keep[members[times[members] != winner]] = False
    return keep


def filter_candidates(
    candidates: Iterable[Tuple[int, int]],
    power: np.ndarray,
    thresholds: np.ndarray,
    f0s: np.ndarray,
    peak_freq_range: Sequence[float],
    event_gap_samples: int,
    sample_rate: float,
) -> List[Candidate]:
    """Apply threshold/band acceptance, proximity resolution and the first-second cut.

    The result is ordered by time index, then frequency index.
    """
    data = np.asarray(power, dtype=np.float64)
    thresholds = np.asarray(thresholds, dtype=np.float64)
    if data.ndim != 2:
        raise InvalidInput("power surface must be 2D")
    if thresholds.shape != (data.shape[0],) or np.asarray(f0s).shape != (data.shape[0],):
        raise InvalidInput("thresholds and f0s must have one entry per frequency row")
    if event_gap_samples < 0:
        raise InvalidInput("event_gap_samples must be non-negative")

    ordered = sorted((Candidate(int(f), int(t)) for f, t in candidates), key=lambda c: (c.time_index, c.freq_index))
    logger.info("accepting peaks exceeding threshold")
    accepted = accept_candidates(ordered, data, thresholds, f0s, peak_freq_range)
    logger.debug("%d of %d peaks exceed threshold in band", len(accepted), len(ordered))

    logger.info("rejecting peaks that are too close together")
    keep = resolve_proximity(accepted, data, int(event_gap_samples))
    survivors = [c for c, k in zip(accepted, keep) if k and c.time_index >= sample_rate]
    logger.debug("%d peaks survive proximity and first-second rejection", len(survivors))
    return survivors


__all__ = ["accept_candidates", "resolve_proximity", "filter_candidates"]
