from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import List, Optional, Sequence

import numpy as np

from core.config import BurstConfig
from shared.models import BurstEvent, BurstReport, PowerSurface
from shared.types import Candidate
from .bandpower import band_powers_at, band_rows
from .base import PeakLocator, create_peak_locator
from .boundaries import event_extent
from .candidates import filter_candidates
from .peaks import locate_peaks
from .threshold import estimate_thresholds

logger = logging.getLogger(__name__)


def make_events(candidates: Sequence[Candidate], power: np.ndarray, f0s: np.ndarray, sample_rate: float) -> List[BurstEvent]:
    return [
        BurstEvent(
            freq_index=c.freq_index,
            time_index=c.time_index,
            time_sec=c.time_index / sample_rate,
            freq_hz=float(f0s[c.freq_index]),
            power=float(power[c.freq_index, c.time_index]),
        )
        for c in candidates
    ]


class BurstDetector:
    """Runs threshold estimation, peak search, filtering and event enrichment on a surface."""

    def __init__(self, config: Optional[BurstConfig] = None, *, locator: Optional[PeakLocator] = None) -> None:
        self._config = config or BurstConfig()
        self._config.validate()
        self._locator = locator or create_peak_locator(self._config.peak_locator, self._config.struct_elem)

    @property
    def config(self) -> BurstConfig:
        return self._config

    def detect(self, surface: PowerSurface) -> BurstReport:
        cfg = self._config
        power = surface.power
        f0s = surface.f0s
        sample_rate = surface.sample_rate
        logger.info(
            "threshold: %g medians, burst frequency range: %g to %g Hz",
            cfg.n_meds,
            cfg.peak_freqs[0],
            cfg.peak_freqs[1],
        )

        thresholds = estimate_thresholds(power, sample_rate, cfg.n_meds)

        logger.info("finding peaks in filtered time-frequency spectrogram")
        peaks = locate_peaks(power, cfg.struct_elem, locator=self._locator)
        candidates = filter_candidates(
            peaks,
            power,
            thresholds,
            f0s,
            cfg.peak_freqs,
            cfg.event_gap_samples(sample_rate),
            sample_rate,
        )
        events = make_events(candidates, power, f0s, sample_rate)
        if events:
            events = self._enrich(power, f0s, sample_rate, events)
        logger.info("%d bursts detected", len(events))
        return BurstReport(
            thresholds=thresholds,
            f0s=f0s,
            sample_rate=sample_rate,
            n_times=surface.n_times,
            events=tuple(events),
            bands=cfg.bands,
        )

    def _enrich(self, power: np.ndarray, f0s: np.ndarray, sample_rate: float, events: List[BurstEvent]) -> List[BurstEvent]:
        cfg = self._config
        rows = band_rows(f0s, cfg.bands) if cfg.bands else None
        logger.info("finding event durations and spectral widths")

        def enrich_one(event: BurstEvent) -> BurstEvent:
            event = event_extent(power, f0s, sample_rate, cfg.prop_pwr, event)
            if rows is not None:
                event = replace(event, band_powers=band_powers_at(power, rows, event.time_index))
            return event

        workers = cfg.max_workers or 1
        if workers == 1 or len(events) == 1:
            return [enrich_one(event) for event in events]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order
            return list(executor.map(enrich_one, events))


def detect_bursts(
    power: np.ndarray,
    f0s: Sequence[float],
    sample_rate: float,
    config: Optional[BurstConfig] = None,
) -> BurstReport:
    """Detect bursts in a precomputed ``power[frequency, time]`` surface."""
    surface = PowerSurface(power=power, f0s=np.asarray(f0s, dtype=np.float64), sample_rate=sample_rate)
    return BurstDetector(config).detect(surface)


__all__ = ["BurstDetector", "detect_bursts", "make_events"]
