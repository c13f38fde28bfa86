"""Burst detection core."""

from .config import BurstConfig, default_f0s
from .detection import (
    BurstDetector,
    detect_bursts,
    estimate_boundaries,
    estimate_thresholds,
    filter_candidates,
    locate_peaks,
    sample_band_power,
)
from shared.models import BurstEvent, BurstReport, InvalidInput, PowerSurface

__all__ = [
    "BurstConfig",
    "default_f0s",
    "BurstDetector",
    "BurstEvent",
    "BurstReport",
    "InvalidInput",
    "PowerSurface",
    "detect_bursts",
    "estimate_thresholds",
    "locate_peaks",
    "filter_candidates",
    "estimate_boundaries",
    "sample_band_power",
]
