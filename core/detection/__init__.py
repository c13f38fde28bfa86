from .base import (
    PEAK_LOCATOR_REGISTRY,
    LocatorParameter,
    PeakLocator,
    SurfaceSmoother,
    create_peak_locator,
    register_peak_locator,
)
from .bandpower import sample_band_power
from .boundaries import estimate_boundaries
from .candidates import filter_candidates
from .peaks import DilationPeakLocator, locate_peaks
from .pipeline import BurstDetector, detect_bursts
from .threshold import estimate_thresholds

__all__ = [
    "PeakLocator",
    "SurfaceSmoother",
    "LocatorParameter",
    "PEAK_LOCATOR_REGISTRY",
    "register_peak_locator",
    "create_peak_locator",
    "DilationPeakLocator",
    "BurstDetector",
    "estimate_thresholds",
    "locate_peaks",
    "filter_candidates",
    "estimate_boundaries",
    "sample_band_power",
    "detect_bursts",
]
