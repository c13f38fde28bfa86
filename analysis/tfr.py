"""Time-frequency front end for burst detection.

This module produces the power surface the detection core consumes:

- morlet_power: complex Morlet wavelet power, one row per analysis frequency
- smooth_surface: 2D Gaussian low-pass over (frequency, time)
- compute_surface / find_bursts: raw signal to surface to report
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy import ndimage, signal

from core.config import BurstConfig
from core.detection import BurstDetector, SurfaceSmoother
from shared.models import BurstReport, InvalidInput, PowerSurface

logger = logging.getLogger(__name__)


def morlet_wavelet(f0: float, sample_rate: float, m: float = 5.0) -> np.ndarray:
    """Unit-energy complex Morlet wavelet with `m` cycles at `f0` Hz.

    The Gaussian envelope has ``sigma_t = m / (2*pi*f0)`` and is truncated at
    +/- 3.5 sigma.
    """
    sigma_t = m / (2.0 * math.pi * f0)
    half = int(math.ceil(3.5 * sigma_t * sample_rate))
    t = np.arange(-half, half + 1, dtype=np.float64) / sample_rate
    amp = 1.0 / math.sqrt(sigma_t * math.sqrt(math.pi))
    wavelet = amp * np.exp(-(t**2) / (2.0 * sigma_t**2)) * np.exp(2j * math.pi * f0 * t)
    return wavelet / sample_rate


def morlet_power(
    samples: np.ndarray,
    sample_rate: float,
    f0s: Sequence[float],
    m: float = 5.0,
) -> np.ndarray:
    """Return ``power[len(f0s), len(samples)]`` from Morlet convolution."""
    x = np.asarray(samples, dtype=np.float64)
    if x.ndim != 1 or x.size == 0:
        raise InvalidInput("samples must be a non-empty 1D array")
    if sample_rate <= 0:
        raise InvalidInput("sample_rate must be positive")
    if m <= 0:
        raise InvalidInput("m must be positive")
    freqs = np.asarray(f0s, dtype=np.float64)
    if freqs.ndim != 1 or freqs.size == 0 or np.any(freqs <= 0):
        raise InvalidInput("f0s must be a non-empty list of positive frequencies")

    power = np.empty((freqs.size, x.size), dtype=np.float64)
    for row, f0 in enumerate(freqs):
        coeffs = signal.fftconvolve(x, morlet_wavelet(float(f0), sample_rate, m), mode="same")
        power[row] = np.abs(coeffs) ** 2
    return power


def smooth_surface(power: np.ndarray, filt2d: Tuple[float, float] = (1.0, 3.0)) -> np.ndarray:
    """Gaussian smoothing with standard deviations ``(freq_bins, time_samples)``.

    Edges replicate the border value and the kernel extends to two standard
    deviations.
    """
    data = np.asarray(power, dtype=np.float64)
    sigma = tuple(float(s) for s in filt2d)
    if len(sigma) != 2 or any(s < 0 for s in sigma):
        raise InvalidInput("filt2d must be two non-negative widths")
    if not any(sigma):
        return data.copy()
    return ndimage.gaussian_filter(data, sigma=sigma, mode="nearest", truncate=2.0)


class GaussianSmoother:
    """SurfaceSmoother backed by :func:`smooth_surface`."""

    def __init__(self, filt2d: Tuple[float, float] = (1.0, 3.0)) -> None:
        self.filt2d = tuple(filt2d)

    def smooth(self, power: np.ndarray) -> np.ndarray:
        return smooth_surface(power, self.filt2d)


def compute_surface(
    samples: np.ndarray,
    sample_rate: float,
    config: Optional[BurstConfig] = None,
    *,
    smoother: Optional[SurfaceSmoother] = None,
) -> PowerSurface:
    cfg = config or BurstConfig()
    cfg.validate()
    logger.info("computing time-frequency spectrogram (%d frequencies, %d samples)", len(cfg.f0s), np.size(samples))
    power = morlet_power(samples, sample_rate, cfg.f0s, cfg.m)
    logger.info("applying 2D gaussian filter")
    smoother = smoother or GaussianSmoother(cfg.filt2d)
    return PowerSurface(power=smoother.smooth(power), f0s=np.asarray(cfg.f0s), sample_rate=sample_rate)


def find_bursts(
    samples: np.ndarray,
    sample_rate: float,
    config: Optional[BurstConfig] = None,
) -> BurstReport:
    """Transform, smooth and run burst detection on a single-channel signal."""
    cfg = config or BurstConfig()
    logger.info(cfg.describe())
    surface = compute_surface(samples, sample_rate, cfg)
    return BurstDetector(cfg).detect(surface)


__all__ = [
    "morlet_wavelet",
    "morlet_power",
    "smooth_surface",
    "GaussianSmoother",
    "compute_surface",
    "find_bursts",
]
