from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

import numpy as np


class InvalidInput(ValueError):
    """Raised when a surface, axis or option cannot be used for detection."""


def _freeze_array(array: np.ndarray, *, ndim: int | None = None, dtype=np.float64) -> np.ndarray:
    """Return a read-only, C-contiguous copy of `array`, validating dimensions."""
    arr = np.array(array, dtype=dtype, copy=True, order="C")
    if ndim is not None and arr.ndim != ndim:
        raise InvalidInput(f"array must be {ndim}D, got {arr.ndim}D")
    arr.setflags(write=False)
    return arr


def _optional_float(value: Optional[float]) -> float:
    return float("nan") if value is None else float(value)


# ----------------------------
# Time-frequency input
# ----------------------------

@dataclass(frozen=True)
class PowerSurface:
    """Time-frequency power indexed as ``power[frequency, time]``."""

    power: np.ndarray
    f0s: np.ndarray
    sample_rate: float

    def __post_init__(self) -> None:
        if not np.isfinite(self.sample_rate) or self.sample_rate <= 0:
            raise InvalidInput("sample_rate must be positive")
        power = _freeze_array(self.power, ndim=2)
        f0s = _freeze_array(self.f0s, ndim=1)
        if power.size == 0:
            raise InvalidInput("power surface must not be empty")
        if power.shape[0] != f0s.size:
            raise InvalidInput(
                f"surface has {power.shape[0]} frequency rows but f0s has {f0s.size} entries"
            )
        if f0s.size > 1 and not np.all(np.diff(f0s) > 0):
            raise InvalidInput("f0s must be strictly ascending")

        object.__setattr__(self, "power", power)
        object.__setattr__(self, "f0s", f0s)
        object.__setattr__(self, "sample_rate", float(self.sample_rate))

    @property
    def n_freqs(self) -> int:
        return self.power.shape[0]

    @property
    def n_times(self) -> int:
        return self.power.shape[1]

    @property
    def duration(self) -> float:
        return self.n_times / self.sample_rate

    def __reduce__(self):
        return (
            self.__class__,
            (
                np.array(self.power, copy=True, order="C"),
                np.array(self.f0s, copy=True),
                self.sample_rate,
            ),
        )


# ----------------------------
# Detection output
# ----------------------------

@dataclass(frozen=True)
class BurstEvent:
    """A single accepted burst.

    Attributes:
        freq_index: Row of the peak in the power surface.
        time_index: Column (sample point) of the peak.
        time_sec: ``time_index / sample_rate``.
        freq_hz: Peak frequency looked up from ``f0s``.
        power: Surface value at the peak.
        start_sec / end_sec: First sub-threshold sample before / after the peak
            along the peak frequency, or ``None`` when the power never drops
            below the proportional threshold inside the array.
        lower_freq_hz / upper_freq_hz: Same along the peak time column.
        band_powers: Mean power per configured band, ``None`` for bands that
            select no frequency rows. Empty when no bands were requested.
    """

    freq_index: int
    time_index: int
    time_sec: float
    freq_hz: float
    power: float
    start_sec: Optional[float] = None
    end_sec: Optional[float] = None
    lower_freq_hz: Optional[float] = None
    upper_freq_hz: Optional[float] = None
    band_powers: Tuple[Optional[float], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.freq_index < 0:
            raise InvalidInput("freq_index must be non-negative")
        if self.time_index < 0:
            raise InvalidInput("time_index must be non-negative")
        object.__setattr__(self, "band_powers", tuple(self.band_powers))

    @property
    def duration_ms(self) -> Optional[float]:
        if self.start_sec is None or self.end_sec is None:
            return None
        return 1000.0 * (self.end_sec - self.start_sec)

    @property
    def spectral_width_hz(self) -> Optional[float]:
        if self.lower_freq_hz is None or self.upper_freq_hz is None:
            return None
        return self.upper_freq_hz - self.lower_freq_hz

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tp": self.time_index,
            "secs": self.time_sec,
            "freqs": self.freq_hz,
            "pwr": self.power,
            "dur": self.duration_ms,
            "spec": self.spectral_width_hz,
            "start": self.start_sec,
            "end": self.end_sec,
            "lower_freq": self.lower_freq_hz,
            "upper_freq": self.upper_freq_hz,
            "bands_power": list(self.band_powers),
        }


@dataclass(frozen=True)
class BurstReport:
    """Per-frequency thresholds plus the accepted events in time order."""

    thresholds: np.ndarray
    f0s: np.ndarray
    sample_rate: float
    n_times: int
    events: Tuple[BurstEvent, ...] = ()
    bands: Tuple[Tuple[float, float], ...] = ()

    def __post_init__(self) -> None:
        if not np.isfinite(self.sample_rate) or self.sample_rate <= 0:
            raise InvalidInput("sample_rate must be positive")
        if self.n_times < 0:
            raise InvalidInput("n_times must be non-negative")
        thresholds = _freeze_array(self.thresholds, ndim=1)
        f0s = _freeze_array(self.f0s, ndim=1)
        if thresholds.size != f0s.size:
            raise InvalidInput("thresholds must have one value per frequency")
        events = tuple(sorted(self.events, key=lambda ev: (ev.time_index, ev.freq_index)))
        bands = tuple((float(lo), float(hi)) for lo, hi in self.bands)
        for event in events:
            if event.band_powers and len(event.band_powers) != len(bands):
                raise InvalidInput("every event needs one band power per band")

        object.__setattr__(self, "thresholds", thresholds)
        object.__setattr__(self, "f0s", f0s)
        object.__setattr__(self, "sample_rate", float(self.sample_rate))
        object.__setattr__(self, "events", events)
        object.__setattr__(self, "bands", bands)

    @classmethod
    def empty(cls, thresholds: np.ndarray, f0s: np.ndarray, sample_rate: float, n_times: int) -> "BurstReport":
        return cls(thresholds=thresholds, f0s=f0s, sample_rate=sample_rate, n_times=n_times)

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[BurstEvent]:
        return iter(self.events)

    @property
    def duration(self) -> float:
        return self.n_times / self.sample_rate

    def columns(self) -> Dict[str, np.ndarray]:
        """Parallel arrays aligned by event index; undefined values become NaN."""
        events = self.events
        return {
            "tp": np.array([ev.time_index for ev in events], dtype=np.int64),
            "secs": np.array([ev.time_sec for ev in events], dtype=np.float64),
            "freqs": np.array([ev.freq_hz for ev in events], dtype=np.float64),
            "pwr": np.array([ev.power for ev in events], dtype=np.float64),
            "dur": np.array([_optional_float(ev.duration_ms) for ev in events], dtype=np.float64),
            "spec": np.array([_optional_float(ev.spectral_width_hz) for ev in events], dtype=np.float64),
            "start": np.array([_optional_float(ev.start_sec) for ev in events], dtype=np.float64),
            "end": np.array([_optional_float(ev.end_sec) for ev in events], dtype=np.float64),
            "lower_freq": np.array([_optional_float(ev.lower_freq_hz) for ev in events], dtype=np.float64),
            "upper_freq": np.array([_optional_float(ev.upper_freq_hz) for ev in events], dtype=np.float64),
        }

    def band_power_matrix(self) -> np.ndarray:
        """Return a ``(n_bands, n_events)`` array; bands without data are NaN."""
        matrix = np.full((len(self.bands), len(self.events)), np.nan, dtype=np.float64)
        for col, event in enumerate(self.events):
            for row, value in enumerate(event.band_powers):
                matrix[row, col] = _optional_float(value)
        return matrix

    def summary(self) -> Dict[str, Any]:
        cols = self.columns()
        dur = cols["dur"][np.isfinite(cols["dur"])]
        spec = cols["spec"][np.isfinite(cols["spec"])]
        return {
            "n_bursts": len(self.events),
            "rate_per_sec": len(self.events) / self.duration if self.duration > 0 else 0.0,
            "median_duration_ms": float(np.median(dur)) if dur.size else None,
            "median_spectral_width_hz": float(np.median(spec)) if spec.size else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sample_rate": self.sample_rate,
            "n_times": self.n_times,
            "f0s": self.f0s.tolist(),
            "thresh": self.thresholds.tolist(),
            "bands": [list(band) for band in self.bands],
            "events": [event.to_dict() for event in self.events],
        }

    def __reduce__(self):
        return (
            self.__class__,
            (
                np.array(self.thresholds, copy=True),
                np.array(self.f0s, copy=True),
                self.sample_rate,
                self.n_times,
                tuple(self.events),
                tuple(self.bands),
            ),
        )


__all__ = [
    "InvalidInput",
    "PowerSurface",
    "BurstEvent",
    "BurstReport",
]
