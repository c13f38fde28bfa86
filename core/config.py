from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Tuple

import numpy as np

from shared.models import InvalidInput
from shared.types import FrequencyRange, as_frequency_range

logger = logging.getLogger(__name__)


def default_f0s() -> Tuple[float, ...]:
    """0.1 Hz to 40 Hz in 0.1 Hz steps."""
    return tuple(float(f) for f in np.round(np.arange(1, 401) * 0.1, 1))


# Option names used by the original analysis scripts, mapped to field names.
_ALIASES = {
    "nMeds": "n_meds",
    "propPwr": "prop_pwr",
    "filt2d": "filt2d",
    "peakFreqs": "peak_freqs",
    "structElem": "struct_elem",
    "eventGap": "event_gap",
}

# Accepted for compatibility with saved option files; they only drive plots.
_DISPLAY_ONLY = {"dispFreqs", "dispBox", "markDur", "disp_freqs", "disp_box", "mark_dur"}


@dataclass(frozen=True)
class BurstConfig:
    """Analysis parameters for burst detection.

    ``m``, ``f0s`` and ``filt2d`` configure the time-frequency front end; the
    detection core reads the remaining fields.
    """

    m: float = 5.0
    f0s: Tuple[float, ...] = field(default_factory=default_f0s)
    n_meds: float = 6.0
    prop_pwr: float = 0.5
    filt2d: Tuple[float, float] = (1.0, 3.0)
    peak_freqs: FrequencyRange = (13.0, 30.0)
    struct_elem: Tuple[int, int] = (5, 5)
    event_gap: float = 0.2
    bands: Tuple[FrequencyRange, ...] = ()
    peak_locator: str = "dilation"
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "f0s", tuple(float(f) for f in self.f0s))
        object.__setattr__(self, "filt2d", tuple(float(s) for s in self.filt2d))
        object.__setattr__(self, "peak_freqs", as_frequency_range(self.peak_freqs, name="peak_freqs"))
        object.__setattr__(self, "struct_elem", tuple(int(n) for n in self.struct_elem))
        object.__setattr__(
            self,
            "bands",
            tuple(as_frequency_range(band, name=f"bands[{i}]") for i, band in enumerate(self.bands)),
        )

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["f0s"] = list(self.f0s)
        data["bands"] = [list(band) for band in self.bands]
        return data

    def event_gap_samples(self, sample_rate: float) -> int:
        """Gap in samples, halves rounded up so 2.5 samples clusters points 2 apart."""
        return int(math.floor(self.event_gap * sample_rate + 0.5))

    def validate(self) -> None:
        for name in ("m", "n_meds", "prop_pwr"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise InvalidInput(f"{name} must be positive")
        if not math.isfinite(self.event_gap) or self.event_gap < 0:
            raise InvalidInput("event_gap must be non-negative")
        if len(self.filt2d) != 2 or any(not math.isfinite(s) or s < 0 for s in self.filt2d):
            raise InvalidInput("filt2d must be two non-negative widths (freq, time)")
        if len(self.struct_elem) != 2 or any(n <= 0 for n in self.struct_elem):
            raise InvalidInput("struct_elem must be two positive sizes (freq, time)")
        if not self.f0s:
            raise InvalidInput("f0s must not be empty")
        f0s = np.asarray(self.f0s)
        if np.any(f0s <= 0):
            raise InvalidInput("f0s must be positive")
        if f0s.size > 1 and not np.all(np.diff(f0s) > 0):
            raise InvalidInput("f0s must be strictly ascending")
        if self.max_workers is not None and self.max_workers <= 0:
            raise InvalidInput("max_workers must be positive")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "BurstConfig":
        """Build a config from snake_case or original camelCase option names."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in options.items():
            if key in _DISPLAY_ONLY:
                logger.info("ignoring display option %r", key)
                continue
            name = _ALIASES.get(key, key)
            if name not in known:
                raise InvalidInput(f"unknown option {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def describe(self) -> str:
        args = [name for name in self.to_dict() if name not in ("peak_locator", "max_workers")]
        changed = [name for name in args if getattr(self, name) != getattr(_DEFAULT, name)]
        if not changed:
            return "all arguments set to defaults"
        return "args accepted: " + " ".join(changed)


_DEFAULT = BurstConfig()


__all__ = ["BurstConfig", "default_f0s"]
