from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Protocol, Sequence, Type

import numpy as np


@dataclass
class LocatorParameter:
    name: str
    default: int | float
    min: float | None = None
    max: float | None = None
    help: str = ""


class PeakLocator(Protocol):
    """Finds local maxima in a 2D power surface.

    Implementations only see the array and return a boolean mask of the same
    shape; converting the mask to coordinates is done by the caller.
    """

    name: str
    display_name: str

    def configure(self, **params) -> None:
        ...

    def peak_mask(self, power: np.ndarray) -> np.ndarray:
        """Return a boolean array, True at every local maximum."""
        ...


class SurfaceSmoother(Protocol):
    """Low-pass filter applied to a power surface before detection."""

    def smooth(self, power: np.ndarray) -> np.ndarray:
        ...


PEAK_LOCATOR_REGISTRY: Dict[str, Type[PeakLocator]] = {}


def register_peak_locator(cls: Type[PeakLocator]) -> Type[PeakLocator]:
    if not hasattr(cls, "name"):
        raise ValueError(f"Peak locator {cls} must have a 'name' attribute")
    PEAK_LOCATOR_REGISTRY[cls.name] = cls
    return cls


def create_peak_locator(name: str, neighborhood: Sequence[int]) -> PeakLocator:
    try:
        cls = PEAK_LOCATOR_REGISTRY[name]
    except KeyError:
        available = ", ".join(sorted(PEAK_LOCATOR_REGISTRY))
        raise ValueError(f"Unknown peak locator {name!r}; available: {available}") from None
    locator = cls()
    locator.configure(neighborhood=tuple(neighborhood))
    return locator
