from __future__ import annotations

import logging
from typing import List, Mapping, Sequence, Tuple

import numpy as np
from scipy import ndimage

from shared.models import InvalidInput
from shared.types import Candidate
from .base import LocatorParameter, PeakLocator, create_peak_locator, register_peak_locator

logger = logging.getLogger(__name__)


@register_peak_locator
class DilationPeakLocator:
    """Grey-scale dilation peak finder.

    A point is a peak when it equals the maximum over its rectangular
    neighborhood. Windows that are completely flat are not peaks, otherwise
    every point of a constant background would be reported.
    """

    name = "dilation"
    display_name = "Image Dilation"

    def __init__(self) -> None:
        self._neighborhood: Tuple[int, int] = (5, 5)
        self._params = {
            "neighborhood": LocatorParameter(
                name="neighborhood",
                default=5,
                min=1,
                help="Structuring element size (frequency bins, time samples)",
            )
        }

    @property
    def parameters(self) -> Mapping[str, LocatorParameter]:
        return dict(self._params)

    @property
    def neighborhood(self) -> Tuple[int, int]:
        return self._neighborhood

    def configure(self, **params) -> None:
        if "neighborhood" in params:
            size = tuple(int(n) for n in params["neighborhood"])
            if len(size) != 2 or any(n <= 0 for n in size):
                raise InvalidInput("neighborhood must be two positive sizes")
            self._neighborhood = size

    def peak_mask(self, power: np.ndarray) -> np.ndarray:
        data = np.asarray(power, dtype=np.float64)
        # Pad with -inf like a dilation so edge pixels compare only against real data
        dilated = ndimage.maximum_filter(data, size=self._neighborhood, mode="constant", cval=-np.inf)
        mask = data == dilated
        if self._neighborhood[0] * self._neighborhood[1] > 1:
            eroded = ndimage.minimum_filter(data, size=self._neighborhood, mode="nearest")
            mask &= dilated > eroded
        return mask


def mask_to_candidates(mask: np.ndarray) -> List[Candidate]:
    """Convert a peak mask into candidates ordered by time, then frequency."""
    t_idx, f_idx = np.nonzero(np.asarray(mask, dtype=bool).T)
    return [Candidate(int(f), int(t)) for f, t in zip(f_idx, t_idx)]


def locate_peaks(
    power: np.ndarray,
    neighborhood: Sequence[int] = (5, 5),
    *,
    locator: PeakLocator | str = "dilation",
) -> List[Candidate]:
    """Return ``(freq_index, time_index)`` of every local maximum in `power`."""
    data = np.asarray(power)
    if data.ndim != 2 or data.size == 0:
        raise InvalidInput("power surface must be a non-empty 2D array")
    if isinstance(locator, str):
        locator = create_peak_locator(locator, neighborhood)
    mask = np.asarray(locator.peak_mask(data), dtype=bool)
    if mask.shape != data.shape:
        raise ValueError(f"peak mask shape {mask.shape} does not match surface {data.shape}")
    candidates = mask_to_candidates(mask)
    logger.debug("found %d local maxima with %s", len(candidates), getattr(locator, "name", locator))
    return candidates


__all__ = ["DilationPeakLocator", "locate_peaks", "mask_to_candidates"]
