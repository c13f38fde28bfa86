import logging

import numpy as np

from shared.models import InvalidInput

logger = logging.getLogger(__name__)


def baseline_start(sample_rate: float) -> int:
    """First column used for baselines; the first second carries transform edge effects."""
    return int(sample_rate)


def estimate_thresholds(power: np.ndarray, sample_rate: float, n_meds: float = 6.0) -> np.ndarray:
    """Per-frequency detection threshold: median power after the first second, times `n_meds`."""
    data = np.asarray(power, dtype=np.float64)
    if data.ndim != 2 or data.size == 0:
        raise InvalidInput("power surface must be a non-empty 2D array")
    if not np.isfinite(sample_rate) or sample_rate <= 0:
        raise InvalidInput("sample_rate must be positive")
    if not np.isfinite(n_meds) or n_meds <= 0:
        raise InvalidInput("n_meds must be positive")

    start = baseline_start(sample_rate)
    if data.shape[1] <= start:
        raise InvalidInput(
            f"surface has {data.shape[1]} samples; more than one second ({start} samples) is required"
        )

    meds = np.median(data[:, start:], axis=1)
    thresholds = meds * float(n_meds)
    logger.debug("thresholds: %d frequencies, median of baseline medians %.4g", thresholds.size, float(np.median(meds)))
    return thresholds
