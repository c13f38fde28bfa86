"""Time-frequency front end: Morlet power surfaces and 2D smoothing."""

from .tfr import GaussianSmoother, compute_surface, find_bursts, morlet_power, smooth_surface

__all__ = ["GaussianSmoother", "compute_surface", "find_bursts", "morlet_power", "smooth_surface"]
