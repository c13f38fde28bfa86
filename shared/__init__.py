"""
Shared data structures exchanged between the detection core, the
time-frequency front end and the report writers.
"""

from .models import BurstEvent, BurstReport, InvalidInput, PowerSurface
from .types import Candidate, FrequencyRange

__all__ = ["BurstEvent", "BurstReport", "Candidate", "FrequencyRange", "InvalidInput", "PowerSurface"]
