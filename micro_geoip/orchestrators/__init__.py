"""Orchestration layer.

This module contains the workflows that acquire datasets and keep the active
one fresh.
"""

from micro_geoip.orchestrators.acquisition import Acquisition
from micro_geoip.orchestrators.refresh import RefreshScheduler

__all__ = [
    "Acquisition",
    "RefreshScheduler",
]
