"""UI."""

from micro_geoip.ui.reporter import Reporter

__all__ = ["Reporter"]
