"""Monitoring helpers."""

from .metrics import ResolutionStatsCollector, metrics_router, setup_metrics

__all__ = ["ResolutionStatsCollector", "metrics_router", "setup_metrics"]
