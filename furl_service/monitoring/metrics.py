"""Prometheus metrics and monitoring utilities."""

from __future__ import annotations

from typing import Iterator

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from furl_resolver.service import ResolutionService

metrics_router = APIRouter()


class ResolutionStatsCollector:
    """Expose the service counters at scrape time."""

    def __init__(self, service: ResolutionService) -> None:
        self.service = service

    def collect(self) -> Iterator[Metric]:
        stats = self.service.stats()
        cache, responses, cleaner = stats["cache"], stats["responses"], stats["cleaner"]

        yield CounterMetricFamily("furl_cache_hits", "Cache lookups served from memory", value=cache["hits"])
        yield CounterMetricFamily("furl_cache_misses", "Cache lookups that needed a probe", value=cache["misses"])
        yield CounterMetricFamily(
            "furl_responses_successful", "Resolutions ending in a 200", value=responses["successful"]
        )
        yield CounterMetricFamily("furl_responses_failures", "Resolutions ending in any other code", value=responses["failures"])
        yield CounterMetricFamily("furl_hops", "HEAD probes issued", value=stats["total_hops"])
        yield CounterMetricFamily("furl_cleaner_runs", "Cache cleaner passes", value=cleaner["runs"])
        yield CounterMetricFamily("furl_cleaner_cleaned", "Cache entries evicted", value=cleaner["cleaned"])
        yield GaugeMetricFamily("furl_cache_size", "Cached URLs", value=cache["size"])
        yield GaugeMetricFamily("furl_cache_memory_ratio", "Percent of the memory ceiling in use", value=cache["memory"])
        yield GaugeMetricFamily(
            "furl_cleaner_last_duration_ms", "Duration of the last cleaner pass", value=cleaner["lastduration"]
        )


@metrics_router.get("/metrics", include_in_schema=False)
def metrics(request: Request) -> Response:
    registry: CollectorRegistry = request.app.state.metrics_registry
    return Response(generate_latest(registry), media_type=CONTENT_TYPE_LATEST)


def setup_metrics(service: ResolutionService) -> CollectorRegistry:
    """Build a registry scoped to one service instance."""

    registry = CollectorRegistry()
    registry.register(ResolutionStatsCollector(service))
    return registry


__all__ = ["ResolutionStatsCollector", "metrics_router", "setup_metrics"]
