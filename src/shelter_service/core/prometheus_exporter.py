from __future__ import annotations

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from shelter_service.core.metrics import InMemoryShelterMetricsCollector


class ShelterPrometheusExporter:
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._stage_duration = Gauge(
            "shelter_stage_duration_ms",
            "Last observed shelter pipeline stage duration in milliseconds",
            labelnames=("stage",),
            registry=self._registry,
        )
        self._results_total = Gauge(
            "shelter_results_total",
            "Shelter results grouped by operation and provenance",
            labelnames=("operation", "source"),
            registry=self._registry,
        )
        self._endpoint_errors_total = Gauge(
            "shelter_endpoint_errors_total",
            "Overpass endpoint failures grouped by endpoint and reason",
            labelnames=("endpoint", "reason"),
            registry=self._registry,
        )
        self._fetched_records = Gauge(
            "shelter_fetched_records_total",
            "Normalized facility records fetched from the remote source",
            registry=self._registry,
        )
        self._cache_saves = Gauge(
            "shelter_cache_saves_total",
            "Successful shelter cache writes",
            registry=self._registry,
        )

    def render(self, metrics: InMemoryShelterMetricsCollector) -> str:
        latest_by_stage: dict[str, float] = {}
        for item in metrics.stage_durations:
            latest_by_stage[item.stage] = item.duration_ms
        for stage, duration in latest_by_stage.items():
            self._stage_duration.labels(stage=stage).set(duration)
        for (operation, source), count in metrics.results_total.items():
            self._results_total.labels(operation=operation, source=source).set(count)
        for (endpoint, reason), count in metrics.endpoint_errors_total.items():
            self._endpoint_errors_total.labels(endpoint=endpoint, reason=reason).set(count)
        self._fetched_records.set(metrics.fetched_records)
        self._cache_saves.set(metrics.cache_saves)
        return generate_latest(self._registry).decode("utf-8")
