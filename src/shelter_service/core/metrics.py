from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass


@dataclass(frozen=True)
class StageDuration:
    stage: str
    duration_ms: float


class InMemoryShelterMetricsCollector:
    def __init__(self) -> None:
        self.stage_durations: list[StageDuration] = []
        self.results_total: dict[tuple[str, str], int] = defaultdict(int)
        self.endpoint_errors_total: dict[tuple[str, str], int] = defaultdict(int)
        self.fetched_records = 0
        self.cache_saves = 0

    def observe_stage_duration(self, stage: str, duration_ms: float) -> None:
        self.stage_durations.append(StageDuration(stage=stage, duration_ms=duration_ms))

    def increment_result(self, operation: str, source: str) -> None:
        self.results_total[(operation, source)] += 1

    def increment_endpoint_error(self, endpoint: str, reason: str) -> None:
        self.endpoint_errors_total[(endpoint, reason)] += 1

    def add_fetched_records(self, count: int) -> None:
        if count <= 0:
            return
        self.fetched_records += count

    def increment_cache_save(self) -> None:
        self.cache_saves += 1
