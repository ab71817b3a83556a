"""Named-metric lookup over a telemetry source."""

from __future__ import annotations

from collections.abc import Callable

from pcdriver.core.errors import UnknownMetricError
from pcdriver.core.model import ReadValue, TelemetrySnapshot
from pcdriver.sources.base import TelemetrySource

_EXTRACTORS: dict[str, Callable[[TelemetrySnapshot], ReadValue]] = {
    "CpuRate": lambda s: s.cpu_rate,
    "Memory": lambda s: s.memory,
    "AvailableMemory": lambda s: s.available_memory,
    "UplinkSpeed": lambda s: s.uplink_speed,
    "DownlinkSpeed": lambda s: s.downlink_speed,
    "Temperature": lambda s: s.temperature,
    "Battery": lambda s: s.battery,
}

METRIC_NAMES: tuple[str, ...] = tuple(_EXTRACTORS)
_CANONICAL = {name.lower(): name for name in METRIC_NAMES}


def canonical_metric_name(name: str) -> str | None:
    return _CANONICAL.get(name.strip().lower())


class MetricSourceAdapter:
    """Exposes telemetry snapshot fields as case-insensitive named metrics.

    Without an explicit snapshot every lookup takes a fresh one; nothing is
    cached here. Callers reading several metrics together pass one snapshot
    so rate metrics share the same sampling window.
    """

    def __init__(self, source: TelemetrySource) -> None:
        self.source = source

    def list_metrics(self) -> tuple[str, ...]:
        return METRIC_NAMES

    def has_metric(self, name: str) -> bool:
        return canonical_metric_name(name) is not None

    def snapshot(self) -> TelemetrySnapshot:
        return self.source.snapshot()

    def get_metric(self, name: str, snapshot: TelemetrySnapshot | None = None) -> ReadValue:
        canonical = canonical_metric_name(name)
        if canonical is None:
            available = ", ".join(METRIC_NAMES)
            raise UnknownMetricError(f"Unknown metric '{name}'. Available: {available}")
        if snapshot is None:
            snapshot = self.source.snapshot()
        return _EXTRACTORS[canonical](snapshot)
