"""Point resolution for the driver read path."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pcdriver.core.metrics import MetricSourceAdapter
from pcdriver.core.model import (
    STATUS_SUFFIX,
    DriverParameter,
    Point,
    ProbeStatus,
    ReadResult,
    TelemetrySnapshot,
)
from pcdriver.sources.base import Prober

LOGGER = logging.getLogger(__name__)


def _failure_message(exc: BaseException) -> str:
    message = str(exc).strip()
    return message or exc.__class__.__name__


class _BatchSnapshot:
    """Takes at most one telemetry snapshot per read, remembering a failure too."""

    def __init__(self, metrics: MetricSourceAdapter) -> None:
        self.metrics = metrics
        self._value: TelemetrySnapshot | None = None
        self._error: Exception | None = None

    def get(self) -> TelemetrySnapshot:
        if self._error is not None:
            raise self._error
        if self._value is None:
            try:
                self._value = self.metrics.snapshot()
            except Exception as exc:
                self._error = exc
                raise
        return self._value


class PointResolver:
    def __init__(self, metrics: MetricSourceAdapter, prober: Prober) -> None:
        self.metrics = metrics
        self.prober = prober

    def read(self, points: Sequence[Point] | None, parameter: DriverParameter) -> ReadResult:
        """Resolve each point independently into the returned mapping.

        Address points are probed for round-trip time; address-less points are
        looked up as named metrics. A failing point contributes only a
        `<name>-Status` entry and never stops the remaining points. Points that
        match neither rule are skipped.

        All metric points of one call are read from a single telemetry
        snapshot, taken when the first metric point is reached.
        """
        result: ReadResult = {}
        if not points:
            return result

        snapshot = _BatchSnapshot(self.metrics)
        for point in points:
            if point.address:
                self._probe(point, parameter, result)
            elif self.metrics.has_metric(point.name):
                self._lookup(point, snapshot, result)
            else:
                LOGGER.debug("Skipping unknown point '%s'", point.name)
        return result

    def _probe(self, point: Point, parameter: DriverParameter, result: ReadResult) -> None:
        try:
            reply = self.prober.send(point.address, parameter.timeout_ms)
        except Exception as exc:
            LOGGER.warning("Probe of %s for point '%s' failed: %s", point.address, point.name, exc)
            result[point.name + STATUS_SUFFIX] = _failure_message(exc)
            return

        if reply.status == ProbeStatus.SUCCESS:
            result[point.name] = max(int(reply.roundtrip_ms), 0)
        if parameter.retrieve_status:
            result[point.name + STATUS_SUFFIX] = str(reply.status)

    def _lookup(self, point: Point, snapshot: _BatchSnapshot, result: ReadResult) -> None:
        try:
            result[point.name] = self.metrics.get_metric(point.name, snapshot.get())
        except Exception as exc:
            LOGGER.warning("Metric lookup for point '%s' failed: %s", point.name, exc)
            result[point.name + STATUS_SUFFIX] = _failure_message(exc)
