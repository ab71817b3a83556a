"""Machine telemetry collected through psutil."""

from __future__ import annotations

import logging
import threading
import time

import psutil

from pcdriver.core.model import TelemetrySnapshot

LOGGER = logging.getLogger(__name__)


class PsutilTelemetrySource:
    """Telemetry source backed by psutil.

    Link speeds are byte rates derived from the interface counters seen on the
    previous snapshot, so the first snapshot always reports 0 for both.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_net: tuple[float, int, int] | None = None
        # Primes cpu_percent so the first non-blocking sample is meaningful.
        psutil.cpu_percent(interval=None)

    def snapshot(self) -> TelemetrySnapshot:
        mem = psutil.virtual_memory()
        uplink, downlink = self._link_speeds()
        return TelemetrySnapshot(
            cpu_rate=round(psutil.cpu_percent(interval=None) / 100, 4),
            memory=int(mem.total),
            available_memory=int(mem.available),
            uplink_speed=uplink,
            downlink_speed=downlink,
            temperature=_temperature(),
            battery=_battery(),
        )

    def _link_speeds(self) -> tuple[int, int]:
        counters = psutil.net_io_counters()
        if counters is None:
            return 0, 0
        now = time.monotonic()
        with self._lock:
            last = self._last_net
            self._last_net = (now, counters.bytes_sent, counters.bytes_recv)
        if last is None:
            return 0, 0
        elapsed = now - last[0]
        if elapsed <= 0:
            return 0, 0
        uplink = max(counters.bytes_sent - last[1], 0) / elapsed
        downlink = max(counters.bytes_recv - last[2], 0) / elapsed
        return int(uplink), int(downlink)


def _temperature() -> float:
    reader = getattr(psutil, "sensors_temperatures", None)
    if reader is None:
        return 0.0
    try:
        readings = reader()
    except (OSError, RuntimeError) as exc:
        LOGGER.debug("Temperature sensors unavailable: %s", exc)
        return 0.0
    values = [entry.current for entries in readings.values() for entry in entries if entry.current is not None]
    return round(max(values), 1) if values else 0.0


def _battery() -> float:
    reader = getattr(psutil, "sensors_battery", None)
    if reader is None:
        return 0.0
    try:
        battery = reader()
    except (OSError, RuntimeError) as exc:
        LOGGER.debug("Battery sensor unavailable: %s", exc)
        return 0.0
    if battery is None:
        return 0.0
    return round(battery.percent / 100, 4)
