"""Collaborator interfaces for telemetry, probing, network inventory, and OS actions."""

from __future__ import annotations

from typing import Protocol

from pcdriver.core.model import InterfaceInfo, ProbeReply, TelemetrySnapshot


class TelemetrySource(Protocol):
    def snapshot(self) -> TelemetrySnapshot:
        """Return the current machine telemetry values."""


class Prober(Protocol):
    def send(self, address: str, timeout_ms: int) -> ProbeReply:
        """Send one echo request to address and wait up to timeout_ms for the reply."""


class NetworkInventory(Protocol):
    def interfaces(self) -> list[InterfaceInfo]:
        """Enumerate local interfaces with their gateway and DNS server addresses."""


class ActionRunner(Protocol):
    def speak(self, text: str) -> None:
        """Start speaking text without waiting for playback to finish."""

    def reboot(self, timeout: int) -> int:
        """Schedule a reboot after timeout seconds and return the spawned process id."""
