from __future__ import annotations

from pcdriver.core.errors import ProbeResolutionError
from pcdriver.core.model import InterfaceInfo, ProbeReply, ProbeStatus, TelemetrySnapshot

SNAPSHOT = TelemetrySnapshot(
    cpu_rate=0.25,
    memory=16 * 1024**3,
    available_memory=8 * 1024**3,
    uplink_speed=1200,
    downlink_speed=34000,
    temperature=48.5,
    battery=0.9,
)


class FakeTelemetry:
    def __init__(self, snapshot: TelemetrySnapshot = SNAPSHOT) -> None:
        self.snapshot_value = snapshot
        self.calls = 0

    def snapshot(self) -> TelemetrySnapshot:
        self.calls += 1
        return self.snapshot_value


class FakeProber:
    """Replies by address: known hosts succeed, 'unreachable.*' fails, others raise."""

    def __init__(self, replies: dict[str, ProbeReply] | None = None) -> None:
        self.replies = replies or {"192.168.1.1": ProbeReply(status=ProbeStatus.SUCCESS, roundtrip_ms=3)}
        self.calls: list[tuple[str, int]] = []

    def send(self, address: str, timeout_ms: int) -> ProbeReply:
        self.calls.append((address, timeout_ms))
        if address in self.replies:
            return self.replies[address]
        if address.startswith("unreachable"):
            return ProbeReply(status=ProbeStatus.TIMED_OUT)
        raise ProbeResolutionError(f"ping: {address}: Name or service not known")


class FakeNetwork:
    def __init__(self, interfaces: list[InterfaceInfo] | None = None) -> None:
        self.items = interfaces or []

    def interfaces(self) -> list[InterfaceInfo]:
        return list(self.items)


class FakeActions:
    def __init__(self) -> None:
        self.spoken: list[str] = []
        self.reboots: list[int] = []

    def speak(self, text: str) -> None:
        self.spoken.append(text)

    def reboot(self, timeout: int) -> int:
        self.reboots.append(timeout)
        return 4242
