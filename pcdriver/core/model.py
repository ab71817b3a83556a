"""Core data models used across resolver, builder, dispatcher, and CLI."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pcdriver.core.errors import ParameterError

ReadValue = str | int | float
ReadResult = dict[str, ReadValue]

STATUS_SUFFIX = "-Status"


@dataclass(frozen=True)
class Point:
    name: str
    address: str | None = None
    data_type: str | None = None


@dataclass(frozen=True)
class DataSpecs:
    unit: str | None = None
    unit_name: str | None = None
    length: int = 0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.unit:
            out["unit"] = self.unit
        if self.unit_name:
            out["unitName"] = self.unit_name
        if self.length > 0:
            out["length"] = self.length
        return out


@dataclass(frozen=True)
class TypeSpec:
    type: str
    specs: DataSpecs | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        if self.specs is not None:
            specs = self.specs.to_dict()
            if specs:
                out["specs"] = specs
        return out


@dataclass(frozen=True)
class PropertySpec:
    id: str
    name: str
    address: str | None = None
    data_type: TypeSpec | None = None
    access_mode: str = "rw"

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.address:
            out["address"] = self.address
        if self.data_type is not None:
            out["dataType"] = self.data_type.to_dict()
        out["accessMode"] = self.access_mode
        return out


@dataclass(frozen=True)
class ServiceSpec:
    id: str
    name: str
    input_data: tuple[PropertySpec, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        inputs = []
        for param in self.input_data:
            entry: dict[str, Any] = {"id": param.id, "name": param.name}
            if param.data_type is not None:
                entry["dataType"] = param.data_type.to_dict()
            inputs.append(entry)
        return {"id": self.id, "name": self.name, "inputData": inputs}


@dataclass(frozen=True)
class ThingSpec:
    properties: tuple[PropertySpec, ...] = ()
    services: tuple[ServiceSpec, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.properties:
            out["properties"] = [p.to_dict() for p in self.properties]
        if self.services:
            out["services"] = [s.to_dict() for s in self.services]
        return out


@dataclass(frozen=True)
class CommandRequest:
    name: str
    input_data: Any = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> CommandRequest:
        """Build a request from a decoded service payload.

        Accepts both camelCase and PascalCase keys, and `value` as an alias
        for the input.
        """
        name = payload.get("name", payload.get("Name"))
        if not isinstance(name, str):
            name = ""
        for key in ("inputData", "InputData", "value"):
            if key in payload:
                return cls(name=name, input_data=payload[key])
        return cls(name=name)


@dataclass(frozen=True)
class DriverParameter:
    timeout_ms: int = 3000
    retrieve_status: bool = False


def parameter_from_mapping(raw: Mapping[str, Any]) -> DriverParameter:
    """Coerce a loosely-typed node parameter mapping into a DriverParameter."""
    timeout = raw.get("timeout", raw.get("timeout_ms", DriverParameter.timeout_ms))
    try:
        timeout_ms = int(timeout)
    except (TypeError, ValueError) as exc:
        raise ParameterError(f"timeout must be an integer number of milliseconds, got {timeout!r}") from exc
    if timeout_ms <= 0:
        raise ParameterError(f"timeout must be positive, got {timeout_ms}")

    retrieve = raw.get("retrieve_status", raw.get("retrieveStatus", False))
    if isinstance(retrieve, str):
        lowered = retrieve.strip().lower()
        if lowered in {"true", "1", "yes"}:
            retrieve = True
        elif lowered in {"false", "0", "no", ""}:
            retrieve = False
        else:
            raise ParameterError(f"retrieve_status must be boolean true/false, got {retrieve!r}")
    return DriverParameter(timeout_ms=timeout_ms, retrieve_status=bool(retrieve))


@dataclass(frozen=True)
class Node:
    driver: str
    parameter: DriverParameter = field(default_factory=DriverParameter)


class ProbeStatus(str, Enum):
    SUCCESS = "Success"
    TIMED_OUT = "TimedOut"
    DESTINATION_HOST_UNREACHABLE = "DestinationHostUnreachable"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProbeReply:
    status: ProbeStatus
    roundtrip_ms: int = 0


@dataclass(frozen=True)
class TelemetrySnapshot:
    cpu_rate: float
    memory: int
    available_memory: int
    uplink_speed: int
    downlink_speed: int
    temperature: float
    battery: float


@dataclass(frozen=True)
class MetricDescriptor:
    id: str
    name: str
    type: str
    unit: str | None = None
    unit_name: str | None = None


@dataclass(frozen=True)
class InterfaceInfo:
    name: str
    gateways: tuple[str, ...] = ()
    dns_servers: tuple[str, ...] = ()
