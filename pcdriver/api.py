"""Stable public API for hosting pcdriver inside a gateway or script.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pcdriver.core.driver import PCDriver
from pcdriver.core.errors import (
    ActionError,
    CatalogLoadError,
    CatalogValidationError,
    CommandInputError,
    CommandNotImplementedError,
    ParameterError,
    PCDriverError,
    ProbeError,
    ProbeResolutionError,
    UnknownMetricError,
)
from pcdriver.core.model import (
    CommandRequest,
    DataSpecs,
    DriverParameter,
    Node,
    Point,
    ProbeReply,
    ProbeStatus,
    PropertySpec,
    ReadResult,
    ServiceSpec,
    ThingSpec,
    TypeSpec,
)
from pcdriver.core.spec_builder import create_property
from pcdriver.sources.base import ActionRunner, NetworkInventory, Prober, TelemetrySource

__all__ = [
    "PCDriverError",
    "ParameterError",
    "CatalogLoadError",
    "CatalogValidationError",
    "UnknownMetricError",
    "CommandNotImplementedError",
    "CommandInputError",
    "ProbeError",
    "ProbeResolutionError",
    "ActionError",
    "CommandRequest",
    "DataSpecs",
    "DriverParameter",
    "Node",
    "Point",
    "ProbeReply",
    "ProbeStatus",
    "PropertySpec",
    "ReadResult",
    "ServiceSpec",
    "ThingSpec",
    "TypeSpec",
    "PCDriver",
    "create_property",
    "Client",
]


class Client:
    """Public client bound to a single opened driver node.

    A `Client` instance owns a `PCDriver` and the node opened with the given
    parameters, so callers can read, control, and describe without passing
    the node around.
    """

    def __init__(
        self,
        parameter: DriverParameter | Mapping[str, Any] | None = None,
        *,
        mode: str = "metrics",
        telemetry: TelemetrySource | None = None,
        prober: Prober | None = None,
        network: NetworkInventory | None = None,
        actions: ActionRunner | None = None,
    ) -> None:
        self._driver = PCDriver(
            mode,
            telemetry=telemetry,
            prober=prober,
            network=network,
            actions=actions,
        )
        self._node = self._driver.open(parameter)

    @property
    def node(self) -> Node:
        return self._node

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._driver.load_warnings

    def list_metrics(self) -> tuple[str, ...]:
        return self._driver.metrics.list_metrics()

    def read(self, points: Sequence[Point | str]) -> ReadResult:
        resolved = [Point(name=p) if isinstance(p, str) else p for p in points]
        return self._driver.read(self._node, resolved)

    def control(self, name: str, input_data: Any = None) -> None:
        self._driver.control(self._node, CommandRequest(name=name, input_data=input_data))

    def describe(self) -> ThingSpec:
        return self._driver.get_specification()

    def close(self) -> None:
        self._driver.close(self._node)
