"""PC driver facade used by the public API, the CLI, and hosting gateways."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pcdriver.core.commands import CommandDispatcher
from pcdriver.core.errors import ParameterError
from pcdriver.core.loader import DRIVER_MODES, load_catalog
from pcdriver.core.metrics import MetricSourceAdapter
from pcdriver.core.model import (
    CommandRequest,
    DriverParameter,
    Node,
    Point,
    ReadResult,
    ThingSpec,
    parameter_from_mapping,
)
from pcdriver.core.points import PointResolver
from pcdriver.core.spec_builder import SpecificationBuilder
from pcdriver.sources.actions import SystemActions
from pcdriver.sources.base import ActionRunner, NetworkInventory, Prober, TelemetrySource
from pcdriver.sources.network import SystemNetworkInventory
from pcdriver.sources.ping import SubprocessProber
from pcdriver.sources.telemetry import PsutilTelemetrySource

LOGGER = logging.getLogger(__name__)

DRIVER_NAME = "PC"


class PCDriver:
    """Exposes machine metrics, host reachability, and local services.

    In ``metrics`` mode the specification lists the machine metrics; in
    ``network`` mode it lists the gateways and DNS servers of every local
    interface as latency properties. Reads and control work the same in
    both modes.
    """

    def __init__(
        self,
        mode: str = "metrics",
        *,
        telemetry: TelemetrySource | None = None,
        prober: Prober | None = None,
        network: NetworkInventory | None = None,
        actions: ActionRunner | None = None,
    ) -> None:
        if mode not in DRIVER_MODES:
            raise ParameterError(f"Unknown driver mode '{mode}'. Expected one of: {', '.join(DRIVER_MODES)}")
        self.mode = mode

        loaded = load_catalog()
        self.catalog = loaded.metrics
        self.load_warnings = loaded.warnings

        self.metrics = MetricSourceAdapter(telemetry or PsutilTelemetrySource())
        self.network = network or SystemNetworkInventory()
        self.resolver = PointResolver(self.metrics, prober or SubprocessProber())
        self.dispatcher = CommandDispatcher(actions or SystemActions())
        self.builder = SpecificationBuilder()

    def open(self, parameter: DriverParameter | Mapping[str, Any] | None = None) -> Node:
        if parameter is None:
            parameter = DriverParameter()
        elif isinstance(parameter, Mapping):
            parameter = parameter_from_mapping(parameter)
        LOGGER.debug("Opened %s node: %s", DRIVER_NAME, parameter)
        return Node(driver=DRIVER_NAME, parameter=parameter)

    def close(self, node: Node) -> None:
        LOGGER.debug("Closed %s node", node.driver)

    def read(self, node: Node, points: Sequence[Point] | None) -> ReadResult:
        return self.resolver.read(points, node.parameter)

    def control(self, node: Node, request: CommandRequest | Mapping[str, Any]) -> None:
        if isinstance(request, Mapping):
            request = CommandRequest.from_payload(request)
        self.dispatcher.control(request)

    def get_specification(self) -> ThingSpec:
        services = self.dispatcher.services()
        if self.mode == "network":
            return self.builder.describe_network(self.network, services)
        return self.builder.describe_metrics(self.catalog, services)
