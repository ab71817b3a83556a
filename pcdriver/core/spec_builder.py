"""Self-description: builds ThingSpec snapshots from metrics, services, and network topology."""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Sequence
from dataclasses import replace

import psutil

from pcdriver.core.model import (
    DataSpecs,
    MetricDescriptor,
    PropertySpec,
    ServiceSpec,
    ThingSpec,
    TypeSpec,
)
from pcdriver.sources.base import NetworkInventory

LOGGER = logging.getLogger(__name__)

_LATENCY_SPECS = DataSpecs(unit="ms", unit_name="milliseconds")


def create_property(
    id: str,
    name: str,
    type: str | None,
    length: int = 0,
    address: str | None = None,
) -> PropertySpec:
    """Quickly create a property descriptor."""
    data_type = None
    if type is not None:
        data_type = TypeSpec(type=type, specs=DataSpecs(length=length) if length > 0 else None)
    return PropertySpec(id=id, name=name, address=address, data_type=data_type)


def _is_ipv4(address: str) -> bool:
    try:
        return ipaddress.ip_address(address.split("%", 1)[0]).version == 4
    except ValueError:
        return False


class _AddressNamer:
    """Assigns Base, Base2, Base3... to distinct addresses in first-seen order."""

    def __init__(self, base: str) -> None:
        self.base = base
        self.seen: set[str] = set()

    def claim(self, address: str) -> str | None:
        if address in self.seen:
            return None
        self.seen.add(address)
        index = len(self.seen)
        return self.base if index == 1 else f"{self.base}{index}"


class SpecificationBuilder:
    def describe_metrics(
        self,
        catalog: Sequence[MetricDescriptor],
        services: Sequence[ServiceSpec] = (),
    ) -> ThingSpec:
        properties = []
        for metric in catalog:
            specs = None
            if metric.unit or metric.unit_name:
                specs = DataSpecs(unit=metric.unit, unit_name=metric.unit_name)
            properties.append(
                PropertySpec(
                    id=metric.id,
                    name=metric.name,
                    data_type=TypeSpec(type=metric.type, specs=specs),
                    access_mode="r",
                )
            )
        return ThingSpec(properties=tuple(properties), services=tuple(services))

    def describe_network(
        self,
        inventory: NetworkInventory,
        services: Sequence[ServiceSpec] = (),
    ) -> ThingSpec:
        try:
            interfaces = inventory.interfaces()
        except (OSError, psutil.Error) as exc:
            LOGGER.warning("Network interface enumeration failed: %s", exc)
            interfaces = []

        gateways = _AddressNamer("Gateway")
        dns = _AddressNamer("Dns")
        properties: list[PropertySpec] = []
        for iface in interfaces:
            for address in iface.gateways:
                name = gateways.claim(address)
                if name is not None:
                    properties.append(_latency_property(name, f"{iface.name} gateway", address))
            for address in iface.dns_servers:
                if not _is_ipv4(address):
                    continue
                name = dns.claim(address)
                if name is not None:
                    properties.append(_latency_property(name, f"{iface.name} DNS", address))

        return ThingSpec(properties=tuple(properties), services=tuple(services))


def _latency_property(id: str, name: str, address: str) -> PropertySpec:
    prop = create_property(id, name, "int", 0, address)
    return replace(prop, data_type=TypeSpec(type="int", specs=_LATENCY_SPECS))
