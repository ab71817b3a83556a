"""Local network interface inventory: gateways and DNS servers per interface."""

from __future__ import annotations

import logging
import re
import socket
import struct
import subprocess
from collections.abc import Sequence
from pathlib import Path

import psutil

from pcdriver.core.model import InterfaceInfo

LOGGER = logging.getLogger(__name__)

_RTF_GATEWAY = 0x2
_IP_ROUTE_RE = re.compile(r"\bvia\s+(\S+).*?\bdev\s+(\S+)")
_RESOLVECTL_LINK_RE = re.compile(r"^Link\s+\d+\s+\(([^)]+)\):\s*(.*)$")
_RESOLVECTL_GLOBAL_RE = re.compile(r"^Global:\s*(.*)$")
_COMMAND_TIMEOUT_S = 5


class SystemNetworkInventory:
    def __init__(
        self,
        *,
        route_table: Path = Path("/proc/net/route"),
        resolv_conf: Path = Path("/etc/resolv.conf"),
    ) -> None:
        self.route_table = route_table
        self.resolv_conf = resolv_conf

    def interfaces(self) -> list[InterfaceInfo]:
        names = list(psutil.net_if_addrs().keys())
        gateways = self._gateways()
        link_dns, global_dns = self._dns_servers()

        # Global resolvers belong to whichever interfaces actually route traffic.
        routed = [name for name in names if gateways.get(name)]
        if not routed:
            routed = [name for name in names if not _is_loopback(name)]

        result: list[InterfaceInfo] = []
        for name in names:
            dns = list(link_dns.get(name, ()))
            if name in routed:
                dns.extend(d for d in global_dns if d not in dns)
            result.append(
                InterfaceInfo(
                    name=name,
                    gateways=tuple(gateways.get(name, ())),
                    dns_servers=tuple(dns),
                )
            )
        return result

    def _gateways(self) -> dict[str, list[str]]:
        if self.route_table.exists():
            try:
                return _parse_route_table(self.route_table.read_text(encoding="utf-8"))
            except OSError as exc:
                LOGGER.warning("Could not read %s: %s", self.route_table, exc)

        result = _run_command(["ip", "route", "show", "default"])
        if result is None or result.returncode != 0:
            return {}
        return _parse_ip_route(result.stdout)

    def _dns_servers(self) -> tuple[dict[str, list[str]], list[str]]:
        result = _run_command(["resolvectl", "dns"])
        if result is not None and result.returncode == 0:
            link_dns, global_dns = _parse_resolvectl(result.stdout)
            if link_dns or global_dns:
                return link_dns, global_dns

        if not self.resolv_conf.exists():
            return {}, []
        try:
            content = self.resolv_conf.read_text(encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("Could not read %s: %s", self.resolv_conf, exc)
            return {}, []
        return {}, _parse_resolv_conf(content)


def _parse_route_table(content: str) -> dict[str, list[str]]:
    gateways: dict[str, list[str]] = {}
    for line in content.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 4:
            continue
        iface, _, gateway_hex, flags_hex = fields[:4]
        try:
            flags = int(flags_hex, 16)
            packed = struct.pack("<L", int(gateway_hex, 16))
        except (ValueError, struct.error):
            continue
        if not flags & _RTF_GATEWAY:
            continue
        address = socket.inet_ntoa(packed)
        if address == "0.0.0.0":
            continue
        entries = gateways.setdefault(iface, [])
        if address not in entries:
            entries.append(address)
    return gateways


def _parse_ip_route(content: str) -> dict[str, list[str]]:
    gateways: dict[str, list[str]] = {}
    for line in content.splitlines():
        match = _IP_ROUTE_RE.search(line)
        if not match:
            continue
        address, iface = match.group(1), match.group(2)
        entries = gateways.setdefault(iface, [])
        if address not in entries:
            entries.append(address)
    return gateways


def _parse_resolvectl(content: str) -> tuple[dict[str, list[str]], list[str]]:
    link_dns: dict[str, list[str]] = {}
    global_dns: list[str] = []
    for line in content.splitlines():
        line = line.strip()
        link = _RESOLVECTL_LINK_RE.match(line)
        if link:
            servers = _server_addresses(link.group(2))
            if servers:
                link_dns[link.group(1)] = servers
            continue
        glob = _RESOLVECTL_GLOBAL_RE.match(line)
        if glob:
            global_dns.extend(_server_addresses(glob.group(1)))
    return link_dns, global_dns


def _server_addresses(field: str) -> list[str]:
    """Bare addresses from a resolvectl server list.

    Servers may carry a `#server-name` suffix and a port, either `1.1.1.1:853`
    or `[2606:4700::1111]:853`.
    """
    addresses: list[str] = []
    for token in field.split():
        address = token.split("#", 1)[0]
        if address.startswith("["):
            address = address[1:].split("]", 1)[0]
        elif address.count(":") == 1:
            address = address.split(":", 1)[0]
        if address:
            addresses.append(address)
    return addresses


def _parse_resolv_conf(content: str) -> list[str]:
    servers: list[str] = []
    for line in content.splitlines():
        fields = line.split("#", 1)[0].split()
        if len(fields) >= 2 and fields[0] == "nameserver" and fields[1] not in servers:
            servers.append(fields[1])
    return servers


def _is_loopback(name: str) -> bool:
    return name == "lo" or name.lower().startswith("loopback")


def _run_command(cmd: Sequence[str]) -> subprocess.CompletedProcess[str] | None:
    try:
        return subprocess.run(
            cmd,
            check=False,
            capture_output=True,
            text=True,
            timeout=_COMMAND_TIMEOUT_S,
        )
    except FileNotFoundError:
        return None
    except subprocess.TimeoutExpired:
        LOGGER.warning("%s did not finish within %ss", cmd[0], _COMMAND_TIMEOUT_S)
        return None
