from __future__ import annotations

import subprocess
from pathlib import Path

import psutil
import pytest

from pcdriver.sources import network
from pcdriver.sources.network import (
    SystemNetworkInventory,
    _parse_ip_route,
    _parse_resolv_conf,
    _parse_resolvectl,
    _parse_route_table,
    _run_command,
)

ROUTE_TABLE = """Iface\tDestination\tGateway \tFlags\tRefCnt\tUse\tMetric\tMask\t\tMTU\tWindow\tIRTT
eth0\t00000000\t0101A8C0\t0003\t0\t0\t100\t00000000\t0\t0\t0
eth0\t0001A8C0\t00000000\t0001\t0\t0\t100\t00FFFFFF\t0\t0\t0
wlan0\t00000000\t0100000A\t0003\t0\t0\t600\t00000000\t0\t0\t0
"""

RESOLVECTL = """Global: 1.1.1.1
Link 2 (eth0): 192.168.1.1 fe80::1
Link 3 (wlan0):
"""


def _cp(cmd: list[str], rc: int, stdout: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(cmd, rc, stdout=stdout, stderr="")


def test_parse_route_table() -> None:
    assert _parse_route_table(ROUTE_TABLE) == {"eth0": ["192.168.1.1"], "wlan0": ["10.0.0.1"]}


def test_parse_ip_route() -> None:
    content = "default via 192.168.1.1 dev eth0 proto dhcp metric 100\ndefault via 10.0.0.1 dev wlan0\n"
    assert _parse_ip_route(content) == {"eth0": ["192.168.1.1"], "wlan0": ["10.0.0.1"]}


def test_parse_resolvectl() -> None:
    link_dns, global_dns = _parse_resolvectl(RESOLVECTL)
    assert link_dns == {"eth0": ["192.168.1.1", "fe80::1"]}
    assert global_dns == ["1.1.1.1"]


def test_parse_resolvectl_strips_server_names_and_ports() -> None:
    content = (
        "Global: 1.1.1.1#cloudflare-dns.com 9.9.9.9:853 [2606:4700::1111]:853#one.one.one.one\n"
        "Link 2 (eth0): 192.168.1.1 fe80::1\n"
    )

    link_dns, global_dns = _parse_resolvectl(content)

    assert global_dns == ["1.1.1.1", "9.9.9.9", "2606:4700::1111"]
    assert link_dns == {"eth0": ["192.168.1.1", "fe80::1"]}


def test_parse_resolv_conf_ignores_comments_and_duplicates() -> None:
    content = "# generated\nnameserver 8.8.8.8\nnameserver 8.8.8.8 # again\nsearch lan\nnameserver 9.9.9.9\n"
    assert _parse_resolv_conf(content) == ["8.8.8.8", "9.9.9.9"]


def test_inventory_combines_routes_and_dns(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    route_table = tmp_path / "route"
    route_table.write_text(ROUTE_TABLE, encoding="utf-8")

    monkeypatch.setattr(psutil, "net_if_addrs", lambda: {"lo": [], "eth0": [], "wlan0": []})
    monkeypatch.setattr(network, "_run_command", lambda cmd: _cp(cmd, 0, stdout=RESOLVECTL))

    inventory = SystemNetworkInventory(route_table=route_table, resolv_conf=tmp_path / "missing")
    interfaces = inventory.interfaces()

    assert [i.name for i in interfaces] == ["lo", "eth0", "wlan0"]
    lo, eth0, wlan0 = interfaces
    assert lo.gateways == () and lo.dns_servers == ()
    assert eth0.gateways == ("192.168.1.1",)
    assert eth0.dns_servers == ("192.168.1.1", "fe80::1", "1.1.1.1")
    assert wlan0.dns_servers == ("1.1.1.1",)


def test_inventory_falls_back_to_ip_route_and_resolv_conf(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    resolv_conf = tmp_path / "resolv.conf"
    resolv_conf.write_text("nameserver 8.8.8.8\n", encoding="utf-8")

    def fake_run(cmd):
        if cmd[0] == "ip":
            return _cp(cmd, 0, stdout="default via 192.168.0.254 dev enp3s0\n")
        return None

    monkeypatch.setattr(psutil, "net_if_addrs", lambda: {"lo": [], "enp3s0": []})
    monkeypatch.setattr(network, "_run_command", fake_run)

    inventory = SystemNetworkInventory(route_table=tmp_path / "absent", resolv_conf=resolv_conf)
    lo, enp = inventory.interfaces()

    assert lo.dns_servers == ()
    assert enp.gateways == ("192.168.0.254",)
    assert enp.dns_servers == ("8.8.8.8",)


def test_inventory_without_routes_assigns_dns_to_non_loopback(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    resolv_conf = tmp_path / "resolv.conf"
    resolv_conf.write_text("nameserver 9.9.9.9\n", encoding="utf-8")

    monkeypatch.setattr(psutil, "net_if_addrs", lambda: {"lo": [], "eth0": []})
    monkeypatch.setattr(network, "_run_command", lambda cmd: None)

    inventory = SystemNetworkInventory(route_table=tmp_path / "absent", resolv_conf=resolv_conf)
    lo, eth0 = inventory.interfaces()

    assert lo.dns_servers == ()
    assert eth0.dns_servers == ("9.9.9.9",)
    assert eth0.gateways == ()


def test_run_command_gives_up_on_hung_command(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(kwargs)
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", fake_run)

    assert _run_command(["resolvectl", "dns"]) is None
    assert calls[0]["timeout"] > 0


def test_run_command_missing_binary_returns_none(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(subprocess, "run", fake_run)

    assert _run_command(["resolvectl", "dns"]) is None
