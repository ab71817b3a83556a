from __future__ import annotations

import pytest

from pcdriver.api import Client, CommandNotImplementedError, Point, ThingSpec

from .fakes import FakeActions, FakeNetwork, FakeProber, FakeTelemetry


def _client(**kwargs) -> Client:
    return Client(
        kwargs.pop("parameter", None),
        telemetry=FakeTelemetry(),
        prober=FakeProber(),
        network=FakeNetwork(),
        actions=kwargs.pop("actions", FakeActions()),
        **kwargs,
    )


def test_public_client_lists_metrics() -> None:
    assert "CpuRate" in _client().list_metrics()


def test_public_client_reads_names_and_points() -> None:
    client = _client(parameter={"retrieve_status": True})

    result = client.read(["cpurate", Point(name="Gw", address="192.168.1.1")])

    assert result == {"cpurate": 0.25, "Gw": 3, "Gw-Status": "Success"}


def test_public_client_control() -> None:
    actions = FakeActions()
    client = _client(actions=actions)

    client.control("Speak", "hello")

    assert actions.spoken == ["hello"]
    with pytest.raises(CommandNotImplementedError):
        client.control("Nonexistent")


def test_public_client_describe() -> None:
    spec = _client(mode="network").describe()

    assert isinstance(spec, ThingSpec)
    assert spec.properties == ()
    assert len(spec.services) == 2
