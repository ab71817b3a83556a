from __future__ import annotations

import pytest

from pcdriver.core.commands import CommandDispatcher
from pcdriver.core.errors import CommandInputError, CommandNotImplementedError
from pcdriver.core.model import CommandRequest

from .fakes import FakeActions


def test_speak_invokes_action_once() -> None:
    actions = FakeActions()
    CommandDispatcher(actions).control(CommandRequest(name="Speak", input_data="hello"))

    assert actions.spoken == ["hello"]
    assert actions.reboots == []


def test_reboot_parses_integer_timeout() -> None:
    actions = FakeActions()
    CommandDispatcher(actions).control(CommandRequest(name="Reboot", input_data="15"))

    assert actions.reboots == [15]


def test_reboot_accepts_mapping_input() -> None:
    actions = FakeActions()
    CommandDispatcher(actions).control(CommandRequest(name="Reboot", input_data={"timeout": " 30 "}))

    assert actions.reboots == [30]


@pytest.mark.parametrize("name", ["Nonexistent", "", "speak"])
def test_unregistered_name_raises_without_side_effect(name: str) -> None:
    actions = FakeActions()
    with pytest.raises(CommandNotImplementedError):
        CommandDispatcher(actions).control(CommandRequest(name=name, input_data="x"))

    assert actions.spoken == []
    assert actions.reboots == []


def test_not_implemented_is_also_builtin_not_implemented() -> None:
    with pytest.raises(NotImplementedError):
        CommandDispatcher(FakeActions()).control(CommandRequest(name="Shutdown"))


@pytest.mark.parametrize("value", ["soon", None, True, "1.5"])
def test_bad_reboot_input_aborts_before_action(value) -> None:
    actions = FakeActions()
    with pytest.raises(CommandInputError):
        CommandDispatcher(actions).control(CommandRequest(name="Reboot", input_data=value))

    assert actions.reboots == []


def test_missing_mapping_input_is_rejected() -> None:
    with pytest.raises(CommandInputError):
        CommandDispatcher(FakeActions()).control(CommandRequest(name="Speak", input_data={"words": "hi"}))


def test_speak_with_no_input_speaks_empty_text() -> None:
    actions = FakeActions()
    CommandDispatcher(actions).control(CommandRequest(name="Speak"))

    assert actions.spoken == [""]


def test_services_describe_registry_in_order() -> None:
    services = CommandDispatcher(FakeActions()).services()

    assert [s.id for s in services] == ["Speak", "Reboot"]
    assert [(p.id, p.data_type.type) for p in services[0].input_data] == [("text", "string")]
    assert [(p.id, p.data_type.type) for p in services[1].input_data] == [("timeout", "int")]
    assert all(p.address is None for s in services for p in s.input_data)


def test_request_from_payload_accepts_both_key_styles() -> None:
    assert CommandRequest.from_payload({"Name": "Speak", "InputData": "hi"}) == CommandRequest("Speak", "hi")
    assert CommandRequest.from_payload({"name": "Reboot", "value": 5}) == CommandRequest("Reboot", 5)
    assert CommandRequest.from_payload({}) == CommandRequest("")
