"""Command dispatch for the driver control path."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pcdriver.core.errors import CommandInputError, CommandNotImplementedError
from pcdriver.core.model import CommandRequest, PropertySpec, ServiceSpec, TypeSpec
from pcdriver.sources.base import ActionRunner

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceParam:
    id: str
    name: str
    type: str


@dataclass(frozen=True)
class ServiceHandler:
    id: str
    name: str
    params: tuple[ServiceParam, ...]
    invoke: Callable[[ActionRunner, tuple[Any, ...]], Any]

    def spec(self) -> ServiceSpec:
        return ServiceSpec(
            id=self.id,
            name=self.name,
            input_data=tuple(
                PropertySpec(id=p.id, name=p.name, data_type=TypeSpec(type=p.type)) for p in self.params
            ),
        )


def _speak(actions: ActionRunner, args: tuple[Any, ...]) -> None:
    actions.speak(args[0])


def _reboot(actions: ActionRunner, args: tuple[Any, ...]) -> int:
    return actions.reboot(args[0])


SERVICES: tuple[ServiceHandler, ...] = (
    ServiceHandler(
        id="Speak",
        name="Speak text",
        params=(ServiceParam(id="text", name="Text", type="string"),),
        invoke=_speak,
    ),
    ServiceHandler(
        id="Reboot",
        name="Reboot after delay",
        params=(ServiceParam(id="timeout", name="Delay (s)", type="int"),),
        invoke=_reboot,
    ),
)


def _parse_value(param: ServiceParam, value: Any, service_id: str) -> Any:
    if param.type == "string":
        return "" if value is None else str(value)
    if param.type == "int":
        if isinstance(value, bool):
            raise CommandInputError(f"{service_id}.{param.id} must be an integer, got {value!r}")
        if isinstance(value, int):
            return value
        try:
            return int(value.strip() if isinstance(value, str) else value)
        except (TypeError, ValueError) as exc:
            raise CommandInputError(f"{service_id}.{param.id} must be an integer, got {value!r}") from exc
    raise CommandInputError(f"{service_id}.{param.id} has unsupported type '{param.type}'")


def parse_inputs(handler: ServiceHandler, input_data: Any) -> tuple[Any, ...]:
    """Split a request input into the positional arguments the handler expects."""
    if isinstance(input_data, Mapping):
        values = []
        for param in handler.params:
            if param.id not in input_data:
                raise CommandInputError(f"{handler.id} is missing input '{param.id}'")
            values.append(_parse_value(param, input_data[param.id], handler.id))
        return tuple(values)

    if len(handler.params) != 1:
        expected = ", ".join(p.id for p in handler.params)
        raise CommandInputError(f"{handler.id} expects a mapping with inputs: {expected}")
    return (_parse_value(handler.params[0], input_data, handler.id),)


class CommandDispatcher:
    def __init__(self, actions: ActionRunner, services: tuple[ServiceHandler, ...] = SERVICES) -> None:
        self.actions = actions
        self._handlers = {handler.id: handler for handler in services}

    def services(self) -> tuple[ServiceSpec, ...]:
        return tuple(handler.spec() for handler in self._handlers.values())

    def control(self, request: CommandRequest) -> None:
        if not request.name:
            raise CommandNotImplementedError("Control request has no service name")
        handler = self._handlers.get(request.name)
        if handler is None:
            available = ", ".join(self._handlers)
            raise CommandNotImplementedError(
                f"Service '{request.name}' is not implemented. Available: {available}"
            )

        args = parse_inputs(handler, request.input_data)
        LOGGER.info("Invoking %s%r", handler.id, args)
        outcome = handler.invoke(self.actions, args)
        if outcome is not None:
            LOGGER.debug("%s returned %r", handler.id, outcome)
