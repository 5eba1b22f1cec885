"""Controller forwarding state interface values to command interfaces."""

from __future__ import annotations

import logging
import math

from .interfaces import (
    ControllerError,
    Interface,
    InterfaceConfiguration,
    InterfaceConfigurationType,
    get_ordered_interfaces,
)

_log = logging.getLogger(__name__)


class JointStateEstimator:
    """Copies each state interface into the command interface of the same rank."""

    def __init__(self, command_interfaces, state_interfaces) -> None:
        self._param_commands = list(command_interfaces)
        self._param_states = list(state_interfaces)
        self.command_interface_names = list(self._param_commands)
        self.state_interface_names = list(self._param_states)
        self._ordered_commands: list[Interface] = []
        self._ordered_states: list[Interface] = []

    def command_interface_configuration(self) -> InterfaceConfiguration:
        return InterfaceConfiguration(InterfaceConfigurationType.INDIVIDUAL, list(self.command_interface_names))

    def state_interface_configuration(self) -> InterfaceConfiguration:
        return InterfaceConfiguration(InterfaceConfigurationType.INDIVIDUAL, list(self.state_interface_names))

    def on_configure(self) -> None:
        self.command_interface_names = list(self._param_commands)
        self.state_interface_names = list(self._param_states)
        _log.info("configure successful")

    def on_activate(self, command_interfaces, state_interfaces) -> None:
        """Claim the command and state interfaces named in the parameters."""
        commands = get_ordered_interfaces(command_interfaces, self.command_interface_names, "")
        if len(commands) != len(self.command_interface_names):
            raise ControllerError(
                f"Expected {len(self.command_interface_names)} command interfaces, got {len(commands)}"
            )
        states = get_ordered_interfaces(state_interfaces, self.state_interface_names, "")
        if len(states) != len(self.state_interface_names):
            raise ControllerError(
                f"Expected {len(self.state_interface_names)} state interfaces, got {len(states)}"
            )
        self._ordered_commands = commands
        self._ordered_states = states

    def on_deactivate(self) -> None:
        self._ordered_commands = []
        self._ordered_states = []

    def update(self) -> None:
        """Forward the states; raises :class:`ControllerError` on a NaN state."""
        for command, state in zip(self._ordered_commands, self._ordered_states):
            value = state.get_value()
            if math.isnan(value):
                raise ControllerError(f"Nan detected in the robot state interface : {state.name}")
            command.set_value(value)