"""Chainable controller forwarding its reference interfaces to its command interfaces."""

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


class PassthroughController:
    """Exposes one reference interface per command interface and copies values across.

    A NaN reference stops the update: its command is set to zero and the
    remaining commands are left untouched.
    """

    def __init__(self, reference_interfaces, command_interfaces, node_name: str = "passthrough_controller") -> None:
        self.node_name = node_name
        self._param_references = list(reference_interfaces)
        self._param_commands = list(command_interfaces)
        self.reference_interface_names = list(self._param_references)
        self.command_interface_names = list(self._param_commands)
        self._references: list[Interface] = []
        self._ordered_commands: list[Interface] = []

    def command_interface_configuration(self) -> InterfaceConfiguration:
        return InterfaceConfiguration(InterfaceConfigurationType.INDIVIDUAL, list(self.command_interface_names))

    def state_interface_configuration(self) -> InterfaceConfiguration:
        return InterfaceConfiguration(InterfaceConfigurationType.NONE)

    def on_configure(self) -> None:
        """Reload the interface names and allocate the reference storage."""
        self.reference_interface_names = list(self._param_references)
        self.command_interface_names = list(self._param_commands)
        existing = self._references[: len(self.reference_interface_names)]
        for interface, name in zip(existing, self.reference_interface_names):
            interface.interface_name = name
        self._references = existing + [
            Interface(self.node_name, name)
            for name in self.reference_interface_names[len(existing) :]
        ]
        _log.info("configure successful")

    def on_activate(self, command_interfaces, chained_mode: bool) -> None:
        """Claim the command interfaces; the controller must run in chained mode."""
        if not chained_mode:
            raise ControllerError("Not in chained mode.")
        ordered = get_ordered_interfaces(command_interfaces, self.command_interface_names, "")
        expected = len(self.command_interface_names)
        if len(ordered) != expected or expected != len(self._references):
            raise ControllerError(f"Expected {expected} command interfaces, got {len(ordered)}")
        self._ordered_commands = ordered
        for interface in self._references:
            interface.set_value(math.nan)
        _log.info("activate successful")

    def on_deactivate(self) -> None:
        self._ordered_commands = []

    def export_reference_interfaces(self) -> list[Interface]:
        """The reference interfaces other controllers write into."""
        return list(self._references)

    @property
    def reference_values(self) -> list[float]:
        return [interface.get_value() for interface in self._references]

    def update_and_write_commands(self) -> None:
        """Copy each reference into its command interface."""
        for command, reference, name in zip(
            self._ordered_commands, self._references, self.reference_interface_names
        ):
            value = reference.get_value()
            if math.isnan(value):
                _log.error("Nan detected in the reference interface : %s", name)
                command.set_value(0.0)
                return
            command.set_value(value)