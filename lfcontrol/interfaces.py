"""Named command and state interfaces shared between controllers and hardware."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field


class ControllerError(RuntimeError):
    """A controller could not complete a lifecycle step or an update."""


class InterfaceConfigurationType(enum.Enum):
    """How a controller claims interfaces."""

    ALL = "all"
    INDIVIDUAL = "individual"
    NONE = "none"


@dataclass
class InterfaceConfiguration:
    """The interfaces a controller asks for."""

    type: InterfaceConfigurationType = InterfaceConfigurationType.NONE
    names: list[str] = field(default_factory=list)


class Interface:
    """A single floating-point value named ``<prefix_name>/<interface_name>``."""

    def __init__(
        self,
        prefix_name: str,
        interface_name: str,
        value: float = math.nan,
        writable: bool = True,
    ) -> None:
        self.prefix_name = prefix_name
        self.interface_name = interface_name
        self.writable = writable
        self._value = float(value)

    @property
    def name(self) -> str:
        return f"{self.prefix_name}/{self.interface_name}"

    def get_value(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        """Store ``value``; raises :class:`ControllerError` on a read-only interface."""
        if not self.writable:
            raise ControllerError(f"interface {self.name} cannot be written")
        self._value = float(value)

    def __repr__(self) -> str:
        return f"Interface({self.name!r}, value={self._value!r})"


def get_ordered_interfaces(interfaces, names, interface_type: str = "") -> list[Interface]:
    """Return the interfaces matching ``names``, in the order of ``names``.

    With an empty ``interface_type`` a name matches the full interface name;
    otherwise it matches the prefix and the interface name must equal
    ``interface_type``. Callers compare the length of the result with
    ``names`` to detect missing interfaces.
    """
    interfaces = list(interfaces)
    if interface_type:
        return [
            interface
            for name in names
            for interface in interfaces
            if interface.prefix_name == name and interface.interface_name == interface_type
        ]
    return [interface for name in names for interface in interfaces if interface.name == name]