import pytest

from lfcontrol.interfaces import (
    ControllerError,
    Interface,
    InterfaceConfiguration,
    InterfaceConfigurationType,
    get_ordered_interfaces,
)


def test_name_joins_prefix_and_interface():
    assert Interface("joint1", "position").name == "joint1/position"


def test_default_value_is_nan():
    value = Interface("joint1", "effort").get_value()
    assert str(value) == "nan"


def test_set_get_round_trip():
    interface = Interface("joint1", "effort")
    interface.set_value(2.5)
    assert interface.get_value() == 2.5


def test_read_only_interface_rejects_writes():
    interface = Interface("joint1", "position", 1.0, writable=False)
    with pytest.raises(ControllerError):
        interface.set_value(3.0)
    assert interface.get_value() == 1.0


def test_default_configuration_is_empty():
    config = InterfaceConfiguration()
    assert config.type is InterfaceConfigurationType.NONE
    assert config.names == []


def test_ordered_by_full_name_follows_requested_order():
    a = Interface("a", "effort")
    b = Interface("b", "effort")
    c = Interface("c", "effort")
    ordered = get_ordered_interfaces([c, a, b], ["b/effort", "a/effort", "c/effort"])
    assert ordered == [b, a, c]


def test_ordered_by_prefix_and_type():
    a_pos = Interface("a", "position")
    a_eff = Interface("a", "effort")
    b_eff = Interface("b", "effort")
    ordered = get_ordered_interfaces([a_pos, b_eff, a_eff], ["b", "a"], "effort")
    assert ordered == [b_eff, a_eff]


def test_missing_name_gives_shorter_result():
    a = Interface("a", "effort")
    names = ["a/effort", "missing/effort"]
    ordered = get_ordered_interfaces([a], names)
    assert len(ordered) < len(names)
    assert ordered == [a]