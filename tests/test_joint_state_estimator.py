import math

import pytest

from lfcontrol.interfaces import ControllerError, Interface, InterfaceConfigurationType
from lfcontrol.joint_state_estimator import JointStateEstimator

CMDS = ["est/j1/position", "est/j2/position"]
STATES = ["j1/position", "j2/position"]


def _commands(value=-1.0, writable=True):
    return [Interface("est/" + n.split("/")[1], "position", value, writable) for n in CMDS]


def _states(values):
    return [Interface(n.split("/")[0], "position", v, writable=False) for n, v in zip(STATES, values)]


def _active(commands, states):
    est = JointStateEstimator(CMDS, STATES)
    est.on_configure()
    est.on_activate(commands, states)
    return est


def test_configurations_list_names():
    est = JointStateEstimator(CMDS, STATES)
    assert est.command_interface_configuration().names == CMDS
    assert est.state_interface_configuration().names == STATES
    assert est.state_interface_configuration().type is InterfaceConfigurationType.INDIVIDUAL


def test_activate_missing_command():
    est = JointStateEstimator(CMDS, STATES)
    est.on_configure()
    with pytest.raises(ControllerError):
        est.on_activate(_commands()[:1], _states([0.0, 0.0]))


def test_activate_missing_state():
    est = JointStateEstimator(CMDS, STATES)
    est.on_configure()
    with pytest.raises(ControllerError):
        est.on_activate(_commands(), _states([0.0]))


def test_update_forwards_states():
    commands = _commands()
    est = _active(commands, _states([0.25, -1.5]))
    est.update()
    assert [c.get_value() for c in commands] == [0.25, -1.5]


def test_update_follows_state_changes():
    commands = _commands()
    states = _states([0.0, 0.0])
    est = _active(commands, states)
    states[1]._value = 3.0
    est.update()
    assert commands[1].get_value() == 3.0


def test_nan_state_raises():
    commands = _commands()
    est = _active(commands, _states([1.0, math.nan]))
    with pytest.raises(ControllerError):
        est.update()
    assert commands[0].get_value() == 1.0


def test_deactivate_stops_forwarding():
    commands = _commands(value=-1.0)
    est = _active(commands, _states([5.0, 6.0]))
    est.on_deactivate()
    est.update()
    assert [c.get_value() for c in commands] == [-1.0, -1.0]


def test_unwritable_command_raises():
    est = _active(_commands(writable=False), _states([1.0, 2.0]))
    with pytest.raises(ControllerError):
        est.update()