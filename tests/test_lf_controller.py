import numpy as np
import pytest

from lfcontrol.lf_controller import LFController
from lfcontrol.messages import Control, JointState, Sensor
from lfcontrol.robot_model_builder import RobotModelBuilder

DUMMY_URDF = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<robot name="dummy">'
    '  <link name="l0"/>'
    '  <joint name="l01" type="revolute">'
    '    <parent link="l0"/>'
    '    <child link="l1"/>'
    '    <origin xyz="0 0 1" rpy="0 0 1"/>'
    '    <axis xyz="0 0 1"/>'
    '    <limit lower="0" upper="3.14" velocity="100" effort="100"/>'
    "  </joint>"
    '  <link name="l1"/>'
    '  <joint name="l12" type="revolute">'
    '    <parent link="l1"/>'
    '    <child link="l2"/>'
    '    <origin xyz="0 1 0" rpy="1 0 0"/>'
    '    <axis xyz="0 1 0"/>'
    '    <limit lower="-3.14" upper="3.14" velocity="100" effort="10"/>'
    "  </joint>"
    '  <link name="l2"/>'
    "</robot>"
)

# (moving joints, controlled joints)
JOINT_LISTS = [
    (["l01"], ["l01"]),
    ([], ["l02"]),
    (["l01", "l12"], ["l01", "l12"]),
]

MODEL_CASES = [
    pytest.param(moving, controlled, free_flyer, id=f"{'FreeFlyer_' if free_flyer else ''}{'_'.join(controlled)}")
    for moving, controlled in JOINT_LISTS
    for free_flyer in (False, True)
]


def make_builder(moving, controlled, free_flyer):
    rmb = RobotModelBuilder()
    rmb.build_model(DUMMY_URDF, moving, controlled, free_flyer)
    return rmb


def random_sensor(rmb, rng):
    quat = rng.normal(size=4)
    quat /= np.linalg.norm(quat)
    n = len(rmb.moving_joint_names)
    return Sensor(
        base_pose=np.concatenate([rng.uniform(-1, 1, 3), quat]),
        base_twist=rng.uniform(-1, 1, 6),
        joint_state=JointState(
            name=list(rmb.moving_joint_names),
            position=rng.uniform(-1, 1, n),
            velocity=rng.uniform(-1, 1, n),
            effort=rng.uniform(-1, 1, n),
        ),
    )


def random_control(rmb, rng):
    return Control(
        feedback_gain=rng.uniform(-1, 1, size=(rmb.joint_nv, 2 * rmb.nv)),
        feedforward=rng.uniform(-1, 1, rmb.joint_nv),
        initial_state=random_sensor(rmb, rng),
    )


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.mark.parametrize("moving, controlled, free_flyer", MODEL_CASES)
def test_output_has_one_effort_per_moving_joint(moving, controlled, free_flyer, rng):
    rmb = make_builder(moving, controlled, free_flyer)
    ctrl = LFController()
    ctrl.initialize(rmb)
    out = ctrl.compute_control(random_sensor(rmb, rng), random_control(rmb, rng))
    assert out.shape == (rmb.joint_nv,)
    assert out.shape == (len(moving),)


@pytest.mark.parametrize("moving, controlled, free_flyer", MODEL_CASES)
def test_at_linearisation_point_returns_feedforward(moving, controlled, free_flyer, rng):
    rmb = make_builder(moving, controlled, free_flyer)
    ctrl = LFController()
    ctrl.initialize(rmb)
    sensor = random_sensor(rmb, rng)
    control = random_control(rmb, rng)
    control.initial_state = sensor.copy()
    np.testing.assert_allclose(ctrl.compute_control(sensor, control), control.feedforward, atol=1e-9)


@pytest.mark.parametrize("moving, controlled, free_flyer", MODEL_CASES)
def test_zero_gain_returns_feedforward(moving, controlled, free_flyer, rng):
    rmb = make_builder(moving, controlled, free_flyer)
    ctrl = LFController()
    ctrl.initialize(rmb)
    control = random_control(rmb, rng)
    control.feedback_gain = np.zeros_like(control.feedback_gain)
    np.testing.assert_allclose(
        ctrl.compute_control(random_sensor(rmb, rng), control), control.feedforward, atol=1e-12
    )


@pytest.mark.parametrize("moving, controlled, free_flyer", MODEL_CASES)
def test_output_is_linear_in_the_gain(moving, controlled, free_flyer, rng):
    rmb = make_builder(moving, controlled, free_flyer)
    ctrl = LFController()
    ctrl.initialize(rmb)
    sensor = random_sensor(rmb, rng)
    control = random_control(rmb, rng)
    once = ctrl.compute_control(sensor, control) - control.feedforward
    doubled = control.copy()
    doubled.feedback_gain = 2.0 * control.feedback_gain
    twice = ctrl.compute_control(sensor, doubled) - control.feedforward
    np.testing.assert_allclose(twice, 2.0 * once, atol=1e-9)


def test_single_joint_pinned_value():
    rmb = make_builder(["l01"], ["l01"], False)
    ctrl = LFController()
    ctrl.initialize(rmb)
    sensor = Sensor(joint_state=JointState(["l01"], [0.5], [0.1], [0.0]))
    control = Control(
        feedback_gain=[[2.0, 3.0]],
        feedforward=[1.0],
        initial_state=Sensor(joint_state=JointState(["l01"], [1.0], [0.3], [0.0])),
    )
    np.testing.assert_allclose(ctrl.compute_control(sensor, control), [2.6])


def test_free_flyer_translation_difference():
    rmb = make_builder(["l01"], ["l01"], True)
    ctrl = LFController()
    ctrl.initialize(rmb)
    gain = np.zeros((1, 14))
    gain[0, :3] = 1.0
    sensor = Sensor(
        base_pose=[0, 0, 0, 0, 0, 0, 1],
        joint_state=JointState(["l01"], [0.0], [0.0], [0.0]),
    )
    desired = Sensor(
        base_pose=[0.1, 0.2, 0.3, 0, 0, 0, 1],
        joint_state=JointState(["l01"], [0.0], [0.0], [0.0]),
    )
    control = Control(feedback_gain=gain, feedforward=[0.5], initial_state=desired)
    np.testing.assert_allclose(ctrl.compute_control(sensor, control), [1.1], atol=1e-9)


def test_compute_before_initialize_raises(rng):
    with pytest.raises(RuntimeError):
        LFController().compute_control(Sensor(), Control())


def test_initialize_with_none_raises():
    with pytest.raises(ValueError):
        LFController().initialize(None)


@pytest.mark.parametrize("free_flyer", [False, True])
def test_size_mismatches_raise(free_flyer, rng):
    rmb = make_builder(["l01", "l12"], ["l01", "l12"], free_flyer)
    ctrl = LFController()
    ctrl.initialize(rmb)
    sensor = random_sensor(rmb, rng)
    control = random_control(rmb, rng)

    wrong_ff = control.copy()
    wrong_ff.feedforward = np.append(wrong_ff.feedforward, 0.0)
    with pytest.raises(ValueError):
        ctrl.compute_control(sensor, wrong_ff)

    wrong_gain = control.copy()
    wrong_gain.feedback_gain = np.hstack([wrong_gain.feedback_gain, np.ones((rmb.joint_nv, 1))])
    with pytest.raises(ValueError):
        ctrl.compute_control(sensor, wrong_gain)

    wrong_sensor = sensor.copy()
    js = wrong_sensor.joint_state
    wrong_sensor.joint_state = JointState(
        js.name + ["foo"],
        np.append(js.position, 0.0),
        np.append(js.velocity, 0.0),
        np.append(js.effort, 0.0),
    )
    with pytest.raises(ValueError):
        ctrl.compute_control(wrong_sensor, control)