# lfcontrol

`lfcontrol` computes joint torques for a robot from the output of a whole-body
model predictive controller. It applies a linear feedback law around the
state the optimal control problem was linearised at:

    tau = feedforward + feedback_gain * (x_des - x_meas)

Here `x = [q, v]`. The configuration difference is taken on the robot's
configuration space, so it also holds for a free-flyer base.

At start-up the controller holds the robot with a PD law. The first control
message whose feedforward term has no NaN starts a transition: over
`pd_to_lf_transition_duration` seconds the output is blended linearly from
the PD torque to the linear feedback torque. The gravity compensation effort
can be subtracted from the result.

## Installation

    pip install lfcontrol

To run the test suite:

    pip install "lfcontrol[test]"
    pytest

## Modules

- `lfcontrol.multibody`: a small rigid-body toolkit.
  `build_model_from_xml(urdf, free_flyer)` builds a `Model` from URDF text
  (revolute, continuous, prismatic, floating and fixed joints; fixed joints
  merge their child link into the parent body). With `free_flyer=True` the
  tree is rooted on a joint named `root_joint`.
  `build_reduced_model(model, locked_joint_ids, reference_configuration)`
  locks joints at a reference configuration. `difference(model, q0, q1)`
  gives the tangent vector from `q0` to `q1`, and `rnea(model, q, v, a)`
  gives inverse dynamics under gravity. `Model` has `names`, `nq`, `nv`,
  `exist_joint_name` and `get_joint_id` (which raises `KeyError` for an
  unknown name).
- `lfcontrol.messages`: the `JointState`, `Sensor` and `Control` dataclasses.
  `Sensor.base_pose` is xyz followed by a quaternion in xyzw order (7
  values), and `Sensor.base_twist` has 6 values.
- `lfcontrol.robot_model_builder`: `RobotModelBuilder.build_model(urdf,
  moving_joint_names, controlled_joint_names, robot_has_free_flyer)` keeps
  the moving joints and locks the rest. Moving joints are sorted in model
  order and duplicates are dropped. Afterwards the builder exposes
  `moving_joint_names`, `moving_joint_ids`, `locked_joint_ids`, `model`,
  `nq`, `nv`, `joint_nq` and `joint_nv`.
  `construct_robot_state(sensor)` returns `(q, v)`. A moving joint that is
  unknown to the model, or missing from the controlled joints, raises
  `RobotModelError`.
- `lfcontrol.pd_controller`: `PDController` computes
  `tau_ref - p * (q - q_ref) - d * v`. It raises `ValueError` when the sizes
  do not match.
- `lfcontrol.lf_controller`: `LFController`, the linear feedback law on its
  own.
- `lfcontrol.linear_feedback_controller`: `LinearFeedbackController` combines
  the PD start-up, the time-based transition and the linear feedback law.
  `ControllerParameters` configures it.
- `lfcontrol.interfaces`: named `Interface` values (`<prefix>/<name>`),
  `InterfaceConfiguration`, `InterfaceConfigurationType` and
  `get_ordered_interfaces`. Failures raise `ControllerError`.
- `lfcontrol.passthrough_controller`: `PassthroughController` exposes one
  reference interface per command interface and copies the values across.
  It activates only in chained mode. When a reference is NaN, its command is
  set to zero and the update stops.
- `lfcontrol.joint_state_estimator`: `JointStateEstimator` copies state
  interface values to command interfaces. It raises `ControllerError` on a
  NaN state.
- `lfcontrol.references`: `reference_interface_names` gives the layout of
  reference values: base pose, joint positions, base twist, joint velocities,
  joint efforts. The base entries are present only with a free flyer.
  `exponential_smoothing` filters joint velocities, and
  `read_state_from_references` turns a vector of reference values into a
  `Sensor`.

## Example

```python
import numpy as np

from lfcontrol.linear_feedback_controller import (
    ControllerParameters,
    LinearFeedbackController,
)
from lfcontrol.messages import Control, JointState, Sensor

with open("robot.urdf") as f:
    urdf = f.read()

params = ControllerParameters(
    urdf=urdf,
    moving_joint_names=["l01", "l12"],
    p_gains=[10.0, 10.0],
    d_gains=[1.0, 1.0],
    controlled_joint_names=["l01", "l12"],
    robot_has_free_flyer=False,
    pd_to_lf_transition_duration=0.5,
)

ctrl = LinearFeedbackController()
ctrl.load(params)
ctrl.set_initial_state(np.zeros(2), np.zeros(2))

sensor = Sensor(joint_state=JointState(
    name=["l01", "l12"], position=[0.1, 0.2], velocity=[0.0, 0.0], effort=[0.0, 0.0],
))
nv = ctrl.robot_model.nv
control = Control(
    feedback_gain=np.zeros((2, 2 * nv)),
    feedforward=np.zeros(2),
    initial_state=sensor.copy(),
)

# time is in seconds
tau = ctrl.compute_control(0.0, sensor, control, False)
```

If the control's feedforward term contains NaN, no control is considered
received and the output stays the PD torque. The first call with a valid
control still returns the PD torque and starts the transition clock. Once
the transition duration has passed, the output is the linear feedback torque
alone.

## What the package does not do

`lfcontrol` is a library of controllers and data types. It has no command,
and it runs no control loop. It does not fetch a robot description, load
parameters, or publish and subscribe to messages. The caller supplies the
URDF text, the times, the `Sensor` and `Control` values and the `Interface`
objects, and calls the lifecycle and update methods itself.