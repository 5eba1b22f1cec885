"""Linear feedback law around the state at which the control was linearised."""

from __future__ import annotations

import numpy as np

from .messages import Control, Sensor
from .multibody import difference
from .robot_model_builder import RobotModelBuilder


class LFController:
    """Computes ``feedforward + K * (x_desired - x_measured)``.

    The state difference is taken on the configuration manifold of the robot
    model, followed by the plain velocity difference.
    """

    # Number of degrees of freedom of a free-flyer joint in tangent space.
    FREE_FLYER_DOF = 6

    def __init__(self) -> None:
        self.robot_model_builder: RobotModelBuilder | None = None

    def initialize(self, rmb: RobotModelBuilder) -> None:
        """Attach the robot model the controller works on."""
        if rmb is None:
            raise ValueError("a robot model builder is required")
        self.robot_model_builder = rmb

    def compute_control(self, sensor: Sensor, control: Control) -> np.ndarray:
        """Return the joint efforts for the measured ``sensor`` and the ``control`` message."""
        rmb = self.robot_model_builder
        if rmb is None:
            raise RuntimeError("the controller has not been initialised")

        nv = rmb.nv
        gain = control.feedback_gain
        feedforward = control.feedforward
        if gain.shape != (feedforward.size, 2 * nv):
            raise ValueError(
                f"feedback gain of shape {gain.shape} does not match "
                f"feedforward of size {feedforward.size} and a state of size {2 * nv}"
            )

        desired_q, desired_v = rmb.construct_robot_state(control.initial_state)
        measured_q, measured_v = rmb.construct_robot_state(sensor)

        diff_state = np.concatenate(
            [difference(rmb.model, measured_q, desired_q), desired_v - measured_v]
        )
        return feedforward + gain @ diff_state