"""Controller that holds the robot with a PD law until a feedback control arrives."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .lf_controller import LFController
from .messages import Control, Sensor
from .multibody import rnea
from .pd_controller import PDController
from .robot_model_builder import RobotModelBuilder


@dataclass
class ControllerParameters:
    """Settings of a :class:`LinearFeedbackController`.

    ``pd_to_lf_transition_duration`` is in seconds.
    """

    urdf: str = ""
    moving_joint_names: list[str] = field(default_factory=list)
    p_gains: list[float] = field(default_factory=list)
    d_gains: list[float] = field(default_factory=list)
    controlled_joint_names: list[str] = field(default_factory=list)
    robot_has_free_flyer: bool = False
    pd_to_lf_transition_duration: float = 0.0


class LinearFeedbackController:
    """Interpolates torques from feedback gains and feedforward terms.

    Until the first valid control message, a PD controller holds the robot.
    Afterwards the output blends linearly from the PD output to the linear
    feedback output over ``pd_to_lf_transition_duration`` seconds. Times are
    given in seconds.
    """

    def __init__(self) -> None:
        self.params = ControllerParameters()
        self.robot_model = RobotModelBuilder()
        self._pd_controller = PDController()
        self._lf_controller = LFController()
        self.first_control_received_time: float | None = None

    def load(self, params: ControllerParameters) -> None:
        """Build the robot model and set up both controllers.

        Raises :class:`~lfcontrol.robot_model_builder.RobotModelError` when the
        joints do not fit the robot description.
        """
        self.params = params
        self.robot_model.build_model(
            params.urdf,
            params.moving_joint_names,
            params.controlled_joint_names,
            params.robot_has_free_flyer,
        )
        self._pd_controller.set_gains(params.p_gains, params.d_gains)
        self._lf_controller.initialize(self.robot_model)

    def set_initial_state(self, tau_init, jq_init) -> None:
        """Set the torque and joint posture the PD controller holds."""
        self._pd_controller.set_reference(tau_init, jq_init)

    def compute_control(
        self,
        time: float,
        sensor: Sensor,
        control: Control,
        remove_gravity_compensation_effort: bool,
    ) -> np.ndarray:
        """Return the joint efforts to apply at ``time``."""
        js = sensor.joint_state
        duration = self.params.pd_to_lf_transition_duration

        control_msg_received = not bool(np.isnan(control.feedforward).any())
        first_time_initialized = self.first_control_received_time is not None
        during_switch = (
            first_time_initialized
            and (time - self.first_control_received_time) < duration
        )

        if control_msg_received and not first_time_initialized:
            self.first_control_received_time = time

        if not first_time_initialized:
            output = self._pd_controller.compute_control(js.position, js.velocity)
        elif during_switch:
            elapsed = time - self.first_control_received_time
            weight = min(max(elapsed / duration, 0.0), 1.0)
            pd_ctrl = self._pd_controller.compute_control(js.position, js.velocity)
            lf_ctrl = self._lf_controller.compute_control(sensor, control)
            output = (1.0 - weight) * pd_ctrl + weight * lf_ctrl
        else:
            output = self._lf_controller.compute_control(sensor, control)

        if remove_gravity_compensation_effort:
            q, _ = self.robot_model.construct_robot_state(sensor)
            zero = np.zeros(self.robot_model.nv)
            gravity = rnea(self.robot_model.model, q, zero, zero)
            # The tail drops the free-flyer components.
            output = output - gravity[gravity.size - output.size :]

        return output