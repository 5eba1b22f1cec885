"""Builds a reduced robot model keeping only the moving joints."""

from __future__ import annotations

import numpy as np

from .messages import Sensor
from .multibody import Model, build_model_from_xml, build_reduced_model

FREE_FLYER_NQ = 7
FREE_FLYER_NV = 6
ROOT_JOINT = "root_joint"


class RobotModelError(ValueError):
    """The requested joints do not fit the robot description."""


class RobotModelBuilder:
    """Rigid body model of the robot restricted to its moving joints."""

    def __init__(self) -> None:
        self.moving_joint_names: list[str] = []
        self.controlled_joint_names: list[str] = []
        self.robot_has_free_flyer = False
        self.moving_joint_ids: list[int] = []
        self.locked_joint_ids: list[int] = []
        self.pinocchio_to_hardware_interface_map: dict[int, int] = {}
        self.model = Model()
        self.q_default_complete = np.zeros(0)

    def build_model(self, urdf, moving_joint_names, controlled_joint_names, robot_has_free_flyer) -> None:
        """Build the model, freezing every joint that is not moving."""
        self.moving_joint_names = list(moving_joint_names)
        self.controlled_joint_names = list(controlled_joint_names)
        self.robot_has_free_flyer = bool(robot_has_free_flyer)
        complete = build_model_from_xml(urdf, self.robot_has_free_flyer)
        self._parse_moving_joint_names(complete, self.moving_joint_names, self.controlled_joint_names)
        self.q_default_complete = np.zeros(complete.nq)
        self.model = build_reduced_model(complete, self.locked_joint_ids, self.q_default_complete)

    def _parse_moving_joint_names(self, complete: Model, moving, controlled) -> None:
        unknown = [name for name in moving if not complete.exist_joint_name(name)]
        if unknown:
            raise RobotModelError(f"joints {unknown} do not belong to the model")
        ids = {complete.get_joint_id(name) for name in moving}
        if self.robot_has_free_flyer:
            ids.add(complete.get_joint_id(ROOT_JOINT))
        self.moving_joint_ids = sorted(ids)
        names = [complete.names[jid] for jid in self.moving_joint_ids]
        self.locked_joint_ids = [
            complete.get_joint_id(name) for name in complete.names[1:] if name not in names
        ]
        if ROOT_JOINT in names:
            root_id = complete.get_joint_id(ROOT_JOINT)
            names = [name for name in names if name != ROOT_JOINT]
            self.moving_joint_ids = [jid for jid in self.moving_joint_ids if jid != root_id]
        self.moving_joint_names = names

        mapping = {}
        for index, name in enumerate(names):
            if name not in controlled:
                raise RobotModelError(
                    f"moving joint {name} is not part of the current hardware interface"
                )
            mapping[index] = controlled.index(name)
        self.pinocchio_to_hardware_interface_map = mapping

    @property
    def nq(self) -> int:
        return self.model.nq

    @property
    def nv(self) -> int:
        return self.model.nv

    @property
    def joint_nq(self) -> int:
        return self.nq - FREE_FLYER_NQ if self.robot_has_free_flyer else self.nq

    @property
    def joint_nv(self) -> int:
        return self.nv - FREE_FLYER_NV if self.robot_has_free_flyer else self.nv

    def construct_robot_state(self, sensor: Sensor) -> tuple[np.ndarray, np.ndarray]:
        """Return the configuration and velocity ``(q, v)`` described by ``sensor``."""
        js = sensor.joint_state
        if js.position.size != self.joint_nq or js.velocity.size != self.joint_nv:
            raise ValueError("joint state has the wrong size")
        if self.robot_has_free_flyer:
            return (
                np.concatenate([sensor.base_pose, js.position]),
                np.concatenate([sensor.base_twist, js.velocity]),
            )
        return js.position.copy(), js.velocity.copy()