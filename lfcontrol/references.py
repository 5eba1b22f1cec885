"""Layout of the reference interfaces and how a sensor reading is read from them."""

from __future__ import annotations

import math

import numpy as np

from .interfaces import ControllerError
from .messages import JointState, Sensor
from .robot_model_builder import FREE_FLYER_NQ, FREE_FLYER_NV, RobotModelBuilder

HW_IF_POSITION = "position"
HW_IF_VELOCITY = "velocity"
HW_IF_EFFORT = "effort"

BASE_POSE_NAMES = (
    "base_translation_x",
    "base_translation_y",
    "base_translation_z",
    "base_orientation_qx",
    "base_orientation_qy",
    "base_orientation_qz",
    "base_orientation_qw",
)

BASE_TWIST_NAMES = (
    "base_linear_velocity_x",
    "base_linear_velocity_y",
    "base_linear_velocity_z",
    "base_angular_velocity_x",
    "base_angular_velocity_y",
    "base_angular_velocity_z",
)


def reference_interface_names(moving_joint_names, robot_has_free_flyer, prefix="") -> list[str]:
    """Names of the reference interfaces, in the order their values are laid out.

    The layout is ``[base pose, joint positions, base twist, joint velocities,
    joint efforts]``; the base entries only exist with a free flyer.
    """
    joints = list(moving_joint_names)

    def per_joint(kind: str) -> list[str]:
        return [f"{prefix}{joint}/{kind}" for joint in joints]

    names: list[str] = []
    if robot_has_free_flyer:
        names.extend(BASE_POSE_NAMES)
    names.extend(per_joint(HW_IF_POSITION))
    if robot_has_free_flyer:
        names.extend(BASE_TWIST_NAMES)
    names.extend(per_joint(HW_IF_VELOCITY))
    names.extend(per_joint(HW_IF_EFFORT))
    return names


def exponential_smoothing(current, previous, alpha):
    """First-order low-pass filter: ``alpha * current + (1 - alpha) * previous``."""
    return alpha * current + (1.0 - alpha) * previous


def read_state_from_references(
    values,
    names,
    robot_model: RobotModelBuilder,
    sensor: Sensor,
    filter_coefficient: float,
) -> Sensor:
    """Build the sensor reading held in the reference ``values``.

    ``sensor`` is the previous reading: its joint velocity is smoothed with the
    new one using ``filter_coefficient``. When its velocity does not match the
    model, the filter starts from zero. Raises :class:`ControllerError` when the
    names and values disagree in number or when the joint state is entirely NaN,
    and :class:`ValueError` when there are too few values for the model.
    """
    values = np.asarray(values, dtype=float).reshape(-1)
    names = list(names)
    if len(names) != values.size:
        raise ControllerError(
            f"Inconsistent size: reference_interface_names.size({len(names)}) "
            f"!= reference_interfaces.size({values.size})."
        )

    nq, nv = robot_model.nq, robot_model.nv
    joint_nq, joint_nv = robot_model.joint_nq, robot_model.joint_nv
    if values.size < nq + nv + joint_nv:
        raise ValueError(
            f"expected at least {nq + nv + joint_nv} reference values, got {values.size}"
        )

    if robot_model.robot_has_free_flyer:
        base_pose = values[:FREE_FLYER_NQ].copy()
        position = values[FREE_FLYER_NQ : FREE_FLYER_NQ + joint_nq].copy()
        base_twist = values[nq : nq + FREE_FLYER_NV].copy()
        new_velocity = values[nq + FREE_FLYER_NV : nq + FREE_FLYER_NV + joint_nv]
    else:
        base_pose = np.full(FREE_FLYER_NQ, math.nan)
        position = values[:nq].copy()
        base_twist = np.full(FREE_FLYER_NV, math.nan)
        new_velocity = values[nq : nq + nv]
    effort = values[nq + nv : nq + nv + joint_nv].copy()

    previous = sensor.joint_state.velocity
    if previous.size != joint_nv:
        previous = np.zeros(joint_nv)
    velocity = exponential_smoothing(new_velocity, previous, filter_coefficient)

    if np.isnan(position).any() and np.isnan(velocity).any() and np.isnan(effort).any():
        details = ", ".join(f"reference[{n}] = {v}" for n, v in zip(names, values))
        raise ControllerError(f"The joint state must be NaN free. {details}")

    return Sensor(
        base_pose=base_pose,
        base_twist=base_twist,
        joint_state=JointState(
            name=list(robot_model.moving_joint_names),
            position=position,
            velocity=velocity,
            effort=effort,
        ),
    )