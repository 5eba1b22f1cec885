"""Sensor and control messages in array form."""

from __future__ import annotations

import copy as _copy
from dataclasses import dataclass, field

import numpy as np


def _vector(value) -> np.ndarray:
    return np.asarray(value, dtype=float).reshape(-1)


@dataclass
class JointState:
    """Named joint positions, velocities and efforts."""

    name: list[str] = field(default_factory=list)
    position: np.ndarray = field(default_factory=lambda: np.zeros(0))
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(0))
    effort: np.ndarray = field(default_factory=lambda: np.zeros(0))

    def __post_init__(self) -> None:
        self.name = list(self.name)
        self.position = _vector(self.position)
        self.velocity = _vector(self.velocity)
        self.effort = _vector(self.effort)


@dataclass
class Sensor:
    """Base pose (xyz + quaternion xyzw), base twist and joint state."""

    base_pose: np.ndarray = field(default_factory=lambda: np.zeros(7))
    base_twist: np.ndarray = field(default_factory=lambda: np.zeros(6))
    joint_state: JointState = field(default_factory=JointState)

    def __post_init__(self) -> None:
        self.base_pose = _vector(self.base_pose)
        self.base_twist = _vector(self.base_twist)
        if self.base_pose.size != 7:
            raise ValueError("base_pose must have 7 elements")
        if self.base_twist.size != 6:
            raise ValueError("base_twist must have 6 elements")

    def copy(self) -> Sensor:
        return _copy.deepcopy(self)


@dataclass
class Control:
    """Feedback gain, feedforward term and the state they were computed at."""

    feedback_gain: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    feedforward: np.ndarray = field(default_factory=lambda: np.zeros(0))
    initial_state: Sensor = field(default_factory=Sensor)

    def __post_init__(self) -> None:
        self.feedback_gain = np.atleast_2d(np.asarray(self.feedback_gain, dtype=float))
        self.feedforward = _vector(self.feedforward)

    def copy(self) -> Control:
        return _copy.deepcopy(self)