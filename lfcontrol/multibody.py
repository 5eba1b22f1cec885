"""Rigid multibody model built from URDF, with configuration difference and RNEA."""

from __future__ import annotations

import enum
import math
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

import numpy as np

GRAVITY = np.array([0.0, 0.0, -9.81, 0.0, 0.0, 0.0])


class JointType(enum.Enum):
    """Kinds of joints a model can hold."""

    FREE_FLYER = "free_flyer"
    REVOLUTE = "revolute"
    CONTINUOUS = "continuous"
    PRISMATIC = "prismatic"

    @property
    def nq(self) -> int:
        return {"free_flyer": 7, "revolute": 1, "continuous": 2, "prismatic": 1}[self.value]

    @property
    def nv(self) -> int:
        return {"free_flyer": 6, "revolute": 1, "continuous": 1, "prismatic": 1}[self.value]


def _skew(w: np.ndarray) -> np.ndarray:
    return np.array([[0.0, -w[2], w[1]], [w[2], 0.0, -w[0]], [-w[1], w[0], 0.0]])


def _homogeneous(rotation: np.ndarray, translation: np.ndarray) -> np.ndarray:
    out = np.eye(4)
    out[:3, :3] = rotation
    out[:3, 3] = translation
    return out


def _rpy_to_matrix(roll: float, pitch: float, yaw: float) -> np.ndarray:
    cr, sr = math.cos(roll), math.sin(roll)
    cp, sp = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    rx = np.array([[1, 0, 0], [0, cr, -sr], [0, sr, cr]])
    ry = np.array([[cp, 0, sp], [0, 1, 0], [-sp, 0, cp]])
    rz = np.array([[cy, -sy, 0], [sy, cy, 0], [0, 0, 1]])
    return rz @ ry @ rx


def _axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    k = _skew(axis)
    return np.eye(3) + math.sin(angle) * k + (1.0 - math.cos(angle)) * (k @ k)


def _quaternion_to_matrix(quat: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(quat)
    if norm == 0.0:
        raise ValueError("zero quaternion")
    x, y, z, w = quat / norm
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ]
    )


@dataclass
class _Inertia:
    """Mass, centre of mass and rotational inertia about the centre of mass."""

    mass: float = 0.0
    com: np.ndarray = field(default_factory=lambda: np.zeros(3))
    rotational: np.ndarray = field(default_factory=lambda: np.zeros((3, 3)))

    def transformed(self, placement: np.ndarray) -> _Inertia:
        rot = placement[:3, :3]
        return _Inertia(self.mass, rot @ self.com + placement[:3, 3], rot @ self.rotational @ rot.T)

    def __add__(self, other: _Inertia) -> _Inertia:
        mass = self.mass + other.mass
        if mass == 0.0:
            return _Inertia(0.0, np.zeros(3), self.rotational + other.rotational)
        com = (self.mass * self.com + other.mass * other.com) / mass
        total = np.zeros((3, 3))
        for part in (self, other):
            d = part.com - com
            total += part.rotational + part.mass * (d @ d * np.eye(3) - np.outer(d, d))
        return _Inertia(mass, com, total)

    def apply(self, motion: np.ndarray) -> np.ndarray:
        lin, ang = motion[:3], motion[3:]
        force = self.mass * (lin - np.cross(self.com, ang))
        torque = self.rotational @ ang + np.cross(self.com, force)
        return np.concatenate([force, torque])


@dataclass
class Joint:
    """A joint with its placement relative to its parent joint frame."""

    name: str
    type: JointType | None
    parent: int
    placement: np.ndarray
    axis: np.ndarray | None = None
    idx_q: int = 0
    idx_v: int = 0
    inertia: _Inertia = field(default_factory=_Inertia)

    @property
    def nq(self) -> int:
        return self.type.nq if self.type else 0

    @property
    def nv(self) -> int:
        return self.type.nv if self.type else 0

    def transform(self, qj: np.ndarray) -> np.ndarray:
        """Homogeneous transform produced by the joint for configuration ``qj``."""
        if self.type is JointType.FREE_FLYER:
            return _homogeneous(_quaternion_to_matrix(qj[3:7]), qj[:3])
        if self.type is JointType.REVOLUTE:
            return _homogeneous(_axis_angle(self.axis, qj[0]), np.zeros(3))
        if self.type is JointType.CONTINUOUS:
            return _homogeneous(_axis_angle(self.axis, math.atan2(qj[1], qj[0])), np.zeros(3))
        if self.type is JointType.PRISMATIC:
            return _homogeneous(np.eye(3), self.axis * qj[0])
        return np.eye(4)

    def motion_subspace(self) -> np.ndarray:
        if self.type is JointType.FREE_FLYER:
            return np.eye(6)
        if self.type is JointType.PRISMATIC:
            return np.concatenate([self.axis, np.zeros(3)]).reshape(6, 1)
        return np.concatenate([np.zeros(3), self.axis]).reshape(6, 1)


class Model:
    """Kinematic tree; joint 0 is the universe."""

    def __init__(self) -> None:
        self.joints: list[Joint] = [Joint("universe", None, 0, np.eye(4))]

    @property
    def names(self) -> list[str]:
        return [joint.name for joint in self.joints]

    @property
    def nq(self) -> int:
        return sum(joint.nq for joint in self.joints)

    @property
    def nv(self) -> int:
        return sum(joint.nv for joint in self.joints)

    def exist_joint_name(self, name: str) -> bool:
        return name in self.names

    def get_joint_id(self, name: str) -> int:
        try:
            return self.names.index(name)
        except ValueError:
            raise KeyError(f"joint {name!r} does not belong to the model") from None

    def _add_joint(self, name, joint_type, parent, placement, axis=None) -> int:
        self.joints.append(Joint(name, joint_type, parent, placement, axis, self.nq, self.nv))
        return len(self.joints) - 1

    def __repr__(self) -> str:
        return f"Model(nq={self.nq}, nv={self.nv}, joints={self.names})"


def _parse_origin(element) -> np.ndarray:
    origin = element.find("origin") if element is not None else None
    if origin is None:
        return np.eye(4)
    xyz = np.array([float(x) for x in origin.get("xyz", "0 0 0").split()])
    rpy = [float(x) for x in origin.get("rpy", "0 0 0").split()]
    return _homogeneous(_rpy_to_matrix(*rpy), xyz)


def _parse_inertia(link) -> _Inertia:
    inertial = link.find("inertial")
    if inertial is None:
        return _Inertia()
    mass_el = inertial.find("mass")
    mass = float(mass_el.get("value")) if mass_el is not None else 0.0
    frame = _parse_origin(inertial)
    inertia_el = inertial.find("inertia")
    rot = np.zeros((3, 3))
    if inertia_el is not None:
        g = lambda key: float(inertia_el.get(key, "0"))  # noqa: E731
        rot = np.array(
            [
                [g("ixx"), g("ixy"), g("ixz")],
                [g("ixy"), g("iyy"), g("iyz")],
                [g("ixz"), g("iyz"), g("izz")],
            ]
        )
    return _Inertia(mass, np.zeros(3), rot).transformed(frame)


_URDF_TYPES = {
    "revolute": JointType.REVOLUTE,
    "continuous": JointType.CONTINUOUS,
    "prismatic": JointType.PRISMATIC,
    "floating": JointType.FREE_FLYER,
}


def build_model_from_xml(urdf: str, free_flyer: bool = False) -> Model:
    """Build a model from URDF text, optionally rooted on a free-flyer joint."""
    root = ET.fromstring(urdf)
    links = {link.get("name"): _parse_inertia(link) for link in root.findall("link")}
    children: dict[str, list] = {}
    child_links = set()
    for joint in root.findall("joint"):
        children.setdefault(joint.find("parent").get("link"), []).append(joint)
        child_links.add(joint.find("child").get("link"))
    roots = [name for name in links if name not in child_links]
    if len(roots) != 1:
        raise ValueError("URDF must have exactly one root link")

    model = Model()
    root_id = model._add_joint("root_joint", JointType.FREE_FLYER, 0, np.eye(4)) if free_flyer else 0
    model.joints[root_id].inertia = model.joints[root_id].inertia + links[roots[0]]

    def visit(link: str, parent_id: int, link_frame: np.ndarray) -> None:
        for joint in children.get(link, []):
            child = joint.find("child").get("link")
            placement = link_frame @ _parse_origin(joint)
            kind = joint.get("type")
            if kind == "fixed":
                holder = model.joints[parent_id]
                holder.inertia = holder.inertia + links[child].transformed(placement)
                visit(child, parent_id, placement)
                continue
            if kind not in _URDF_TYPES:
                raise ValueError(f"unsupported joint type {kind!r}")
            axis_el = joint.find("axis")
            axis = np.array([float(x) for x in (axis_el.get("xyz") if axis_el is not None else "1 0 0").split()])
            axis = axis / np.linalg.norm(axis)
            jid = model._add_joint(joint.get("name"), _URDF_TYPES[kind], parent_id, placement, axis)
            model.joints[jid].inertia = links[child]
            visit(child, jid, np.eye(4))

    visit(roots[0], root_id, np.eye(4))
    return model


def build_reduced_model(model: Model, locked_joint_ids, reference_configuration) -> Model:
    """Return a copy of ``model`` with the given joints locked at the reference configuration."""
    locked = set(locked_joint_ids)
    if any(jid <= 0 or jid >= len(model.joints) for jid in locked):
        raise ValueError("invalid locked joint id")
    qref = np.asarray(reference_configuration, dtype=float)
    if qref.size != model.nq:
        raise ValueError("reference configuration has the wrong size")
    reduced = Model()
    reduced.joints[0].inertia = model.joints[0].inertia
    new_index = {0: 0}
    frame = {0: np.eye(4)}
    for old_id, joint in enumerate(model.joints[1:], start=1):
        anchor = new_index[joint.parent]
        placement = frame[joint.parent] @ joint.placement
        if old_id in locked:
            qj = qref[joint.idx_q : joint.idx_q + joint.nq]
            new_index[old_id] = anchor
            frame[old_id] = placement @ joint.transform(qj)
        else:
            new_index[old_id] = reduced._add_joint(joint.name, joint.type, anchor, placement, joint.axis)
            frame[old_id] = np.eye(4)
        holder = reduced.joints[new_index[old_id]]
        holder.inertia = holder.inertia + joint.inertia.transformed(frame[old_id])
    return reduced


def _log3(rot: np.ndarray) -> np.ndarray:
    diagonal_sum = float(rot[0, 0] + rot[1, 1] + rot[2, 2])
    cos_theta = float(np.clip((diagonal_sum - 1.0) / 2.0, -1.0, 1.0))
    theta = math.acos(cos_theta)
    vee = np.array([rot[2, 1] - rot[1, 2], rot[0, 2] - rot[2, 0], rot[1, 0] - rot[0, 1]])
    if theta < 1e-8:
        return vee / 2.0
    if math.pi - theta < 1e-6:
        b = (rot + np.eye(3)) / 2.0
        k = int(np.argmax(np.diag(b)))
        axis = b[:, k] / math.sqrt(b[k, k])
        return axis / np.linalg.norm(axis) * theta
    return theta / (2.0 * math.sin(theta)) * vee


def _log6(transform: np.ndarray) -> np.ndarray:
    w = _log3(transform[:3, :3])
    theta = float(np.linalg.norm(w))
    wx = _skew(w)
    if theta < 1e-8:
        coef = 1.0 / 12.0
    else:
        coef = (1.0 - theta * math.sin(theta) / (2.0 * (1.0 - math.cos(theta)))) / theta**2
    v_inv = np.eye(3) - 0.5 * wx + coef * (wx @ wx)
    return np.concatenate([v_inv @ transform[:3, 3], w])


def difference(model: Model, q0, q1) -> np.ndarray:
    """Tangent vector that moves configuration ``q0`` to ``q1``."""
    q0 = np.asarray(q0, dtype=float)
    q1 = np.asarray(q1, dtype=float)
    if q0.size != model.nq or q1.size != model.nq:
        raise ValueError("configuration has the wrong size")
    out = np.zeros(model.nv)
    for joint in model.joints[1:]:
        a = q0[joint.idx_q : joint.idx_q + joint.nq]
        b = q1[joint.idx_q : joint.idx_q + joint.nq]
        dv = slice(joint.idx_v, joint.idx_v + joint.nv)
        if joint.type is JointType.FREE_FLYER:
            out[dv] = _log6(np.linalg.inv(joint.transform(a)) @ joint.transform(b))
        elif joint.type is JointType.CONTINUOUS:
            out[dv] = math.atan2(b[1] * a[0] - b[0] * a[1], b[0] * a[0] + b[1] * a[1])
        else:
            out[dv] = b - a
    return out


def _act_inv(m: np.ndarray, motion: np.ndarray) -> np.ndarray:
    rot, p = m[:3, :3], m[:3, 3]
    lin, ang = motion[:3], motion[3:]
    return np.concatenate([rot.T @ (lin - np.cross(p, ang)), rot.T @ ang])


def _act_force(m: np.ndarray, force: np.ndarray) -> np.ndarray:
    rot, p = m[:3, :3], m[:3, 3]
    f = rot @ force[:3]
    return np.concatenate([f, rot @ force[3:] + np.cross(p, f)])


def _motion_cross(v: np.ndarray, m: np.ndarray) -> np.ndarray:
    return np.concatenate([np.cross(v[3:], m[:3]) + np.cross(v[:3], m[3:]), np.cross(v[3:], m[3:])])


def _force_cross(v: np.ndarray, f: np.ndarray) -> np.ndarray:
    return np.concatenate([np.cross(v[3:], f[:3]), np.cross(v[3:], f[3:]) + np.cross(v[:3], f[:3])])


def rnea(model: Model, q, v, a) -> np.ndarray:
    """Inverse dynamics: joint efforts for configuration, velocity and acceleration."""
    q, v, a = (np.asarray(x, dtype=float) for x in (q, v, a))
    if q.size != model.nq or v.size != model.nv or a.size != model.nv:
        raise ValueError("input has the wrong size")
    count = len(model.joints)
    vel = [np.zeros(6)] * count
    acc = [-GRAVITY] + [np.zeros(6)] * (count - 1)
    forces = [np.zeros(6) for _ in range(count)]
    placements = [np.eye(4)] * count
    for jid, joint in enumerate(model.joints[1:], start=1):
        dv = slice(joint.idx_v, joint.idx_v + joint.nv)
        m = joint.placement @ joint.transform(q[joint.idx_q : joint.idx_q + joint.nq])
        s = joint.motion_subspace()
        v_joint = s @ v[dv]
        vel[jid] = _act_inv(m, vel[joint.parent]) + v_joint
        acc[jid] = _act_inv(m, acc[joint.parent]) + s @ a[dv] + _motion_cross(vel[jid], v_joint)
        forces[jid] = joint.inertia.apply(acc[jid]) + _force_cross(vel[jid], joint.inertia.apply(vel[jid]))
        placements[jid] = m
    tau = np.zeros(model.nv)
    for jid in range(count - 1, 0, -1):
        joint = model.joints[jid]
        tau[joint.idx_v : joint.idx_v + joint.nv] = joint.motion_subspace().T @ forces[jid]
        if joint.parent > 0:
            forces[joint.parent] = forces[joint.parent] + _act_force(placements[jid], forces[jid])
    return tau