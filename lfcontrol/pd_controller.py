"""Proportional-derivative controller around a reference torque and posture."""

from __future__ import annotations

import numpy as np


class PDController:
    """Computes ``tau_ref - p * (q - q_ref) - d * v``."""

    def __init__(self) -> None:
        self.p_gains = np.zeros(0)
        self.d_gains = np.zeros(0)
        self.tau_ref = np.zeros(0)
        self.q_ref = np.zeros(0)

    def set_gains(self, p_gains, d_gains) -> None:
        self.p_gains = np.asarray(p_gains, dtype=float).reshape(-1).copy()
        self.d_gains = np.asarray(d_gains, dtype=float).reshape(-1).copy()

    def set_reference(self, tau_ref, q_ref) -> None:
        self.tau_ref = np.asarray(tau_ref, dtype=float).reshape(-1).copy()
        self.q_ref = np.asarray(q_ref, dtype=float).reshape(-1).copy()

    def compute_control(self, q, v) -> np.ndarray:
        q = np.asarray(q, dtype=float).reshape(-1)
        v = np.asarray(v, dtype=float).reshape(-1)
        if q.size != v.size:
            raise ValueError("Size missmatch between 'q' and 'v' vectors!")
        if self.tau_ref.size != v.size:
            raise ValueError("Size missmatch between 'tau_ref' and 'v' vectors!")
        return self.tau_ref - self.p_gains * (q - self.q_ref) - self.d_gains * v