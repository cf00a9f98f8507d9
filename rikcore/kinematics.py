# rikcore/kinematics.py
from dataclasses import dataclass
import numpy as np
from rikcore.linalg import as_vector

DEFAULT_LINK_LENGTH = 60.0


@dataclass(frozen=True)
class EndEffectorPose:
    x: float
    y: float
    phi: float     # rad, suma de las tres articulaciones

    @property
    def position(self):
        return np.array([self.x, self.y], dtype=float)


def _cumulative(q):
    q = as_vector(q, 3, "joints")
    return q[0], q[0] + q[1], q[0] + q[1] + q[2]


def forward_kinematics(q, link_length=DEFAULT_LINK_LENGTH):
    """
    Posición (x, y) de la punta del brazo planar 3R con eslabones iguales.
    Ángulos acumulados desde la base, base en el origen.
    """
    a1, a12, a123 = _cumulative(q)
    x = link_length * (np.cos(a1) + np.cos(a12) + np.cos(a123))
    y = link_length * (np.sin(a1) + np.sin(a12) + np.sin(a123))
    return np.array([x, y], dtype=float)


def net_orientation(q):
    """Orientación neta = q1 + q2 + q3 (sin envolver)."""
    return float(np.sum(as_vector(q, 3, "joints")))


def ee_pose(q, link_length=DEFAULT_LINK_LENGTH):
    x, y = forward_kinematics(q, link_length)
    return EndEffectorPose(x=float(x), y=float(y), phi=net_orientation(q))


def jacobian(q, link_length=DEFAULT_LINK_LENGTH):
    """
    Jacobiano analítico 2x3 de la posición:
      fila 0 -> dx/dq_i, fila 1 -> dy/dq_i
    La columna i solo depende de las sumas acumuladas que contienen a q_i.
    """
    a1, a12, a123 = _cumulative(q)
    L = link_length
    s1, s12, s123 = np.sin(a1), np.sin(a12), np.sin(a123)
    c1, c12, c123 = np.cos(a1), np.cos(a12), np.cos(a123)
    return np.array([
        [-L*(s1 + s12 + s123), -L*(s12 + s123), -L*s123],
        [ L*(c1 + c12 + c123),  L*(c12 + c123),  L*c123],
    ], dtype=float)


def joint_positions(q, link_length=DEFAULT_LINK_LENGTH):
    """Devuelve (4, 2): base, codo 1, codo 2 y punta [mismas unidades que L]."""
    pts = [np.zeros(2)]
    for a in _cumulative(q):
        pts.append(pts[-1] + link_length * np.array([np.cos(a), np.sin(a)]))
    return np.vstack(pts)
