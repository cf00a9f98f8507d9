# rikcore/ik.py
import numpy as np
from rikcore.linalg import as_matrix, as_vector, eye, matmul, pinv, transpose

DEFAULT_DAMPING = 10.0
DEFAULT_ORIENTATION_GAIN = 2.0


def gain_matrix(gain=None):
    """G de 2x2: None -> identidad, escalar -> g*I, o matriz 2x2 tal cual."""
    if gain is None:
        return eye(2)
    if np.ndim(gain) == 0:
        return float(gain) * eye(2)
    return as_matrix(gain, (2, 2), "gain")


def damped_pinv(J, damping=DEFAULT_DAMPING):
    """
    Pseudo-inversa DLS: J* = J^T (J J^T + k^2 I)^-1
    La inversa interna se hace por SVD, así que J J^T singular no rompe nada.
    """
    J = as_matrix(J, (2, 3), "J")
    JT = transpose(J)
    A = J @ JT + (damping**2) * eye(2)
    return matmul(JT, pinv(A))


def solve_primary(J, err, gain=None, damping=DEFAULT_DAMPING, J_star=None):
    """
    Tarea primaria: v1 = J* G e
    - err: e = x_d - x (2 elementos)
    - J_star: reutiliza una J* ya calculada en el mismo tick
    Sin saturación: la magnitud no está acotada.
    """
    e = as_vector(err, 2, "position error")
    if J_star is None:
        J_star = damped_pinv(J, damping)
    return matmul(J_star, gain_matrix(gain), e)


def null_space_projector(J, J_star):
    """N = I - J* J (3x3)."""
    J = as_matrix(J, (2, 3), "J")
    J_star = as_matrix(J_star, (3, 2), "J_star")
    return eye(3) - J_star @ J


def secondary_task_vector(phi_d, phi, gain=DEFAULT_ORIENTATION_GAIN):
    # mismo error escalar en las tres articulaciones (no es un gradiente)
    e_phi = float(phi_d) - float(phi)
    return gain * np.full(3, e_phi, dtype=float)


def project_secondary(J, J_star, q0_dot, N=None):
    """Tarea secundaria proyectada: v2 = N q0_dot (N ya calculada si se pasa)."""
    q0_dot = as_vector(q0_dot, 3, "q0_dot")
    if N is None:
        N = null_space_projector(J, J_star)
    return as_matrix(N, (3, 3), "N") @ q0_dot


def compose(v_primary, v_secondary):
    return as_vector(v_primary, 3, "v_primary") + as_vector(v_secondary, 3, "v_secondary")
