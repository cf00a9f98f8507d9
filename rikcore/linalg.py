# rikcore/linalg.py
"""
Interfaz mínima de álgebra lineal usada por la cinemática y el solver.
Todo pasa por aquí para no atar el resto del código a numpy.
"""
import numpy as np


def as_vector(v, size, name="vector"):
    """Convierte v a vector float de exactamente `size` elementos."""
    v = np.asarray(v, dtype=float).reshape(-1)
    if v.size != size:
        raise ValueError(f"{name} debe tener {size} elementos, obtuve {v.size}")
    return v


def as_matrix(M, shape, name="matrix"):
    M = np.asarray(M, dtype=float)
    if M.shape != tuple(shape):
        raise ValueError(f"{name} debe ser {shape[0]}x{shape[1]}, obtuve {M.shape}")
    return M


def eye(n):
    return np.eye(n, dtype=float)


def zeros(n):
    return np.zeros(n, dtype=float)


def transpose(M):
    return np.asarray(M, dtype=float).T


def matmul(*Ms):
    """Producto encadenado: matmul(A, B, c) == A @ B @ c."""
    out = Ms[0]
    for M in Ms[1:]:
        out = out @ M
    return out


def pinv(M):
    # Pseudo-inversa vía SVD: no falla con matrices singulares
    return np.linalg.pinv(np.asarray(M, dtype=float))


def norm(v):
    return float(np.linalg.norm(v))
