# rikcore/resolver.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
import numpy as np
from rikcore.linalg import as_vector, norm, zeros
from rikcore.kinematics import DEFAULT_LINK_LENGTH, forward_kinematics, jacobian, net_orientation
from rikcore.ik import (
    DEFAULT_DAMPING, DEFAULT_ORIENTATION_GAIN, compose, damped_pinv, gain_matrix,
    null_space_projector, project_secondary, secondary_task_vector, solve_primary,
)

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = 0.01  # s (10 ms por tick)


@dataclass
class ResolverParams:
    link_length: float = DEFAULT_LINK_LENGTH
    damping: float = DEFAULT_DAMPING          # k de la DLS
    gain: np.ndarray = field(default_factory=lambda: np.eye(2))   # G (2x2)
    orientation_gain: float = DEFAULT_ORIENTATION_GAIN
    period: float = DEFAULT_PERIOD

    def __post_init__(self):
        self.link_length = float(self.link_length)
        self.damping = float(self.damping)
        self.orientation_gain = float(self.orientation_gain)
        self.period = float(self.period)
        self.gain = gain_matrix(self.gain)
        for name in ("link_length", "damping", "orientation_gain", "period"):
            if not np.isfinite(getattr(self, name)):
                raise ValueError(f"{name} debe ser finito, obtuve {getattr(self, name)}")
        if not np.all(np.isfinite(self.gain)):
            raise ValueError(f"gain debe ser finita, obtuve {self.gain.tolist()}")
        if self.link_length <= 0:
            raise ValueError(f"link_length debe ser > 0, obtuve {self.link_length}")
        if self.damping < 0:
            raise ValueError(f"damping debe ser >= 0, obtuve {self.damping}")
        if self.period <= 0:
            raise ValueError(f"period debe ser > 0, obtuve {self.period}")


@dataclass
class ResolverOutput:
    command: np.ndarray            # (3,) rad/s
    v_primary: np.ndarray          # (3,)
    v_secondary: np.ndarray        # (3,)
    position_error: np.ndarray     # (2,)
    orientation_error: float       # rad
    jacobian: np.ndarray           # (2,3)
    j_star: np.ndarray             # (3,2)
    null_space: np.ndarray         # (3,3)


@dataclass(frozen=True)
class TickState:
    """
    Última medida y último objetivo conocidos, pasados explícitamente de un
    tick al siguiente. Ambos arrancan en cero.
    """
    joints: np.ndarray = field(default_factory=lambda: zeros(3))
    target: np.ndarray = field(default_factory=lambda: zeros(3))

    def update(self, joints=None, target=None) -> TickState:
        """None = no llegó nada nuevo este tick: se conserva el valor previo."""
        return replace(
            self,
            joints=self.joints if joints is None else as_vector(joints, 3, "joints").copy(),
            target=self.target if target is None else as_vector(target, 3, "target").copy(),
        )


class IKResolver:
    """
    Resolución de redundancia para el brazo planar 3R:
      tarea primaria  -> posición (x, y) con DLS
      tarea secundaria -> orientación neta, proyectada en el espacio nulo
    Sin estado entre ticks: todo se recalcula en cada llamada.
    """

    def __init__(self, params: ResolverParams | None = None):
        self.params = params if params is not None else ResolverParams()

    def resolve(self, q, target) -> ResolverOutput:
        p = self.params
        q = as_vector(q, 3, "joints")
        target = as_vector(target, 3, "target")

        J = jacobian(q, p.link_length)
        err = target[:2] - forward_kinematics(q, p.link_length)
        phi = net_orientation(q)
        e_phi = target[2] - phi

        J_star = damped_pinv(J, p.damping)
        v1 = solve_primary(J, err, p.gain, J_star=J_star)

        N = null_space_projector(J, J_star)
        q0_dot = secondary_task_vector(target[2], phi, p.orientation_gain)
        v2 = project_secondary(J, J_star, q0_dot, N=N)

        cmd = compose(v1, v2)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("J* %dx%d, J %dx%d", *J_star.shape, *J.shape)
            logger.debug("N:\n%s", np.array2string(N, precision=4))
            logger.debug("err=%s e_phi=%.4f cmd=%s", err, e_phi, cmd)

        return ResolverOutput(
            command=cmd, v_primary=v1, v_secondary=v2,
            position_error=err, orientation_error=float(e_phi),
            jacobian=J, j_star=J_star, null_space=N,
        )

    def command(self, q, target):
        return self.resolve(q, target).command

    def step(self, q, target, dt=None):
        """Un paso integrado: q_next = q + dt * qdot (dt por defecto = periodo)."""
        dt = self.params.period if dt is None else float(dt)
        q = as_vector(q, 3, "joints")
        return q + dt * self.command(q, target)

    def tick(self, state: TickState, joints=None, target=None):
        """
        Un tick del bucle de control. Devuelve (nuevo_estado, salida); la
        orden se genera siempre, hayan cambiado o no las entradas.
        """
        state = state.update(joints=joints, target=target)
        return state, self.resolve(state.joints, state.target)


def position_error_norm(out: ResolverOutput) -> float:
    return norm(out.position_error)
