# rikcore/sim.py
"""
Bucle de control periódico y planta simulada.
El transporte real (puertos de encoders, objetivo y motores) queda fuera;
aquí se reemplaza por canales en memoria que pueden no traer dato nuevo.
"""
from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
import numpy as np
import pandas as pd
from rikcore.linalg import as_vector
from rikcore.kinematics import ee_pose
from rikcore.resolver import IKResolver, TickState, position_error_norm

logger = logging.getLogger(__name__)

TRACE_COLUMNS = ["t", "q1", "q2", "q3", "x", "y", "phi", "x_d", "y_d", "phi_d",
                 "dq1", "dq2", "dq3", "err_pos", "err_phi"]


class SnapshotSource:
    """
    Canal de valores opcionales: read() devuelve el siguiente valor o None
    si no hay nada nuevo (lectura no bloqueante). Los None del iterable
    también cuentan como "sin dato".
    """
    def __init__(self, values=()):
        self._it = iter(values)

    def read(self):
        return next(self._it, None)


class SimulatedArm:
    """Planta ideal de velocidad: q <- q + dt * qdot."""
    def __init__(self, q0=(0.0, 0.0, 0.0)):
        self.q = as_vector(q0, 3, "q0").copy()

    def read_encoders(self):
        return self.q.copy()

    def apply_velocity(self, qdot, dt):
        self.q = self.q + float(dt) * as_vector(qdot, 3, "qdot")


@dataclass
class Trace:
    rows: list = field(default_factory=list)

    def append(self, t, state, out, link_length):
        pose = ee_pose(state.joints, link_length)
        self.rows.append([
            t, *state.joints, pose.x, pose.y, pose.phi, *state.target,
            *out.command, position_error_norm(out), out.orientation_error,
        ])

    def __len__(self):
        return len(self.rows)

    def to_frame(self):
        return pd.DataFrame(self.rows, columns=TRACE_COLUMNS)


def run_loop(resolver: IKResolver, arm: SimulatedArm, targets, steps,
             state: TickState | None = None, realtime=False):
    """
    Ejecuta `steps` ticks de periodo resolver.params.period.
    - targets: SnapshotSource, o cualquier iterable de objetivos (None = sin dato)
    - realtime: si True, respeta el periodo con time.monotonic()/sleep
    Retorna la traza (Trace).
    """
    if not isinstance(targets, SnapshotSource):
        targets = SnapshotSource(targets)
    dt = resolver.params.period
    state = state if state is not None else TickState()
    trace = Trace()

    logger.info("Bucle IK: %d ticks de %.1f ms", steps, dt * 1e3)
    next_tick = time.monotonic()
    for k in range(steps):
        if realtime:
            now = time.monotonic()
            if now < next_tick:
                time.sleep(next_tick - now)
            next_tick += dt

        state, out = resolver.tick(state, joints=arm.read_encoders(), target=targets.read())
        trace.append(k * dt, state, out, resolver.params.link_length)
        arm.apply_velocity(out.command, dt)

    if trace.rows:
        last = trace.rows[-1]
        logger.info("Fin: err_pos=%.4f err_phi=%.4f", last[-2], last[-1])
    return trace


def scheduled_targets(targets, ticks_per_target):
    """
    Envía cada objetivo una sola vez y lo deja "retenido" ticks_per_target
    ticks (el canal no trae nada entre medias).
    """
    targets = np.atleast_2d(np.asarray(targets, dtype=float))
    values = []
    for tgt in targets:
        values.append(as_vector(tgt, 3, "target"))
        values.extend([None] * (ticks_per_target - 1))
    return SnapshotSource(values)
