# rikcore/io.py
from __future__ import annotations
import os
import numpy as np
import pandas as pd
from rikcore.resolver import ResolverParams

PARAM_NAMES = ["link_length", "damping", "gain_x", "gain_y", "orientation_gain", "period"]

# ---------- Lectura de CSV ----------
def read_params_csv(path: str) -> ResolverParams:
    """
    controller.csv con columnas [param, value]. Los parámetros ausentes toman
    su valor por defecto; gain_x/gain_y forman la diagonal de G.
    """
    df = pd.read_csv(path)
    required = ["param", "value"]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Faltan columnas en {os.path.basename(path)}: {missing}")
    names = df["param"].astype(str).str.strip()
    dup = sorted(set(names[names.duplicated()]))
    if dup:
        raise ValueError(f"Parámetros repetidos en {os.path.basename(path)}: {dup}")
    values = dict(zip(names, df["value"].astype(float)))
    unknown = sorted(set(values) - set(PARAM_NAMES))
    if unknown:
        raise ValueError(f"Parámetros desconocidos en {os.path.basename(path)}: {unknown}")

    kwargs = {k: values[k] for k in ("link_length", "damping", "orientation_gain", "period")
              if k in values}
    if "gain_x" in values or "gain_y" in values:
        kwargs["gain"] = np.diag([values.get("gain_x", 1.0), values.get("gain_y", 1.0)])
    return ResolverParams(**kwargs)

def load_params_from_csv_dir(dirpath: str) -> ResolverParams:
    path = os.path.join(dirpath, "controller.csv")
    if not os.path.exists(path):
        return ResolverParams()
    return read_params_csv(path)

def read_targets_csv(path: str) -> np.ndarray:
    df = pd.read_csv(path)
    required = ["x_d", "y_d", "phi_d"]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Faltan columnas en {os.path.basename(path)}: {missing}")
    return df[required].to_numpy(dtype=float)

# ---------- Escritura ----------
def write_trace_csv(trace, path: str) -> None:
    dirname = os.path.dirname(os.path.abspath(path))
    os.makedirs(dirname, exist_ok=True)
    trace.to_frame().to_csv(path, index=False)
