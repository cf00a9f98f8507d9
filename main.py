# main.py
import argparse
import logging
from dataclasses import replace
from pathlib import Path
import numpy as np
from rikcore.io import load_params_from_csv_dir, read_targets_csv, write_trace_csv
from rikcore.kinematics import ee_pose, joint_positions
from rikcore.resolver import IKResolver
from rikcore.sim import SimulatedArm, run_loop, scheduled_targets

def build_parser():
    root = Path(__file__).parent
    p = argparse.ArgumentParser(description="IK diferencial con resolución de redundancia (brazo planar 3R)")
    p.add_argument("--config", default=str(root / "config_csv"), help="directorio con controller.csv")
    p.add_argument("--link-length", type=float, default=None)
    p.add_argument("--period", type=float, default=None, help="periodo del tick [s]")
    p.add_argument("--target", type=float, nargs=3, metavar=("X", "Y", "PHI"), default=None)
    p.add_argument("--targets", default=None, help="CSV con columnas x_d,y_d,phi_d")
    p.add_argument("--joints", type=float, nargs=3, metavar=("Q1", "Q2", "Q3"), default=(0.0, 0.0, 0.0))
    p.add_argument("--steps", type=int, default=500, help="ticks por objetivo")
    p.add_argument("--realtime", action="store_true")
    p.add_argument("--trace", default=None, help="CSV de salida con la traza")
    p.add_argument("--plot", action="store_true")
    p.add_argument("--log-level", default="INFO")
    return p

def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format="[%(levelname)s] %(name)s: %(message)s")

    params = load_params_from_csv_dir(args.config)
    if args.link_length is not None:
        params = replace(params, link_length=args.link_length)
    if args.period is not None:
        params = replace(params, period=args.period)
    resolver = IKResolver(params)

    if args.targets:
        targets = read_targets_csv(args.targets)
    elif args.target:
        targets = np.array([args.target], dtype=float)
    else:
        targets = np.array([[170.0, 10.0, 0.1]])  # caso de prueba por defecto

    arm = SimulatedArm(args.joints)
    trace = run_loop(resolver, arm, scheduled_targets(targets, args.steps),
                     steps=args.steps * len(targets), realtime=args.realtime)

    pose = ee_pose(arm.q, params.link_length)
    print("q final [rad]:", np.round(arm.q, 4))
    print(f"EE final: x={pose.x:.3f} y={pose.y:.3f} phi={pose.phi:.4f}")

    if args.trace:
        write_trace_csv(trace, args.trace)
    if args.plot:
        from ui.viz_matplotlib import plot_arm, plot_trace
        plot_trace(trace.to_frame(), show=False)
        plot_arm(joint_positions(arm.q, params.link_length), target=targets[-1], title="Pose final")

if __name__ == "__main__":
    main()
