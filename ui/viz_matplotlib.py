# ui/viz_matplotlib.py
import numpy as np
import matplotlib.pyplot as plt

def plot_arm(joints_xy, ax=None, show=True, equal_axes=True, title=None, target=None):
    """joints_xy: (4,2) base, codos y punta (ver kinematics.joint_positions)."""
    if ax is None:
        fig = plt.figure()
        ax = fig.add_subplot(111)

    xs, ys = joints_xy[:,0], joints_xy[:,1]
    ax.plot(xs, ys, marker='o')
    ax.scatter([xs[0]], [ys[0]], s=40)    # base
    ax.scatter([xs[-1]], [ys[-1]], s=40)  # punta
    if target is not None:
        ax.scatter([target[0]], [target[1]], marker='x', s=60, color="red")

    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_title(title or "Brazo planar 3R")
    ax.grid(True)

    if equal_axes:
        _set_axes_equal(ax, reach=np.abs(joints_xy).max())
    if show:
        plt.show()
    return ax

def plot_trace(frame, show=True):
    """Traza de run_loop (DataFrame): articulaciones, órdenes y errores."""
    fig, axes = plt.subplots(3, 1, sharex=True, figsize=(8, 8))
    frame.plot(x="t", y=["q1", "q2", "q3"], ax=axes[0])
    axes[0].set_ylabel("q [rad]")
    frame.plot(x="t", y=["dq1", "dq2", "dq3"], ax=axes[1])
    axes[1].set_ylabel("qdot [rad/s]")
    frame.plot(x="t", y=["err_pos"], ax=axes[2])
    frame.plot(x="t", y=["err_phi"], ax=axes[2], secondary_y=True)
    axes[2].set_xlabel("t [s]")
    if show:
        plt.show()
    return fig

def _set_axes_equal(ax, reach=None):
    bounds = np.array([ax.get_xbound(), ax.get_ybound()], dtype=float)
    minv = bounds[:,0].min()
    maxv = bounds[:,1].max()
    if reach:
        minv, maxv = min(minv, -reach), max(maxv, reach)
    span = maxv - minv
    c = (minv + maxv) / 2.0
    r = span / 2.0 if span > 0 else 1.0
    ax.set_xlim([c - r, c + r])
    ax.set_ylim([c - r, c + r])
