import os
import numpy as np
import matplotlib.pyplot as plt

from gait_timing.models.endeffectors import Endeffectors


def sample_motions(motions: Endeffectors, dt: float = 0.01):
    """Sample position and contact flag of every foot on a uniform grid."""
    T = max(m.get_total_time() for m in motions)
    t = np.linspace(0.0, T, int(np.ceil(T / dt)) + 1)

    logs = {
        "t": t,
        "p": np.zeros((motions.get_count(), t.shape[0], 3)),
        "contact": np.zeros((motions.get_count(), t.shape[0]), dtype=bool),
    }
    for ee, motion in motions.items():
        for k, tk in enumerate(t):
            logs["p"][int(ee), k] = motion.get_state(tk).p
            logs["contact"][int(ee), k] = motion.is_in_contact(tk)
    return logs


def plot_ee_motion(logs, outpath: str, names=None):
    os.makedirs(os.path.dirname(outpath) or ".", exist_ok=True)

    t = logs["t"]
    p = logs["p"]
    contact = logs["contact"]
    n_ee = p.shape[0]
    names = names or [f"E{i}" for i in range(n_ee)]

    fig = plt.figure(figsize=(11, 9))

    ax1 = plt.subplot(3, 1, 1)
    for i in range(n_ee):
        ax1.plot(t, p[i, :, 0], label=names[i])
    ax1.legend(ncol=n_ee)
    ax1.set_ylabel("foot x [m]")

    ax2 = plt.subplot(3, 1, 2)
    for i in range(n_ee):
        ax2.plot(t, p[i, :, 2], label=names[i])
    ax2.legend(ncol=n_ee)
    ax2.set_ylabel("foot z [m]")

    # contact flags as a gait diagram: one bar row per foot
    ax3 = plt.subplot(3, 1, 3)
    for i in range(n_ee):
        ax3.fill_between(t, i + 0.1, i + 0.9, where=contact[i], step="post")
    ax3.set_yticks(np.arange(n_ee) + 0.5)
    ax3.set_yticklabels(names)
    ax3.set_ylabel("stance")
    ax3.set_xlabel("time [s]")

    fig.tight_layout()
    fig.savefig(outpath, dpi=160)
    plt.close(fig)
