"""
Plotting utilities for rotation interpolation.
Component and angle histories of a SLERP path, saved with the non-interactive
Agg backend.
"""

import os

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving
import matplotlib.pyplot as plt

from quatcore.interpolation import SlerpPath


PALETTE = ['#2E86AB', '#F18F01', '#2E7D32', '#C73E1D']


def save_figure(fig, filepath, dpi=150):
    """Save *fig* to *filepath*, creating directories as needed."""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fig.savefig(filepath, dpi=dpi, bbox_inches='tight',
                facecolor='white', edgecolor='none')
    plt.close(fig)


def plot_slerp_path(path: SlerpPath, filepath, samples=50, title=None):
    """Plot quaternion components and rotation angle along a SLERP path.

    Parameters
    ----------
    path : SlerpPath
    filepath : str
        Output image path; parent directories are created.
    samples : int
        Number of evenly spaced parameters in [0, 1].
    title : str or None
        Figure title. Defaults to the swept angle.

    Returns
    -------
    pandas.DataFrame
        The sampled table that was plotted.
    """
    df = path.to_dataframe(samples)

    fig, axes = plt.subplots(2, 1, figsize=(10, 8), sharex=True)
    for colour, comp in zip(PALETTE, ['x', 'y', 'z', 'w']):
        axes[0].plot(df['t'], df[comp], color=colour, label=f'$q_{comp}$')
    axes[0].set_ylabel('Component')
    axes[0].legend(loc='best')
    axes[0].grid(True, alpha=0.5)

    axes[1].plot(df['t'], df['angle_deg'], color=PALETTE[0])
    axes[1].set_xlabel('Interpolation parameter t')
    axes[1].set_ylabel('Angle from start [deg]')
    axes[1].grid(True, alpha=0.5)

    if title is None:
        title = f'SLERP path ({np.degrees(path.angular_distance):.1f} deg)'
    fig.suptitle(title, fontsize=14)
    save_figure(fig, filepath)
    return df
