import os

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.ticker import MaxNLocator


def plot_light_time_series(df: pd.DataFrame, output_dir: str = 'plots',
                           filename: str = 'light_time.png', title: str = 'Light time') -> str:
    """Light time, correction and range rate against epoch, saved as PNG."""
    if df.empty:
        raise ValueError("No light-time data to plot")

    os.makedirs(output_dir, exist_ok=True)

    plot_data = df.sort_values('epoch')
    max_plot_points = 1000
    if len(plot_data) > max_plot_points:
        plot_indices = np.linspace(0, len(plot_data) - 1, max_plot_points, dtype=int)
        plot_data = plot_data.iloc[plot_indices]

    hours = (plot_data['epoch'] - plot_data['epoch'].iloc[0]) / 3600.0

    fig, axes = plt.subplots(3, 1, figsize=(12, 10), sharex=True)
    plt.subplots_adjust(hspace=0.3)

    axes[0].plot(hours, plot_data['light_time_s'], 'm-', linewidth=1, alpha=0.8, label='Total')
    axes[0].plot(hours, plot_data['geometric_light_time_s'], 'b--', linewidth=0.8, alpha=0.7,
                 label='Geometric')
    axes[0].set_title(title, fontsize=12)
    axes[0].set_ylabel('Light time (s)', fontsize=10)
    axes[0].legend(fontsize=8)
    axes[0].grid(True, alpha=0.3)

    axes[1].plot(hours, plot_data['correction_s'] * 1e9, 'g-', linewidth=0.8, alpha=0.7)
    axes[1].axhline(y=0, color='k', linestyle='--', alpha=0.5, linewidth=0.8)
    axes[1].set_title('Light-time corrections', fontsize=12)
    axes[1].set_ylabel('Correction (ns)', fontsize=10)
    axes[1].grid(True, alpha=0.3)

    unconverged = plot_data[~plot_data['converged'].astype(bool)]
    if not unconverged.empty:
        axes[1].text(0.02, 0.98, f'Unconverged: {len(unconverged)}',
                     transform=axes[1].transAxes, fontsize=8, verticalalignment='top')

    axes[2].plot(hours, plot_data['range_rate_m_s'], 'r-', linewidth=1, alpha=0.7)
    axes[2].set_title('Range rate', fontsize=12)
    axes[2].set_ylabel('Range rate (m/s)', fontsize=10)
    axes[2].set_xlabel(f"Hours since epoch {plot_data['epoch'].iloc[0]:.1f} s TDB", fontsize=10)
    axes[2].grid(True, alpha=0.3)
    axes[2].xaxis.set_major_locator(MaxNLocator(nbins=10))

    path = os.path.join(output_dir, filename)
    fig.savefig(path, dpi=100, bbox_inches='tight')
    plt.close(fig)
    return path
