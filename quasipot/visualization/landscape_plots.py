"""Quasi-potential landscape and vector-field decomposition plots."""

import matplotlib.pyplot as plt
import numpy as np


def plot_landscape(surface, levels=20, cap=None, points=None, ax=None, save_path=None):
    """
    Filled contour plot of a quasi-potential surface.

    Args:
        surface: LocalSurface or GlobalSurface
        levels: Number of contour levels
        cap: Clip values above this (the far field tends to dwarf the basins)
        points: Optional {label: (x, y)} markers, e.g. equilibria
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 8))
    else:
        fig = ax.figure

    X, Y = surface.grid.meshgrid()
    U = np.where(surface.reached, surface.values, np.nan)
    if cap is not None:
        U = np.minimum(U, cap)

    c = ax.contourf(X, Y, U, levels=levels, cmap='viridis')
    ax.contour(X, Y, U, levels=10, colors='white', alpha=0.3, linewidths=0.5)
    fig.colorbar(c, ax=ax, label='Quasi-potential U')

    for label, (px, py) in (points or {}).items():
        ax.plot(px, py, 'o', color='red', markersize=6)
        ax.annotate(label, (px, py), xytext=(5, 5), textcoords='offset points', color='white')

    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_title('Quasi-Potential Landscape')

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig, ax


def plot_decomposition(fields, stride=1, save_path=None):
    """Quiver panels of the deterministic, gradient and remainder fields."""
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))

    X, Y = fields.grid.meshgrid()
    sl = (slice(None, None, stride), slice(None, None, stride))
    titles = {
        'deterministic': 'Deterministic Skeleton',
        'gradient': 'Gradient Part (-grad U)',
        'remainder': 'Remainder',
    }

    for ax, name in zip(axes, fields.COMPONENTS):
        u, v = fields.component(name)
        ax.quiver(X[sl], Y[sl], u[sl], v[sl], fields.magnitude(name)[sl], cmap='viridis')
        ax.set_xlabel('x')
        ax.set_ylabel('y')
        ax.set_title(titles[name])
        ax.set_aspect('equal', adjustable='box')
        ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig, axes
