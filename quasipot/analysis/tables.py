"""
Tabular export of surfaces and vector fields.

Long format, one row per node: i, j, x, y, then the data columns.
Unreached nodes are written as inf and read back as inf.
"""

from pathlib import Path
from typing import Tuple

import numpy as np
import pandas as pd

from ..core.errors import ShapeMismatchError
from ..core.grid import Grid

SURFACE_COLUMNS = ['i', 'j', 'x', 'y', 'value']


def _node_frame(grid: Grid) -> pd.DataFrame:
    I, J = np.meshgrid(np.arange(grid.nx + 1), np.arange(grid.ny + 1), indexing='ij')
    X, Y = grid.meshgrid()
    return pd.DataFrame({
        'i': I.ravel(),
        'j': J.ravel(),
        'x': X.ravel(),
        'y': Y.ravel(),
    })


def surface_to_frame(surface) -> pd.DataFrame:
    """Local or global surface as a long DataFrame."""
    df = _node_frame(surface.grid)
    df['value'] = surface.values.ravel()
    return df


def fields_to_frame(fields) -> pd.DataFrame:
    """VectorFieldSet as a long DataFrame with six component columns."""
    df = _node_frame(fields.grid)
    for name in fields.COMPONENTS:
        u, v = fields.component(name)
        df[f'{name}_x'] = u.ravel()
        df[f'{name}_y'] = v.ravel()
    return df


def save_surface_csv(surface, path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    surface_to_frame(surface).to_csv(path, index=False)
    return path


def load_surface_csv(path) -> Tuple[Grid, np.ndarray]:
    """
    Read a surface written by save_surface_csv().

    Returns:
        grid, values (shape grid.shape)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If required columns are missing
        ShapeMismatchError: If the nodes do not form a complete uniform grid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Surface file not found: {path}")

    df = pd.read_csv(path)
    missing = [col for col in SURFACE_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    nx = int(df['i'].max())
    ny = int(df['j'].max())
    if df['i'].min() != 0 or df['j'].min() != 0 or len(df) != (nx + 1) * (ny + 1) \
            or df[['i', 'j']].duplicated().any():
        raise ShapeMismatchError(f"{path} does not hold a complete rectangular grid")
    if nx == 0 or ny == 0:
        raise ShapeMismatchError(f"{path} holds a degenerate grid ({nx + 1} x {ny + 1} nodes)")

    grid = Grid(float(df['x'].min()), float(df['x'].max()),
                float(df['y'].min()), float(df['y'].max()), nx, ny)

    expected_x = grid.xmin + df['i'].to_numpy() * grid.hx
    expected_y = grid.ymin + df['j'].to_numpy() * grid.hy
    scale = max(grid.xmax - grid.xmin, grid.ymax - grid.ymin)
    if not (np.allclose(df['x'], expected_x, atol=1e-9 * scale) and
            np.allclose(df['y'], expected_y, atol=1e-9 * scale)):
        raise ShapeMismatchError(f"{path} coordinates are not uniformly spaced")

    values = np.full(grid.shape, np.nan)
    values[df['i'].to_numpy(), df['j'].to_numpy()] = df['value'].to_numpy(dtype=float)
    return grid, values
