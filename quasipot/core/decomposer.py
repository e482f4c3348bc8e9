"""
Field decomposer: split the drift into gradient and remainder parts.

    deterministic = b(x, y)
    gradient      = -grad U         (finite differences of the surface)
    remainder     = deterministic - gradient

The remainder vanishes (up to discretisation error) exactly when the
drift is a gradient field; a rotational drift leaves a non-zero remainder.

Gradients use numpy.gradient: centred differences in the interior and
one-sided differences on the grid boundary, with the grid spacing hx, hy.
Nodes whose stencil touches an unreached (+inf) node come out as nan.
"""

from typing import Optional, Tuple, Union

import numpy as np

from .errors import ShapeMismatchError
from .field import DriftField, evaluate_grid
from .grid import Grid
from .surface import GlobalSurface, LocalSurface, VectorFieldSet, VectorPair
from ..config.parameters import DecompositionParams

Surface = Union[LocalSurface, GlobalSurface]


class FieldDecomposer:
    """Deterministic / gradient / remainder fields for one drift."""

    def __init__(self,
                 field: DriftField,
                 params: Optional[DecompositionParams] = None):
        self.field = field
        self.params = params if params is not None else DecompositionParams()

    def deterministic(self, grid: Grid) -> VectorPair:
        """Drift evaluated at every node of the grid."""
        return evaluate_grid(self.field, grid)

    def gradient(self, surface: Surface) -> VectorPair:
        """Negative finite-difference gradient of the surface."""
        grid = surface.grid
        data = np.where(np.isfinite(surface.values), surface.values, np.nan)
        edge_order = self.params.edge_order
        if edge_order == 2 and min(grid.nx, grid.ny) < 2:
            edge_order = 1
        dudx, dudy = np.gradient(data, grid.hx, grid.hy, edge_order=edge_order)
        return (-dudx, -dudy)

    def remainder(self, surface: Surface) -> VectorPair:
        """Drift minus the gradient part."""
        fx, fy = self.deterministic(surface.grid)
        gx, gy = self.gradient(surface)
        return (fx - gx, fy - gy)

    def decompose(self,
                  surface: Surface,
                  grid: Optional[Grid] = None) -> VectorFieldSet:
        """
        All three fields on the surface's grid.

        Args:
            surface: Local or global quasi-potential surface
            grid: Grid the caller expects; must match the surface's grid

        Raises:
            ShapeMismatchError: If grid does not match surface.grid
        """
        if grid is not None and not grid.matches(surface.grid):
            raise ShapeMismatchError(
                f"Decomposition grid {grid} does not match surface grid {surface.grid}"
            )
        deterministic = self.deterministic(surface.grid)
        gradient = self.gradient(surface)
        remainder = (deterministic[0] - gradient[0], deterministic[1] - gradient[1])
        return VectorFieldSet(
            grid=surface.grid,
            deterministic=deterministic,
            gradient=gradient,
            remainder=remainder,
        )

    def decompose_bounds(self,
                         surface: Surface,
                         x_bounds: Tuple[float, float],
                         y_bounds: Tuple[float, float],
                         nx: int,
                         ny: int) -> VectorFieldSet:
        """decompose() with the expected grid given as bounds and step counts."""
        return self.decompose(surface, Grid.from_bounds(x_bounds, y_bounds, nx, ny))


def vec_decom_all(surface: Surface,
                  field: DriftField,
                  x_bounds: Tuple[float, float],
                  y_bounds: Tuple[float, float],
                  nx: int,
                  ny: int) -> VectorFieldSet:
    """One-call decomposition with the grid given as bounds and step counts."""
    return FieldDecomposer(field).decompose_bounds(surface, x_bounds, y_bounds, nx, ny)
