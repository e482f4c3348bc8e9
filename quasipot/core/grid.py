"""
Grid module: rectangular domain with uniform spacing.

Node (i, j) maps to coordinate (xmin + i*hx, ymin + j*hy) with
0 <= i <= nx and 0 <= j <= ny. Every grid-shaped array in the package
has shape (nx + 1, ny + 1) and is indexed [i, j], x first.
"""

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

from .errors import DomainError


@dataclass(frozen=True)
class Grid:
    """
    Axis-aligned rectangle [xmin, xmax] x [ymin, ymax] split into
    nx x ny uniform steps.

    Attributes:
        xmin, xmax: Bounds of the first state variable
        ymin, ymax: Bounds of the second state variable
        nx, ny: Number of steps along each axis (nodes = steps + 1)
    """
    xmin: float
    xmax: float
    ymin: float
    ymax: float
    nx: int
    ny: int

    def __post_init__(self):
        for name in ('nx', 'ny'):
            steps = getattr(self, name)
            if isinstance(steps, bool) or int(steps) != steps or steps <= 0:
                raise DomainError(f"{name} must be a positive integer, got {steps!r}")
            object.__setattr__(self, name, int(steps))
        for name in ('xmin', 'xmax', 'ymin', 'ymax'):
            value = float(getattr(self, name))
            if not np.isfinite(value):
                raise DomainError(f"{name} must be finite, got {value!r}")
            object.__setattr__(self, name, value)
        if not self.xmin < self.xmax:
            raise DomainError(f"Empty x range: [{self.xmin}, {self.xmax}]")
        if not self.ymin < self.ymax:
            raise DomainError(f"Empty y range: [{self.ymin}, {self.ymax}]")

    @classmethod
    def from_bounds(cls,
                    x_bounds: Tuple[float, float],
                    y_bounds: Tuple[float, float],
                    nx: int,
                    ny: int) -> "Grid":
        """Build a grid from (min, max) bound pairs."""
        return cls(x_bounds[0], x_bounds[1], y_bounds[0], y_bounds[1], nx, ny)

    @property
    def hx(self) -> float:
        return (self.xmax - self.xmin) / self.nx

    @property
    def hy(self) -> float:
        return (self.ymax - self.ymin) / self.ny

    @property
    def shape(self) -> Tuple[int, int]:
        """Array shape of grid-indexed data"""
        return (self.nx + 1, self.ny + 1)

    @property
    def size(self) -> int:
        return (self.nx + 1) * (self.ny + 1)

    @property
    def x_coords(self) -> np.ndarray:
        return self.xmin + np.arange(self.nx + 1) * self.hx

    @property
    def y_coords(self) -> np.ndarray:
        return self.ymin + np.arange(self.ny + 1) * self.hy

    def meshgrid(self) -> Tuple[np.ndarray, np.ndarray]:
        """Coordinate arrays (X, Y), both shaped like the grid."""
        return np.meshgrid(self.x_coords, self.y_coords, indexing='ij')

    def in_index_range(self, i: int, j: int) -> bool:
        return 0 <= i <= self.nx and 0 <= j <= self.ny

    def coordinate(self, i: int, j: int) -> Tuple[float, float]:
        """
        Physical coordinate of node (i, j).

        Raises:
            DomainError: If the index lies outside the grid
        """
        if not self.in_index_range(i, j):
            raise DomainError(f"Node ({i}, {j}) outside grid of shape {self.shape}")
        return (self.xmin + i * self.hx, self.ymin + j * self.hy)

    def contains(self, x: float, y: float) -> bool:
        """Inclusive bounds test with a small relative tolerance."""
        tol_x = 1e-12 * (self.xmax - self.xmin)
        tol_y = 1e-12 * (self.ymax - self.ymin)
        return (self.xmin - tol_x <= x <= self.xmax + tol_x and
                self.ymin - tol_y <= y <= self.ymax + tol_y)

    def nearest_node(self, x: float, y: float) -> Tuple[int, int]:
        """
        Index of the node closest to (x, y).

        Raises:
            DomainError: If (x, y) lies outside the domain
        """
        if not (np.isfinite(x) and np.isfinite(y)) or not self.contains(x, y):
            raise DomainError(
                f"Point ({x}, {y}) outside domain "
                f"[{self.xmin}, {self.xmax}] x [{self.ymin}, {self.ymax}]"
            )
        i = int(round((x - self.xmin) / self.hx))
        j = int(round((y - self.ymin) / self.hy))
        return (min(max(i, 0), self.nx), min(max(j, 0), self.ny))

    def is_boundary(self, i: int, j: int) -> bool:
        return i == 0 or j == 0 or i == self.nx or j == self.ny

    def within_margin(self, i: int, j: int, margin: float) -> bool:
        """
        True if node (i, j) lies within `margin` (fraction of each axis span)
        of the domain edge. A zero margin reduces to is_boundary().
        """
        if self.is_boundary(i, j):
            return True
        mi = margin * self.nx
        mj = margin * self.ny
        return i <= mi or j <= mj or i >= self.nx - mi or j >= self.ny - mj

    def neighbours(self, i: int, j: int, radius: int = 1) -> Iterator[Tuple[int, int]]:
        """
        In-grid nodes at Chebyshev distance 1..radius from (i, j).

        Edge nodes simply get fewer neighbours (one-sided stencils).
        """
        for di in range(-radius, radius + 1):
            for dj in range(-radius, radius + 1):
                if di == 0 and dj == 0:
                    continue
                ni, nj = i + di, j + dj
                if self.in_index_range(ni, nj):
                    yield (ni, nj)

    def matches(self, other: "Grid") -> bool:
        """Same step counts and (to float tolerance) same bounds."""
        if not isinstance(other, Grid):
            return False
        if (self.nx, self.ny) != (other.nx, other.ny):
            return False
        return bool(np.allclose(
            [self.xmin, self.xmax, self.ymin, self.ymax],
            [other.xmin, other.xmax, other.ymin, other.ymax],
            rtol=1e-12, atol=1e-12,
        ))
