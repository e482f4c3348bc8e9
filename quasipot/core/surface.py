"""
Result containers: local and global quasi-potential surfaces and the
decomposed vector fields.

All arrays are dense, shaped grid.shape and indexed [i, j]. Unreached
nodes hold +inf; that is a normal outcome, distinct from a NumericalError.
Surface values are copied on construction and read-only afterwards, so
the cached interpolator never goes stale.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from scipy.interpolate import RegularGridInterpolator

from .errors import ShapeMismatchError
from .grid import Grid

Point = Tuple[float, float]
Node = Tuple[int, int]
VectorPair = Tuple[np.ndarray, np.ndarray]


class _GridSurface:
    """Query helpers shared by local and global surfaces."""

    grid: Grid
    values: np.ndarray

    def _freeze_values(self) -> None:
        values = np.array(self.values, dtype=float)
        if values.shape != self.grid.shape:
            raise ShapeMismatchError(
                f"Surface values shaped {values.shape}, grid expects {self.grid.shape}"
            )
        values.flags.writeable = False
        self.values = values

    @property
    def reached(self) -> np.ndarray:
        """Boolean mask of nodes with a finite value"""
        return np.isfinite(self.values)

    @property
    def unreached_count(self) -> int:
        return int(np.count_nonzero(~self.reached))

    @property
    def max_finite(self) -> float:
        finite = self.values[self.reached]
        return float(finite.max()) if finite.size else float('inf')

    def value_at(self, i: int, j: int) -> float:
        self.grid.coordinate(i, j)
        return float(self.values[i, j])

    def value_near(self, x: float, y: float) -> float:
        """Value at the node nearest to (x, y)."""
        i, j = self.grid.nearest_node(x, y)
        return float(self.values[i, j])

    def interpolate(self, x, y):
        """
        Bilinear interpolation of the surface at arbitrary coordinates.

        Points outside the grid, or in a cell touching an unreached node,
        give nan.
        """
        if getattr(self, '_interpolator', None) is None:
            data = np.where(self.reached, self.values, np.nan)
            self._interpolator = RegularGridInterpolator(
                (self.grid.x_coords, self.grid.y_coords), data,
                bounds_error=False, fill_value=np.nan,
            )
        x_arr, y_arr = np.broadcast_arrays(np.asarray(x, dtype=float),
                                           np.asarray(y, dtype=float))
        out = self._interpolator(np.stack([x_arr.ravel(), y_arr.ravel()], axis=-1))
        out = out.reshape(x_arr.shape)
        return float(out) if out.ndim == 0 else out


@dataclass(eq=False)
class LocalSurface(_GridSurface):
    """
    Quasi-potential anchored at one stable equilibrium.

    Attributes:
        grid: Grid the surface was computed on
        values: Quasi-potential per node (+inf where unreached), 0 at seed_node
        seed: Seed coordinate as supplied by the caller
        seed_node: Grid node nearest to the seed
        acceptance_order: Rank at which each node was accepted (-1 if never)
    """
    grid: Grid
    values: np.ndarray
    seed: Point
    seed_node: Node
    acceptance_order: np.ndarray
    _interpolator: Optional[RegularGridInterpolator] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self._freeze_values()

    @property
    def accepted_count(self) -> int:
        return int(np.count_nonzero(self.acceptance_order >= 0))

    def __repr__(self) -> str:
        return (f"LocalSurface(seed={self.seed}, shape={self.grid.shape}, "
                f"reached={self.grid.size - self.unreached_count}/{self.grid.size})")


@dataclass(frozen=True)
class Anchor:
    """
    One stitching anchor.

    Attributes:
        point: Unstable-equilibrium coordinate supplied by the caller
        node: Grid node used for alignment
        surfaces: Indices of the two local surfaces this anchor links
    """
    point: Point
    node: Node
    surfaces: Tuple[int, int]


@dataclass(eq=False)
class GlobalSurface(_GridSurface):
    """
    Action-consistent combination of several local surfaces.

    Invariant: values == min over m of (local_surfaces[m].values + offsets[m]),
    taken over surfaces that reached the node.
    """
    grid: Grid
    values: np.ndarray
    offsets: np.ndarray
    anchors: Tuple[Anchor, ...]
    local_surfaces: Tuple[LocalSurface, ...]
    _interpolator: Optional[RegularGridInterpolator] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self._freeze_values()

    def basin_labels(self) -> np.ndarray:
        """Index of the local surface realising the minimum at each node (-1 if none)."""
        stack = np.stack([s.values + off for s, off in zip(self.local_surfaces, self.offsets)])
        labels = np.argmin(stack, axis=0)
        return np.where(self.reached, labels, -1)

    def __repr__(self) -> str:
        return (f"GlobalSurface(n_surfaces={len(self.local_surfaces)}, "
                f"offsets={np.round(self.offsets, 6).tolist()}, shape={self.grid.shape})")


@dataclass(eq=False)
class VectorFieldSet:
    """
    Deterministic, gradient and remainder fields on one grid.

    Each field is an (x component, y component) pair of arrays shaped
    grid.shape, indexed like the surfaces.
    """
    grid: Grid
    deterministic: VectorPair
    gradient: VectorPair
    remainder: VectorPair

    COMPONENTS = ('deterministic', 'gradient', 'remainder')

    def __post_init__(self):
        for name in self.COMPONENTS:
            for part in getattr(self, name):
                if part.shape != self.grid.shape:
                    raise ShapeMismatchError(
                        f"{name} component shaped {part.shape}, grid expects {self.grid.shape}"
                    )

    def component(self, name: str) -> VectorPair:
        if name not in self.COMPONENTS:
            raise KeyError(f"Unknown field {name!r}; choose from {self.COMPONENTS}")
        return getattr(self, name)

    def magnitude(self, name: str) -> np.ndarray:
        u, v = self.component(name)
        return np.hypot(u, v)
