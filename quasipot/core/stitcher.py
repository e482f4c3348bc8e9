"""
Global stitcher: merge local surfaces into one global quasi-potential.

Each local surface measures action from its own stable equilibrium, so
surfaces from different basins sit at unrelated levels. An unstable
equilibrium on the separatrix between two basins fixes their relative
level: the action needed to reach the separatrix point must not depend
on which basin it is measured from. With offsets chosen that way the
global quasi-potential is the pointwise minimum over basins:

    U(node) = min_m [ U_m(node) + offset_m ]

Anchors come in two forms:

- (x, y): the r-th plain anchor aligns surface r + 1 with surface 0
- (x, y, a, b): explicit link between surfaces a and b, for chains of
  basins where the separatrix sits between two non-reference surfaces

References:
- Freidlin & Wentzell (2012) Random Perturbations of Dynamical Systems, ch. 6
- Moore et al. (2016) Ecology and Evolution 6:3808-3822 - QPot global surfaces
"""

from collections import deque
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import AlignmentError, ShapeMismatchError
from .surface import Anchor, GlobalSurface, LocalSurface
from ..config.parameters import StitchParams

AnchorSpec = Union[Tuple[float, float], Tuple[float, float, int, int]]


class GlobalStitcher:
    """
    Aligns k >= 1 local surfaces using unstable equilibria as anchors.

    Each anchor links two surfaces at the node nearest to the unstable
    equilibrium among the nodes both surfaces reached. Offsets follow
    from the links, starting with offset 0 for the first surface.
    """

    def __init__(self, params: Optional[StitchParams] = None):
        self.params = params if params is not None else StitchParams()

    def stitch(self,
               surfaces: Sequence[LocalSurface],
               unstable_points: Sequence[AnchorSpec] = ()) -> GlobalSurface:
        """
        Build the global surface.

        Args:
            surfaces: Local surfaces, one per stable equilibrium
            unstable_points: Separatrix anchors, (x, y) or (x, y, a, b);
                at least k - 1 for k surfaces

        Returns:
            GlobalSurface with per-surface offsets and the anchors used

        Raises:
            ShapeMismatchError: If surfaces were computed on different grids
            AlignmentError: If an anchor has no node reached by both of its
                surfaces, names an unknown surface, or some surface is
                left unlinked
        """
        surfaces = tuple(surfaces)
        if not surfaces:
            raise AlignmentError("At least one local surface is required")
        grid = surfaces[0].grid
        for idx, surface in enumerate(surfaces[1:], start=1):
            if not surface.grid.matches(grid):
                raise ShapeMismatchError(
                    f"Surface {idx} grid {surface.grid} does not match surface 0 grid {grid}"
                )

        anchors = tuple(self._locate_anchor(surfaces, spec, r)
                        for r, spec in enumerate(unstable_points))
        offsets = self._solve_offsets(surfaces, anchors)

        stack = np.stack([s.values + off for s, off in zip(surfaces, offsets)])
        values = stack.min(axis=0)

        if self.params.normalize:
            finite = values[np.isfinite(values)]
            shift = float(finite.min()) if finite.size else 0.0
            offsets = offsets - shift
            values = values - shift

        return GlobalSurface(
            grid=grid,
            values=values,
            offsets=offsets,
            anchors=anchors,
            local_surfaces=surfaces,
        )

    def _locate_anchor(self,
                       surfaces: Tuple[LocalSurface, ...],
                       spec: AnchorSpec,
                       rank: int) -> Anchor:
        """Resolve the surface pair of an anchor and its node in their overlap."""
        grid = surfaces[0].grid
        k = len(surfaces)
        if len(spec) == 4:
            x, y, a, b = spec
            a, b = int(a), int(b)
        elif len(spec) == 2:
            x, y = spec
            a, b = 0, rank + 1
        else:
            raise AlignmentError(f"Anchor {spec!r} must be (x, y) or (x, y, a, b)")
        x, y = float(x), float(y)

        if not (0 <= a < k and 0 <= b < k) or a == b:
            raise AlignmentError(
                f"Anchor ({x}, {y}) links surfaces ({a}, {b}); "
                f"need two distinct indices below {k}"
            )
        if not grid.contains(x, y):
            raise AlignmentError(f"Unstable equilibrium ({x}, {y}) lies outside the grid")

        overlap = surfaces[a].reached & surfaces[b].reached
        if not overlap.any():
            raise AlignmentError(
                f"Surfaces {a} and {b} share no reached node; "
                f"cannot align them at ({x}, {y})"
            )
        X, Y = grid.meshgrid()
        distance = np.where(overlap, (X - x) ** 2 + (Y - y) ** 2, np.inf)
        i, j = np.unravel_index(np.argmin(distance), distance.shape)
        return Anchor(point=(x, y), node=(int(i), int(j)), surfaces=(a, b))

    def _solve_offsets(self,
                       surfaces: Tuple[LocalSurface, ...],
                       anchors: Tuple[Anchor, ...]) -> np.ndarray:
        """
        Offsets with offsets[0] == 0 such that every anchor sees equal
        shifted values on both of its surfaces.

        A spanning tree of links is solved exactly by propagation from
        surface 0; redundant links are reconciled by least squares.
        """
        k = len(surfaces)
        offsets = np.zeros(k)
        if k == 1:
            return offsets

        adjacency: List[List[Tuple[int, Anchor]]] = [[] for _ in range(k)]
        for anchor in anchors:
            a, b = anchor.surfaces
            adjacency[a].append((b, anchor))
            adjacency[b].append((a, anchor))

        # Propagate offset_m = value_ref(node) - value_m(node) + offset_ref
        known = [False] * k
        known[0] = True
        queue = deque([0])
        while queue:
            ref = queue.popleft()
            for other, anchor in adjacency[ref]:
                if known[other]:
                    continue
                node = anchor.node
                offsets[other] = (surfaces[ref].values[node]
                                  - surfaces[other].values[node] + offsets[ref])
                known[other] = True
                queue.append(other)

        missing = [m for m in range(k) if not known[m]]
        if missing:
            raise AlignmentError(
                f"Surfaces {missing} are not linked to surface 0 by any unstable equilibrium"
            )

        if len(anchors) > k - 1:
            offsets = self._least_squares(surfaces, anchors, k)
        return offsets

    @staticmethod
    def _least_squares(surfaces: Tuple[LocalSurface, ...],
                       anchors: Tuple[Anchor, ...],
                       k: int) -> np.ndarray:
        """Offsets for an over-determined set of links, gauge offsets[0] = 0."""
        rows = len(anchors) + 1
        A = np.zeros((rows, k))
        rhs = np.zeros(rows)
        for r, anchor in enumerate(anchors):
            a, b = anchor.surfaces
            A[r, a] = 1.0
            A[r, b] = -1.0
            rhs[r] = surfaces[b].values[anchor.node] - surfaces[a].values[anchor.node]
        A[-1, 0] = 1.0
        solution, *_ = np.linalg.lstsq(A, rhs, rcond=None)
        solution[0] = 0.0
        return solution


def qp_global(surfaces: Sequence[LocalSurface],
              unstable_points: Sequence[AnchorSpec] = (),
              normalize: bool = True) -> GlobalSurface:
    """One-call global surface from local surfaces and unstable equilibria."""
    return GlobalStitcher(StitchParams(normalize=normalize)).stitch(surfaces, unstable_points)
