"""
Parameter definitions for quasi-potential computations.

Groups:
- GridParams: domain bounds and step counts
- SolverParams: ordered-upwind marching controls
- StitchParams: global surface assembly
- DecompositionParams: finite-difference gradient

References:
- Cameron (2012) Physica D 241:1532-1550 - ordered upwind quasi-potential
- Moore et al. (2016) Ecology and Evolution 6:3808-3822 - QPot
- Freidlin & Wentzell (2012) Random Perturbations of Dynamical Systems
"""

from dataclasses import dataclass, field
from typing import Tuple

from ..core.grid import Grid


@dataclass
class GridParams:
    """
    Rectangular domain and resolution.

    nx, ny count steps, so the grid has (nx + 1) x (ny + 1) nodes.
    """
    x_bounds: Tuple[float, float] = (-1.0, 1.0)
    y_bounds: Tuple[float, float] = (-1.0, 1.0)
    nx: int = 100
    ny: int = 100

    def __post_init__(self):
        """Validate grid parameters"""
        assert self.x_bounds[0] < self.x_bounds[1], "x_bounds must be increasing"
        assert self.y_bounds[0] < self.y_bounds[1], "y_bounds must be increasing"
        assert self.nx > 0 and self.ny > 0, "Step counts must be positive"

    @property
    def hx(self) -> float:
        """Node spacing along x"""
        return (self.x_bounds[1] - self.x_bounds[0]) / self.nx

    @property
    def hy(self) -> float:
        """Node spacing along y"""
        return (self.y_bounds[1] - self.y_bounds[0]) / self.ny

    def build(self) -> Grid:
        return Grid.from_bounds(self.x_bounds, self.y_bounds, self.nx, self.ny)


@dataclass
class SolverParams:
    """
    Ordered-upwind marching controls.

    update_radius: Chebyshev radius (in nodes) of the update stencil
                   around a newly accepted node. 1 gives the 8-neighbourhood
                   split into triangles; larger radii trade speed for
                   accuracy on strongly rotational drifts.
    boundary_policy: 'continue' marches until the frontier is empty;
                     'stop' halts as soon as a node within boundary_margin
                     of the edge is accepted (remaining nodes stay +inf).
    boundary_margin: Fraction of each axis span treated as edge under 'stop'.
    xtol: Absolute tolerance on the mixing parameter in triangle updates.
    verbose: Print progress while marching.
    """
    update_radius: int = 1
    boundary_policy: str = 'continue'
    boundary_margin: float = 0.0
    xtol: float = 1e-6
    verbose: bool = False

    BOUNDARY_POLICIES = ('continue', 'stop')

    def __post_init__(self):
        """Validate solver parameters"""
        assert int(self.update_radius) == self.update_radius and self.update_radius >= 1, \
            "update_radius must be a positive integer"
        assert self.boundary_policy in self.BOUNDARY_POLICIES, \
            f"boundary_policy must be one of {self.BOUNDARY_POLICIES}"
        assert 0.0 <= self.boundary_margin < 0.5, "boundary_margin must be in [0, 0.5)"
        assert self.xtol > 0, "xtol must be positive"


@dataclass
class StitchParams:
    """
    Global surface assembly.

    normalize: Shift the offsets so the global minimum is exactly 0.
               Makes the result independent of surface order. With False,
               the first surface keeps offset 0.
    """
    normalize: bool = True


@dataclass
class DecompositionParams:
    """Finite-difference gradient: edge_order 1 or 2 at the grid boundary."""
    edge_order: int = 1

    def __post_init__(self):
        assert self.edge_order in (1, 2), "edge_order must be 1 or 2"


@dataclass
class QPotParams:
    """
    Complete parameter set.

    Aggregates all parameter groups with validation.
    """
    grid: GridParams = field(default_factory=GridParams)
    solver: SolverParams = field(default_factory=SolverParams)
    stitch: StitchParams = field(default_factory=StitchParams)
    decomposition: DecompositionParams = field(default_factory=DecompositionParams)

    def validate(self) -> None:
        """
        Run all validation checks.

        Ensures:
        1. Grid resolution supports the update stencil
        2. The edge margin under 'stop' leaves interior nodes to march over
        3. Group-level constraints still hold after in-place edits
        """
        print("Validating quasi-potential parameters...")

        # 1. Stencil fits in the grid
        radius = self.solver.update_radius
        assert radius <= min(self.grid.nx, self.grid.ny), \
            f"update_radius ({radius}) exceeds grid steps ({self.grid.nx}, {self.grid.ny})"
        print(f"  ✓ Stencil radius {radius} fits {self.grid.nx} x {self.grid.ny} steps")

        # 2. Interior left under the stop policy
        if self.solver.boundary_policy == 'stop':
            interior = (1.0 - 2.0 * self.solver.boundary_margin) * min(self.grid.nx, self.grid.ny)
            assert interior >= 2, \
                f"boundary_margin {self.solver.boundary_margin} leaves no interior nodes"
            print(f"  ✓ Stop policy interior span: {interior:.0f} nodes")

        # 3. Re-run group checks (fields may have been edited after construction)
        self.grid.__post_init__()
        self.solver.__post_init__()
        self.decomposition.__post_init__()
        print(f"  ✓ Spacing: hx = {self.grid.hx:.4g}, hy = {self.grid.hy:.4g}")

        print("✓ All parameter validations passed\n")

    def summary(self) -> str:
        """
        Generate parameter summary string.

        Returns:
            Formatted summary of key parameters
        """
        g, s = self.grid, self.solver
        lines = [
            "=" * 60,
            "QUASI-POTENTIAL PARAMETERS",
            "=" * 60,
            "",
            "GRID:",
            f"  x: [{g.x_bounds[0]}, {g.x_bounds[1]}] in {g.nx} steps (hx = {g.hx:.4g})",
            f"  y: [{g.y_bounds[0]}, {g.y_bounds[1]}] in {g.ny} steps (hy = {g.hy:.4g})",
            f"  Nodes: {(g.nx + 1) * (g.ny + 1):,}",
            "",
            "SOLVER:",
            f"  Update radius: {s.update_radius}",
            f"  Boundary policy: {s.boundary_policy} (margin {s.boundary_margin:.0%})",
            f"  Mixing tolerance: {s.xtol:g}",
            "",
            "STITCHING:",
            f"  Normalize global minimum: {self.stitch.normalize}",
            "",
            "DECOMPOSITION:",
            f"  Gradient edge order: {self.decomposition.edge_order}",
            "=" * 60,
        ]
        return "\n".join(lines)


def load_default_params() -> QPotParams:
    """
    Load default parameter set with validation.

    Returns:
        QPotParams: Validated parameter set
    """
    params = QPotParams()
    params.validate()
    return params


if __name__ == "__main__":
    print("Testing parameter module...\n")

    params = load_default_params()
    print(params.summary())

    print("\nTesting validation failure...")
    bad_params = QPotParams()
    bad_params.solver.update_radius = 500
    try:
        bad_params.validate()
    except AssertionError as e:
        print(f"  ✓ Caught invalid parameter: {e}")
