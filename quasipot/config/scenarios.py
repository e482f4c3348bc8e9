"""
Pre-defined example systems.

Each scenario bundles drift expressions, a domain, and the equilibria a
caller would otherwise find with a root finder: stable equilibria seed
local solves, unstable ones anchor global stitching.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.field import DriftField
from ..core.grid import Grid

Point = Tuple[float, float]


@dataclass
class Scenario:
    """Example system definition"""
    name: str
    fx: str
    fy: str
    x_bounds: Tuple[float, float]
    y_bounds: Tuple[float, float]
    stable: List[Point]
    unstable: List[Point] = field(default_factory=list)
    variables: Tuple[str, str] = ('x', 'y')
    description: str = ''

    def drift(self) -> DriftField:
        return DriftField.from_expressions(self.fx, self.fy, self.variables)

    def grid(self, nx: int, ny: Optional[int] = None) -> Grid:
        return Grid.from_bounds(self.x_bounds, self.y_bounds, nx, nx if ny is None else ny)


SCENARIO_DEFINITIONS = {
    'GRADIENT': dict(
        name='Isotropic gradient well',
        fx='-x',
        fy='-y',
        x_bounds=(-1.0, 1.0),
        y_bounds=(-1.0, 1.0),
        stable=[(0.0, 0.0)],
        description='b = -grad V with V = (x^2 + y^2) / 2',
    ),
    'ROTATIONAL': dict(
        name='Rotating linear sink',
        fx='-x - 2*y',
        fy='2*x - y',
        x_bounds=(-1.0, 1.0),
        y_bounds=(-1.0, 1.0),
        stable=[(0.0, 0.0)],
        description='b = -grad V + (-2y, 2x); rotation is orthogonal to grad V, '
                    'so U = (x^2 + y^2) / 2 and the remainder is (-2y, 2x)',
    ),
    'DOUBLE_WELL': dict(
        name='Symmetric double well',
        fx='x - x^3',
        fy='-y',
        x_bounds=(-1.5, 1.5),
        y_bounds=(-1.0, 1.0),
        stable=[(-1.0, 0.0), (1.0, 0.0)],
        unstable=[(0.0, 0.0)],
        description='b = -grad V with V = x^4/4 - x^2/2 + y^2/2; saddle at the origin',
    ),
    'CONSUMER_RESOURCE': dict(
        name='Consumer-resource with alternative states',
        fx='1.54*x*(1.0 - (x/10.14)) - (y*x*x)/(1.0 + x*x)',
        fy='((0.476*x*x*y)/(1 + x*x)) - 0.112590*y*y',
        x_bounds=(-0.5, 10.0),
        y_bounds=(-0.5, 10.0),
        stable=[(1.40491, 2.80808), (4.9040, 4.06187)],
        unstable=[(4.2008, 4.0039)],
        description='Logistic resource x grazed by consumer y with a type III '
                    'response; two stable states separated by a saddle',
    ),
}

# Cache for built scenarios
_SCENARIOS_CACHE: Optional[Dict[str, Scenario]] = None


def _build_scenarios() -> Dict[str, Scenario]:
    return {key: Scenario(**definition) for key, definition in SCENARIO_DEFINITIONS.items()}


def get_scenarios() -> Dict[str, Scenario]:
    """Get all scenarios, building them on first use."""
    global _SCENARIOS_CACHE

    if _SCENARIOS_CACHE is None:
        _SCENARIOS_CACHE = _build_scenarios()

    return _SCENARIOS_CACHE


def get_scenario(name: str) -> Scenario:
    """Get scenario by key (case-insensitive)."""
    scenarios = get_scenarios()
    key = name.upper()
    if key not in scenarios:
        raise KeyError(f"Unknown scenario: {name}. Available: {sorted(scenarios)}")
    return scenarios[key]


def __getattr__(name):
    if name == 'SCENARIOS':
        return get_scenarios()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
