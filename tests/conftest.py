"""Shared fixtures for the quasipot test suite."""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from quasipot.config.scenarios import get_scenario
from quasipot.core.field import DriftField
from quasipot.core.grid import Grid
from quasipot.core.local_solver import QuasiPotentialSolver
from quasipot.core.surface import LocalSurface


def bowl(x, y):
    return 0.5 * (x ** 2 + y ** 2)


@pytest.fixture
def gradient_field():
    return DriftField.from_expressions("-x", "-y")


@pytest.fixture
def coarse_grid():
    """[-1, 1]^2 in 4 x 4 steps (h = 0.5)"""
    return Grid(-1.0, 1.0, -1.0, 1.0, 4, 4)


@pytest.fixture
def coarse_surface(coarse_grid, gradient_field):
    return QuasiPotentialSolver(coarse_grid, gradient_field).solve((0.0, 0.0))


@pytest.fixture
def double_well_surfaces():
    scenario = get_scenario('DOUBLE_WELL')
    grid = scenario.grid(12, 8)
    solver = QuasiPotentialSolver(grid, scenario.drift())
    return scenario, solver.solve_many(scenario.stable)


def make_surface(grid, values, seed=(0.0, 0.0)):
    """LocalSurface from a raw value array (acceptance order by value)."""
    values = np.asarray(values, dtype=float)
    order = np.full(grid.shape, -1, dtype=np.int64)
    finite = np.isfinite(values)
    ranks = np.argsort(values[finite], kind='stable').argsort()
    order[finite] = ranks
    return LocalSurface(
        grid=grid,
        values=values,
        seed=seed,
        seed_node=grid.nearest_node(*seed),
        acceptance_order=order,
    )


@pytest.fixture
def parabola_surfaces():
    """
    Three synthetic basins on x in [0, 9] (h = 1) with minima at x = 1, 5, 8.

    Anchors at x = 3 (links 0-1) and x = 6 (links 1-2), given as explicit
    (x, y, a, b) pairs since basin 2 does not border basin 0.
    """
    grid = Grid(0.0, 9.0, 0.0, 1.0, 9, 1)
    X, _ = grid.meshgrid()
    surfaces = [
        make_surface(grid, (X - c) ** 2, seed=(c, 0.0))
        for c in (1.0, 5.0, 8.0)
    ]
    anchors = [(3.0, 0.0, 0, 1), (6.0, 0.0, 1, 2)]
    return grid, surfaces, anchors


# V = x^2 (x^2 - 4)^2 / 16 + y^2 / 2: wells at x = 0, +-2, saddles at x = +-2/sqrt(3)
THREE_WELL_SADDLE = 2.0 / np.sqrt(3.0)


@pytest.fixture(scope='module')
def three_well_surfaces():
    field = DriftField.from_expressions("-(6*x^5 - 32*x^3 + 32*x)/16", "-y")
    grid = Grid(-3.0, 3.0, -1.0, 1.0, 24, 8)
    seeds = [(-2.0, 0.0), (0.0, 0.0), (2.0, 0.0)]
    return QuasiPotentialSolver(grid, field).solve_many(seeds)
