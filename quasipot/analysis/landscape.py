"""Landscape analysis: minima, barrier heights, relative stability, transects."""

from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy.ndimage import minimum_filter

Point = Tuple[float, float]


def find_minima(surface, threshold=None, size=3, exclude_boundary=True):
    """
    Find local minima (attractors) of a quasi-potential surface.

    Args:
        surface: LocalSurface or GlobalSurface
        threshold: Keep only minima with value below this (all if None)
        size: Neighbourhood width of the minimum filter
        exclude_boundary: Drop minima on the grid edge (usually truncation artefacts)

    Returns:
        List of (i, j) nodes sorted by value
    """
    values = surface.values
    local_min = np.isfinite(values) & (values == minimum_filter(values, size=size, mode='nearest'))

    if threshold is not None:
        local_min &= values < threshold

    if exclude_boundary:
        local_min[0, :] = local_min[-1, :] = False
        local_min[:, 0] = local_min[:, -1] = False

    nodes = [tuple(int(k) for k in n) for n in np.argwhere(local_min)]
    return sorted(nodes, key=lambda n: values[n])


def barrier_height(surface, minimum: Point, saddle: Point) -> float:
    """
    Quasi-potential barrier from a minimum to a saddle.

    Larger barriers mean the state is harder to leave under small noise.
    """
    return surface.value_near(*saddle) - surface.value_near(*minimum)


def rank_stability(surface, stable_points: Sequence[Point]) -> List[Dict]:
    """
    Order stable states by global quasi-potential (lowest = most stable).

    Args:
        surface: Global surface (values comparable across basins)
        stable_points: Stable equilibrium coordinates

    Returns:
        List of {'point', 'node', 'value'} dicts, most stable first
    """
    ranking = []
    for point in stable_points:
        node = surface.grid.nearest_node(*point)
        ranking.append({
            'point': (float(point[0]), float(point[1])),
            'node': node,
            'value': float(surface.values[node]),
        })
    return sorted(ranking, key=lambda r: r['value'])


def transect(surface, start: Point, end: Point, n_points: int = 100):
    """
    Sample the surface along a straight segment.

    Useful for profiles through two minima and the saddle between them.

    Returns:
        distance: Arc length from start, shape (n_points,)
        values: Interpolated quasi-potential (nan where unreached)
    """
    s = np.linspace(0.0, 1.0, n_points)
    x = start[0] + s * (end[0] - start[0])
    y = start[1] + s * (end[1] - start[1])
    length = np.hypot(end[0] - start[0], end[1] - start[1])
    return s * length, surface.interpolate(x, y)


if __name__ == "__main__":
    """Demo: minima and barriers of the double-well landscape"""
    from quasipot.config.scenarios import get_scenario
    from quasipot.core.local_solver import QuasiPotentialSolver
    from quasipot.core.stitcher import GlobalStitcher

    scenario = get_scenario('DOUBLE_WELL')
    grid = scenario.grid(30, 20)
    solver = QuasiPotentialSolver(grid, scenario.drift())

    print("Solving double-well basins...")
    surfaces = solver.solve_many(scenario.stable)
    global_surface = GlobalStitcher().stitch(surfaces, scenario.unstable)

    print("Minima:")
    for node in find_minima(global_surface):
        print(f"  {grid.coordinate(*node)}: U = {global_surface.values[node]:.4f}")

    for point in scenario.stable:
        height = barrier_height(global_surface, point, scenario.unstable[0])
        print(f"  Barrier from {point}: {height:.4f} (exact 0.25)")
