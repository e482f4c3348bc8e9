"""Checks on computed surfaces: causality, accuracy against an analytic potential."""

import numpy as np


def surface_statistics(surface):
    """
    Summary statistics of a surface.

    Returns:
        Dictionary with node counts and value statistics over reached nodes
    """
    percentiles = [5, 25, 50, 75, 95]
    finite = surface.values[surface.reached]

    stats = {
        'n_nodes': surface.grid.size,
        'n_reached': int(finite.size),
        'n_unreached': surface.unreached_count,
    }
    if finite.size:
        stats.update({
            'min': float(finite.min()),
            'max': float(finite.max()),
            'mean': float(finite.mean()),
            'std': float(finite.std()),
            'percentiles': {p: float(np.percentile(finite, p)) for p in percentiles},
        })
    return stats


def causality_violations(surface, radius=1, tol=1e-12):
    """
    Re-walk a local surface in acceptance order.

    Two checks per accepted node:
    1. Its value is not below the previously accepted value
    2. Some node within `radius` accepted before it has a value no larger
       than its own (the seed is exempt)

    Returns:
        List of (i, j) nodes failing either check; empty if causal
    """
    order = surface.acceptance_order
    values = surface.values
    grid = surface.grid

    accepted = np.argwhere(order >= 0)
    ranks = order[order >= 0]
    sequence = accepted[np.argsort(ranks)]

    violations = []
    previous = -np.inf
    for i, j in sequence:
        node = (int(i), int(j))
        value = values[node]
        bad = value < previous - tol
        previous = max(previous, value)

        if node != tuple(surface.seed_node):
            earlier = [values[n] for n in grid.neighbours(node[0], node[1], radius)
                       if 0 <= order[n] < order[node]]
            if not earlier or min(earlier) > value + tol:
                bad = True

        if bad:
            violations.append(node)
    return violations


def error_statistics(surface, potential):
    """
    Compare a surface with an analytic potential V.

    The additive constant is fixed by matching at the seed node (local
    surfaces) or at the global minimum node (global surfaces).

    Args:
        surface: LocalSurface or GlobalSurface
        potential: Vectorised callable V(X, Y)

    Returns:
        Dictionary with max, mean and RMS absolute error over reached nodes
    """
    X, Y = surface.grid.meshgrid()
    V = np.asarray(potential(X, Y), dtype=float) * np.ones(surface.grid.shape)

    anchor = getattr(surface, 'seed_node', None)
    if anchor is None:
        masked = np.where(surface.reached, surface.values, np.inf)
        anchor = np.unravel_index(np.argmin(masked), masked.shape)
    reference = V[tuple(anchor)] - surface.values[tuple(anchor)]

    error = np.abs(surface.values - (V - reference))[surface.reached]
    return {
        'max_error': float(error.max()),
        'mean_error': float(error.mean()),
        'rms_error': float(np.sqrt(np.mean(error ** 2))),
        'n_nodes': int(error.size),
    }


def remainder_statistics(fields, interior_only=True):
    """
    Magnitude of the remainder field.

    Args:
        fields: VectorFieldSet
        interior_only: Ignore the one-sided boundary stencils

    Returns:
        Dictionary with max and mean remainder magnitude (nan nodes skipped)
    """
    magnitude = fields.magnitude('remainder')
    if interior_only:
        magnitude = magnitude[1:-1, 1:-1]
    finite = magnitude[np.isfinite(magnitude)]
    if not finite.size:
        return {'max': float('nan'), 'mean': float('nan')}
    return {'max': float(finite.max()), 'mean': float(finite.mean())}


if __name__ == "__main__":
    """Demo: accuracy on the gradient scenario"""
    from quasipot.config.scenarios import get_scenario
    from quasipot.core.local_solver import QuasiPotentialSolver

    scenario = get_scenario('GRADIENT')
    grid = scenario.grid(20)
    surface = QuasiPotentialSolver(grid, scenario.drift()).solve(scenario.stable[0])

    stats = error_statistics(surface, lambda x, y: 0.5 * (x ** 2 + y ** 2))
    print(f"Max error: {stats['max_error']:.4g}")
    print(f"RMS error: {stats['rms_error']:.4g}")
    print(f"Causality violations: {len(causality_violations(surface))}")
