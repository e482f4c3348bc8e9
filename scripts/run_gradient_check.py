#!/usr/bin/env python3
"""Check the solver on b = (-x, -y), where U = (x^2 + y^2) / 2 exactly."""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from quasipot.analysis.verification import (causality_violations, error_statistics,
                                            remainder_statistics)
from quasipot.config.scenarios import get_scenario
from quasipot.core.decomposer import FieldDecomposer
from quasipot.core.local_solver import QuasiPotentialSolver
from quasipot.visualization.landscape_plots import plot_landscape

scenario = get_scenario('GRADIENT')
field = scenario.drift()

print(f"Running {scenario.name} ({scenario.description})")
for steps in (4, 40):
    grid = scenario.grid(steps)
    surface = QuasiPotentialSolver(grid, field).solve(scenario.stable[0])
    stats = error_statistics(surface, lambda x, y: 0.5 * (x ** 2 + y ** 2))
    fields = FieldDecomposer(field).decompose(surface)
    rem = remainder_statistics(fields)

    print(f"\n{steps} x {steps} steps (h = {grid.hx:.3f}):")
    print(f"  U(0.5, 0.5) = {surface.value_near(0.5, 0.5):.4f} (exact 0.25)")
    print(f"  U(1.0, 1.0) = {surface.value_near(1.0, 1.0):.4f} (exact 1.00)")
    print(f"  Max error: {stats['max_error']:.4f}")
    print(f"  Interior remainder: max {rem['max']:.4f}")
    print(f"  Causality violations: {len(causality_violations(surface))}")

output_dir = Path(__file__).parent.parent / 'output'
output_dir.mkdir(exist_ok=True)
output_path = output_dir / 'gradient_check.png'
plot_landscape(surface, points={'seed': scenario.stable[0]}, save_path=output_path)
print(f"\nSaved: {output_path}")
