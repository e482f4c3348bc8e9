#!/usr/bin/env python3
"""Run grid-refinement sweep (error vs h) on gradient and rotational drifts."""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from quasipot.analysis.convergence import refinement_sweep
from quasipot.config.scenarios import get_scenario
import matplotlib.pyplot as plt


def bowl(x, y):
    return 0.5 * (x ** 2 + y ** 2)


steps = [8, 16, 32, 64]
fig, ax = plt.subplots(figsize=(8, 6))

print("Running refinement sweeps...")
for key in ('GRADIENT', 'ROTATIONAL'):
    scenario = get_scenario(key)
    results = refinement_sweep(scenario.drift(), scenario.stable[0],
                               scenario.x_bounds, scenario.y_bounds, steps, bowl)
    print(f"\n{scenario.name}:")
    for n, h, err in zip(results['steps'], results['h'], results['rms_error']):
        print(f"  n={n:3d} (h={h:.4f}): RMS error {err:.4g}")
    print(f"  Observed order: {results['order']:.2f}")
    ax.loglog(results['h'], results['rms_error'], 'o-', label=scenario.name)

ax.set_xlabel('Grid spacing h')
ax.set_ylabel('RMS error vs analytic U')
ax.set_title('Grid Refinement')
ax.legend()
ax.grid(True, alpha=0.3)
plt.tight_layout()

output_dir = Path(__file__).parent.parent / 'output'
output_dir.mkdir(exist_ok=True)
output_path = output_dir / 'convergence.png'
plt.savefig(output_path, dpi=150)
print(f"\nSaved: {output_path}")
