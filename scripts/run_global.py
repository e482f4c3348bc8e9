#!/usr/bin/env python3
"""
Global quasi-potential for the consumer-resource model.

Two stable states (low and high resource) separated by a saddle:
1. Solve one local surface per stable state
2. Stitch them at the saddle into a global surface
3. Decompose the drift into gradient and remainder parts

Usage:
    python scripts/run_global.py [steps]
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from quasipot.analysis.landscape import barrier_height, rank_stability
from quasipot.analysis.tables import save_surface_csv
from quasipot.analysis.verification import remainder_statistics, surface_statistics
from quasipot.config.parameters import GridParams, QPotParams
from quasipot.config.scenarios import get_scenario
from quasipot.core.decomposer import FieldDecomposer
from quasipot.core.local_solver import QuasiPotentialSolver
from quasipot.core.stitcher import GlobalStitcher
from quasipot.visualization.landscape_plots import plot_decomposition, plot_landscape


def main():
    print("=" * 80)
    print("GLOBAL QUASI-POTENTIAL: CONSUMER-RESOURCE MODEL")
    print("=" * 80)

    steps = int(sys.argv[1]) if len(sys.argv) > 1 else 60
    scenario = get_scenario('CONSUMER_RESOURCE')

    # 1. Parameters
    print("\n1. Loading parameters...")
    params = QPotParams(grid=GridParams(scenario.x_bounds, scenario.y_bounds, steps, steps))
    params.solver.verbose = True
    params.validate()
    print(params.summary())

    grid = params.grid.build()
    field = scenario.drift()
    print(f"\n  {field}")

    # 2. Local surfaces
    print("\n2. Solving local surfaces...")
    solver = QuasiPotentialSolver(grid, field, params.solver)
    surfaces = solver.solve_many(scenario.stable, n_workers=len(scenario.stable))

    # 3. Stitch
    print("\n3. Stitching at the saddle...")
    global_surface = GlobalStitcher(params.stitch).stitch(surfaces, scenario.unstable)
    print(f"  {global_surface}")
    saddle = scenario.unstable[0]
    for k, surface in enumerate(surfaces):
        aligned = surface.value_near(*saddle) + global_surface.offsets[k]
        print(f"  Surface {k} at saddle after offset: {aligned:.5f}")

    # 4. Stability
    print("\n4. Relative stability:")
    for rank, entry in enumerate(rank_stability(global_surface, scenario.stable), start=1):
        barrier = barrier_height(global_surface, entry['point'], saddle)
        print(f"  #{rank} {entry['point']}: U = {entry['value']:.5f}, barrier = {barrier:.5f}")

    stats = surface_statistics(global_surface)
    print(f"  Reached {stats['n_reached']:,}/{stats['n_nodes']:,} nodes, "
          f"U in [{stats['min']:.4f}, {stats['max']:.4f}]")

    # 5. Decomposition
    print("\n5. Decomposing drift...")
    fields = FieldDecomposer(field, params.decomposition).decompose(global_surface, grid)
    rem = remainder_statistics(fields)
    print(f"  Remainder magnitude: mean {rem['mean']:.4f}, max {rem['max']:.4f}")

    # 6. Output
    print("\n6. Saving output...")
    output_dir = Path(__file__).parent.parent / 'output'
    output_dir.mkdir(exist_ok=True)

    csv_path = save_surface_csv(global_surface, output_dir / 'global_consumer_resource.csv')
    print(f"  Saved: {csv_path}")

    points = {f'stable {k}': p for k, p in enumerate(scenario.stable)}
    points['saddle'] = saddle
    plot_landscape(global_surface, cap=0.5, points=points,
                   save_path=output_dir / 'global_consumer_resource.png')
    print(f"  Saved: {output_dir / 'global_consumer_resource.png'}")

    plot_decomposition(fields, stride=max(steps // 20, 1),
                       save_path=output_dir / 'decomposition_consumer_resource.png')
    print(f"  Saved: {output_dir / 'decomposition_consumer_resource.png'}")

    print("\n" + "=" * 80)
    print("✓ Global computation complete!")
    print("=" * 80)

    return 0


if __name__ == "__main__":
    sys.exit(main())
