"""Tests for landscape analysis, verification and refinement helpers."""

import math

import numpy as np
import pytest

from conftest import bowl, make_surface
from quasipot.analysis.convergence import observed_order, refinement_sweep
from quasipot.analysis.landscape import barrier_height, find_minima, rank_stability, transect
from quasipot.analysis.verification import (
    causality_violations,
    error_statistics,
    remainder_statistics,
    surface_statistics,
)
from quasipot.core.decomposer import FieldDecomposer
from quasipot.core.field import DriftField
from quasipot.core.local_solver import qpotential
from quasipot.core.stitcher import qp_global
from quasipot.core.surface import LocalSurface


@pytest.fixture
def double_well_global(double_well_surfaces):
    scenario, surfaces = double_well_surfaces
    return scenario, qp_global(surfaces, scenario.unstable)


class TestLandscape:

    def test_double_well_minima(self, double_well_global):
        _, surface = double_well_global
        minima = find_minima(surface)
        assert (2, 4) in minima
        assert (10, 4) in minima
        assert (6, 4) not in minima

    def test_minima_threshold(self, double_well_global):
        _, surface = double_well_global
        assert find_minima(surface, threshold=-1.0) == []

    def test_barrier_height(self, double_well_global):
        scenario, surface = double_well_global
        saddle = scenario.unstable[0]
        # V(0) - V(+-1) = 1/4 for V = -x^2/2 + x^4/4 + y^2/2
        assert barrier_height(surface, scenario.stable[0], saddle) == pytest.approx(0.25, abs=0.03)
        assert barrier_height(surface, scenario.stable[1], saddle) == pytest.approx(0.25, abs=0.03)

    def test_rank_stability(self, parabola_surfaces):
        _, surfaces, anchors = parabola_surfaces
        surface = qp_global(surfaces, anchors)
        ranking = rank_stability(surface, [(1.0, 0.0), (5.0, 0.0), (8.0, 0.0)])

        assert ranking[0]['point'] == (8.0, 0.0)
        assert ranking[0]['node'] == (8, 0)
        assert ranking[0]['value'] == 0.0
        assert [r['value'] for r in ranking[1:]] == [3.0, 3.0]

    def test_transect_through_seed(self, coarse_surface):
        distance, values = transect(coarse_surface, (-1.0, 0.0), (1.0, 0.0), n_points=5)
        np.testing.assert_allclose(distance, [0.0, 0.5, 1.0, 1.5, 2.0])
        np.testing.assert_allclose(values, [0.5, 0.125, 0.0, 0.125, 0.5], atol=1e-9)

    def test_interpolation(self, coarse_surface):
        # bilinear between (0, 0) = 0 and (0.5, 0) = 0.125
        assert coarse_surface.interpolate(0.25, 0.0) == pytest.approx(0.0625)
        assert math.isnan(coarse_surface.interpolate(1.5, 0.0))

    def test_surface_values_are_read_only(self, coarse_grid):
        X, Y = coarse_grid.meshgrid()
        source = bowl(X, Y)
        surface = make_surface(coarse_grid, source)
        before = surface.interpolate(0.25, 0.0)

        source[3, 2] = 10.0
        with pytest.raises(ValueError):
            surface.values[3, 2] = 10.0
        assert surface.values[3, 2] == pytest.approx(0.125)
        assert surface.interpolate(0.25, 0.0) == pytest.approx(before)


class TestVerification:

    def test_solver_output_is_causal(self, double_well_surfaces):
        _, surfaces = double_well_surfaces
        for surface in surfaces:
            assert causality_violations(surface) == []

    def test_detects_out_of_order_values(self, coarse_surface):
        values = coarse_surface.values.copy()
        values[4, 4] = 0.1
        tampered = LocalSurface(
            grid=coarse_surface.grid,
            values=values,
            seed=coarse_surface.seed,
            seed_node=coarse_surface.seed_node,
            acceptance_order=coarse_surface.acceptance_order,
        )
        assert (4, 4) in causality_violations(tampered)

    def test_error_statistics(self, coarse_surface):
        stats = error_statistics(coarse_surface, bowl)
        assert stats['max_error'] < 0.05
        assert stats['rms_error'] <= stats['max_error']
        assert stats['n_nodes'] == 25

    def test_error_statistics_global(self, coarse_surface):
        stats = error_statistics(qp_global([coarse_surface]), bowl)
        assert stats['max_error'] < 0.05

    def test_surface_statistics(self, coarse_surface):
        stats = surface_statistics(coarse_surface)
        assert stats['n_nodes'] == 25
        assert stats['n_unreached'] == 0
        assert stats['min'] == 0.0
        assert stats['max'] == pytest.approx(1.0)
        assert stats['percentiles'][50] <= stats['percentiles'][95]


class TestConvergence:

    def test_refinement_sweep(self, gradient_field):
        results = refinement_sweep(gradient_field, (0.0, 0.0), (-1.0, 1.0), (-1.0, 1.0),
                                   [4, 8], bowl)
        assert results['steps'] == [4, 8]
        assert results['h'] == pytest.approx([0.5, 0.25])
        assert all(err < 0.06 for err in results['max_error'])
        assert isinstance(results['order'], float)

    @pytest.fixture(scope='class')
    def gradient_sweep(self):
        field = DriftField.from_expressions("-x", "-y")
        steps = [8, 16, 32]
        results = refinement_sweep(field, (0.0, 0.0), (-1.0, 1.0), (-1.0, 1.0), steps, bowl)
        remainders = []
        for n in steps:
            surface = qpotential(field, (0.0, 0.0), (-1.0, 1.0), (-1.0, 1.0), n, n)
            fields = FieldDecomposer(field).decompose(surface)
            remainders.append(remainder_statistics(fields)['max'])
        return results, remainders

    def test_error_decreases_with_spacing(self, gradient_sweep):
        results, _ = gradient_sweep
        rms = results['rms_error']
        assert all(fine < coarse for coarse, fine in zip(rms, rms[1:]))
        assert results['order'] > 0

    def test_remainder_shrinks_with_spacing(self, gradient_sweep):
        _, remainders = gradient_sweep
        assert remainders[-1] < remainders[0]

    def test_observed_order(self):
        h = [0.4, 0.2, 0.1]
        error = [0.16, 0.04, 0.01]
        assert observed_order(h, error) == pytest.approx(2.0)

    def test_observed_order_needs_two_points(self):
        assert math.isnan(observed_order([0.1], [0.01]))
        assert math.isnan(observed_order([0.2, 0.1], [0.0, 0.0]))
