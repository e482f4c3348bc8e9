"""Tests for the gradient / remainder decomposition."""

import numpy as np
import pytest

from conftest import bowl, make_surface
from quasipot.analysis.verification import remainder_statistics
from quasipot.config.parameters import DecompositionParams, SolverParams
from quasipot.core.decomposer import FieldDecomposer, vec_decom_all
from quasipot.core.errors import ShapeMismatchError
from quasipot.core.field import evaluate_grid
from quasipot.core.grid import Grid
from quasipot.core.local_solver import QuasiPotentialSolver
from quasipot.core.surface import VectorFieldSet


class TestDecomposition:

    def test_gradient_drift_has_small_remainder(self, coarse_surface, gradient_field):
        fields = FieldDecomposer(gradient_field).decompose(coarse_surface)
        stats = remainder_statistics(fields)
        assert stats['max'] < 0.1

    def test_remainder_identity(self, coarse_surface, gradient_field):
        fields = FieldDecomposer(gradient_field).decompose(coarse_surface)
        for axis in (0, 1):
            np.testing.assert_array_equal(
                fields.remainder[axis],
                fields.deterministic[axis] - fields.gradient[axis],
            )

    def test_deterministic_is_drift(self, coarse_surface, gradient_field):
        fields = FieldDecomposer(gradient_field).decompose(coarse_surface)
        FX, FY = evaluate_grid(gradient_field, coarse_surface.grid)
        np.testing.assert_array_equal(fields.deterministic[0], FX)
        np.testing.assert_array_equal(fields.deterministic[1], FY)

    def test_one_call_matches_decomposer(self, coarse_surface, gradient_field):
        fields = vec_decom_all(coarse_surface, gradient_field, (-1.0, 1.0), (-1.0, 1.0), 4, 4)
        reference = FieldDecomposer(gradient_field).decompose(coarse_surface)
        np.testing.assert_array_equal(fields.gradient[0], reference.gradient[0])
        assert fields.grid.matches(coarse_surface.grid)

    def test_grid_mismatch(self, coarse_surface, gradient_field):
        decomposer = FieldDecomposer(gradient_field)
        with pytest.raises(ShapeMismatchError):
            decomposer.decompose(coarse_surface, Grid(-1.0, 1.0, -1.0, 1.0, 5, 5))
        with pytest.raises(ShapeMismatchError):
            decomposer.decompose_bounds(coarse_surface, (-1.0, 2.0), (-1.0, 1.0), 4, 4)

    def test_unreached_nodes_give_nan(self, coarse_grid, gradient_field):
        params = SolverParams(boundary_policy='stop')
        surface = QuasiPotentialSolver(coarse_grid, gradient_field, params).solve((0.0, 0.0))
        fields = FieldDecomposer(gradient_field).decompose(surface)
        gx, gy = fields.gradient
        assert np.isnan(gx[0, 0]) and np.isnan(gy[0, 0])
        assert np.isfinite(gx[2, 2])
        assert np.all(np.isfinite(fields.deterministic[0]))


class TestFiniteDifferences:

    def test_interior_exact_for_quadratic(self, coarse_grid, gradient_field):
        X, Y = coarse_grid.meshgrid()
        surface = make_surface(coarse_grid, bowl(X, Y))
        gx, gy = FieldDecomposer(gradient_field).gradient(surface)
        np.testing.assert_allclose(gx[1:-1, :], -X[1:-1, :], atol=1e-12)
        np.testing.assert_allclose(gy[:, 1:-1], -Y[:, 1:-1], atol=1e-12)
        # one-sided first-order stencil at the edge
        assert gx[0, 0] == pytest.approx(0.75)

    def test_second_order_edges(self, coarse_grid, gradient_field):
        X, Y = coarse_grid.meshgrid()
        surface = make_surface(coarse_grid, bowl(X, Y))
        decomposer = FieldDecomposer(gradient_field, DecompositionParams(edge_order=2))
        fields = decomposer.decompose(surface)
        np.testing.assert_allclose(fields.gradient[0], -X, atol=1e-12)
        np.testing.assert_allclose(fields.gradient[1], -Y, atol=1e-12)
        assert remainder_statistics(fields, interior_only=False)['max'] < 1e-12

    def test_second_order_falls_back_on_thin_grid(self, parabola_surfaces, gradient_field):
        _, surfaces, _ = parabola_surfaces
        decomposer = FieldDecomposer(gradient_field, DecompositionParams(edge_order=2))
        gx, gy = decomposer.gradient(surfaces[0])
        assert gx[3, 0] == pytest.approx(-4.0)
        assert np.all(gy == 0.0)


class TestVectorFieldSet:

    def test_component_access(self, coarse_surface, gradient_field):
        fields = FieldDecomposer(gradient_field).decompose(coarse_surface)
        assert fields.component('gradient') is fields.gradient
        np.testing.assert_allclose(fields.magnitude('deterministic')[4, 2], 1.0)
        with pytest.raises(KeyError):
            fields.component('curl')

    def test_shape_checked(self, coarse_grid):
        good = np.zeros(coarse_grid.shape)
        bad = np.zeros((3, 3))
        with pytest.raises(ShapeMismatchError):
            VectorFieldSet(coarse_grid, (good, good), (good, good), (good, bad))
