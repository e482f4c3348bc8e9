"""Tests for drift parsing and evaluation."""

import math

import numpy as np
import pytest

from quasipot.core.errors import DomainError
from quasipot.core.field import DriftField, evaluate, evaluate_grid
from quasipot.core.grid import Grid


class TestExpressionParsing:

    def test_linear_drift(self, gradient_field):
        assert evaluate(gradient_field, 0.5, 0.25) == (-0.5, -0.25)
        assert gradient_field.is_string_form
        assert gradient_field.vectorized

    def test_caret_is_power(self):
        field = DriftField.from_expressions("x^2", "y")
        assert evaluate(field, 3.0, 1.0) == pytest.approx((9.0, 1.0))

    def test_custom_variable_names(self):
        field = DriftField.from_expressions("F*(1 - F) - N", "N*(F - 0.5)",
                                            variables=('F', 'N'))
        fx, fy = evaluate(field, 0.5, 1.0)
        assert fx == pytest.approx(-0.75)
        assert fy == pytest.approx(0.0)
        assert "dF/dt" in repr(field)

    def test_unbound_symbol(self):
        with pytest.raises(DomainError, match="unbound"):
            DriftField.from_expressions("-a*x", "-y")

    def test_parse_error(self):
        with pytest.raises(DomainError):
            DriftField.from_expressions("x + (", "-y")

    def test_wrong_variable_count(self):
        with pytest.raises(DomainError):
            DriftField.from_expressions("-x", "-y", variables=('x',))


class TestPointEvaluation:

    def test_closure(self):
        field = DriftField.from_callable(lambda x, y: (y, -x))
        assert evaluate(field, 1.0, 2.0) == (2.0, -1.0)
        assert not field.is_string_form
        assert not field.vectorized

    def test_components(self):
        field = DriftField.from_components(lambda x, y: x * y, lambda x, y: x - y)
        assert evaluate(field, 2.0, 3.0) == (6.0, -1.0)

    def test_division_by_zero(self):
        field = DriftField.from_expressions("1/x", "-y")
        with pytest.raises(DomainError):
            evaluate(field, 0.0, 1.0)

    def test_nan_output(self):
        field = DriftField.from_callable(lambda x, y: (math.nan, 0.0))
        with pytest.raises(DomainError):
            evaluate(field, 0.0, 0.0)

    def test_not_a_pair(self):
        field = DriftField.from_callable(lambda x, y: x + y)
        with pytest.raises(DomainError):
            evaluate(field, 0.0, 0.0)

    def test_not_callable(self):
        with pytest.raises(TypeError):
            DriftField("-x")


class TestGridEvaluation:

    def test_vectorized_matches_pointwise(self, coarse_grid):
        parsed = DriftField.from_expressions("x - x^3", "-y + x*y")
        closure = DriftField.from_callable(lambda x, y: (x - x ** 3, -y + x * y))

        FX, FY = evaluate_grid(parsed, coarse_grid)
        GX, GY = evaluate_grid(closure, coarse_grid)

        assert FX.shape == coarse_grid.shape
        np.testing.assert_allclose(FX, GX)
        np.testing.assert_allclose(FY, GY)

    def test_constant_expression_broadcasts(self, coarse_grid):
        FX, FY = evaluate_grid(DriftField.from_expressions("1", "-y"), coarse_grid)
        assert FX.shape == coarse_grid.shape
        assert np.all(FX == 1.0)
        np.testing.assert_allclose(FY[0], -coarse_grid.y_coords)

    @pytest.mark.parametrize("func", [
        lambda x, y: (x[:2], y),
        lambda x, y: ("fast", y),
    ])
    def test_malformed_vectorized_output(self, coarse_grid, func):
        field = DriftField.from_callable(func, vectorized=True)
        with pytest.raises(DomainError):
            evaluate_grid(field, coarse_grid)

    def test_non_finite_on_grid(self):
        grid = Grid(0.0, 1.0, 0.0, 1.0, 2, 2)
        with pytest.raises(DomainError):
            evaluate_grid(DriftField.from_expressions("1/x", "-y"), grid)
