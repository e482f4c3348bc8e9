"""
Field evaluator: pointwise evaluation of the drift vector field.

The drift is the deterministic skeleton (fx(x, y), fy(x, y)) of the SDE.
It is held as a pure function with the fixed signature (x, y) -> (fx, fy).
Two construction routes:

- A Python closure, used as-is.
- Two expression strings, parsed once with sympy and compiled to numpy
  functions with lambdify. Parsing lives here only; the solver stack
  never sees the strings.

Example:
    >>> field = DriftField.from_expressions("-x", "-y")
    >>> evaluate(field, 0.5, 0.25)
    (-0.5, -0.25)
"""

from typing import Callable, Optional, Sequence, Tuple

import numpy as np
import sympy

from .errors import DomainError
from .grid import Grid

DriftFunction = Callable[[float, float], Tuple[float, float]]


class DriftField:
    """
    Drift vector field of a two-dimensional SDE.

    Attributes:
        func: Callable (x, y) -> (fx, fy) on scalars
        array_func: Same map on numpy arrays, or None if func is scalar-only
        expressions: Source strings (fx, fy) if built from expressions, else None
        variables: Names of the two state variables
    """

    def __init__(self,
                 func: DriftFunction,
                 expressions: Optional[Tuple[str, str]] = None,
                 variables: Tuple[str, str] = ('x', 'y'),
                 vectorized: bool = False,
                 array_func: Optional[DriftFunction] = None):
        if not callable(func):
            raise TypeError(f"Drift must be callable, got {type(func).__name__}")
        self.func = func
        self.array_func = array_func if array_func is not None else (func if vectorized else None)
        self.expressions = expressions
        self.variables = tuple(variables)

    @property
    def vectorized(self) -> bool:
        return self.array_func is not None

    @classmethod
    def from_callable(cls, func: DriftFunction, vectorized: bool = False) -> "DriftField":
        """Wrap a closure returning the (fx, fy) pair."""
        return cls(func, vectorized=vectorized)

    @classmethod
    def from_components(cls,
                        fx: Callable[[float, float], float],
                        fy: Callable[[float, float], float],
                        vectorized: bool = False) -> "DriftField":
        """Wrap two scalar closures, one per component."""
        return cls(lambda x, y: (fx(x, y), fy(x, y)), vectorized=vectorized)

    @classmethod
    def from_expressions(cls,
                         fx: str,
                         fy: str,
                         variables: Sequence[str] = ('x', 'y')) -> "DriftField":
        """
        Parse two expression strings over the state variables.

        '^' is accepted as exponentiation.

        Args:
            fx, fy: Right-hand sides dx/dt and dy/dt
            variables: Names of the state variables as they appear in fx, fy

        Raises:
            DomainError: If an expression cannot be parsed or references a
                symbol other than the two state variables
        """
        if len(variables) != 2:
            raise DomainError(f"Exactly two state variables required, got {list(variables)}")
        symbols = [sympy.Symbol(name) for name in variables]
        namespace = {name: sym for name, sym in zip(variables, symbols)}

        scalar, array = [], []
        for label, text in (('fx', fx), ('fy', fy)):
            try:
                expr = sympy.sympify(text, locals=namespace, convert_xor=True)
            except (sympy.SympifyError, SyntaxError, TypeError) as exc:
                raise DomainError(f"Cannot parse {label} = {text!r}: {exc}") from exc
            if not isinstance(expr, sympy.Expr):
                raise DomainError(f"{label} = {text!r} is not a scalar expression")
            unbound = expr.free_symbols - set(symbols)
            if unbound:
                names = sorted(str(s) for s in unbound)
                raise DomainError(f"{label} = {text!r} references unbound symbols {names}")
            # math for the per-point solver calls, numpy for whole grids
            scalar.append(sympy.lambdify(symbols, expr, modules='math'))
            array.append(sympy.lambdify(symbols, expr, modules='numpy'))

        def func(x, y):
            return (scalar[0](x, y), scalar[1](x, y))

        def array_func(x, y):
            return (array[0](x, y), array[1](x, y))

        return cls(func, expressions=(fx, fy), variables=tuple(variables),
                   array_func=array_func)

    @property
    def is_string_form(self) -> bool:
        return self.expressions is not None

    def __call__(self, x, y):
        return self.func(x, y)

    def __repr__(self) -> str:
        if self.is_string_form:
            a, b = self.variables
            return (f"DriftField(d{a}/dt = {self.expressions[0]}, "
                    f"d{b}/dt = {self.expressions[1]})")
        return f"DriftField({getattr(self.func, '__name__', 'closure')})"


def evaluate(field: DriftField, x: float, y: float) -> Tuple[float, float]:
    """
    Evaluate the drift at one point.

    Returns:
        (fx, fy) as Python floats

    Raises:
        DomainError: On unbound names during evaluation or non-finite output
    """
    try:
        with np.errstate(all='ignore'):
            fx, fy = field(x, y)
        fx, fy = float(fx), float(fy)
    except (NameError, ZeroDivisionError, OverflowError) as exc:
        raise DomainError(f"Drift evaluation failed at ({x}, {y}): {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise DomainError(
            f"Drift at ({x}, {y}) did not yield a pair of real numbers: {exc}"
        ) from exc

    if not (np.isfinite(fx) and np.isfinite(fy)):
        raise DomainError(f"Non-finite drift ({fx}, {fy}) at ({x}, {y})")
    return fx, fy


def evaluate_grid(field: DriftField, grid: Grid) -> Tuple[np.ndarray, np.ndarray]:
    """
    Evaluate the drift at every grid node.

    Returns:
        FX, FY arrays of shape grid.shape

    Raises:
        DomainError: If any node yields a non-finite drift
    """
    if field.vectorized:
        X, Y = grid.meshgrid()
        try:
            with np.errstate(all='ignore'):
                fx, fy = field.array_func(X, Y)
            FX = np.broadcast_to(np.asarray(fx, dtype=float), grid.shape).copy()
            FY = np.broadcast_to(np.asarray(fy, dtype=float), grid.shape).copy()
        except (NameError, ZeroDivisionError, OverflowError) as exc:
            raise DomainError(f"Drift evaluation failed on grid: {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise DomainError(
                f"Drift on grid did not yield a pair of real arrays shaped {grid.shape}: {exc}"
            ) from exc
        bad = ~(np.isfinite(FX) & np.isfinite(FY))
        if bad.any():
            i, j = np.argwhere(bad)[0]
            x, y = grid.coordinate(int(i), int(j))
            raise DomainError(f"Non-finite drift ({FX[i, j]}, {FY[i, j]}) at ({x}, {y})")
        return FX, FY

    FX = np.empty(grid.shape)
    FY = np.empty(grid.shape)
    xs, ys = grid.x_coords, grid.y_coords
    for i in range(grid.nx + 1):
        for j in range(grid.ny + 1):
            FX[i, j], FY[i, j] = evaluate(field, xs[i], ys[j])
    return FX, FY
