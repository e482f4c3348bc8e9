"""
Error taxonomy for the quasi-potential solver stack.

All errors are local and synchronous: they are raised to the immediate
caller and never retried, since identical input reproduces them.

An unreached node (value +inf) is NOT an error; it is a normal outcome
for a finite domain and is reported through the surface itself.
"""


class QPotError(Exception):
    """Base class for all quasipot errors."""


class DomainError(QPotError, ValueError):
    """Point outside the grid, bad grid definition, or unbound symbol in a drift expression."""


class NumericalError(QPotError, ArithmeticError):
    """Non-finite or causality-violating intermediate value (degenerate drift field)."""


class AlignmentError(QPotError, ValueError):
    """Stitching anchor not reachable from the surfaces it must align."""


class ShapeMismatchError(QPotError, ValueError):
    """Grid or surface size mismatch between stages."""
