"""
quasipot: quasi-potential landscapes for two-dimensional SDEs.

Pipeline:
    Grid + DriftField -> QuasiPotentialSolver -> LocalSurface(s)
    -> GlobalStitcher -> GlobalSurface -> FieldDecomposer -> VectorFieldSet
"""

from .core.errors import (
    AlignmentError,
    DomainError,
    NumericalError,
    QPotError,
    ShapeMismatchError,
)
from .core.grid import Grid
from .core.field import DriftField, evaluate, evaluate_grid
from .core.frontier import Frontier, NodeStatus
from .core.surface import Anchor, GlobalSurface, LocalSurface, VectorFieldSet
from .core.local_solver import QuasiPotentialSolver, qpotential, segment_action
from .core.stitcher import GlobalStitcher, qp_global
from .core.decomposer import FieldDecomposer, vec_decom_all
from .config.parameters import (
    DecompositionParams,
    GridParams,
    QPotParams,
    SolverParams,
    StitchParams,
    load_default_params,
)

__version__ = "0.1.0"

__all__ = [
    "AlignmentError",
    "Anchor",
    "DecompositionParams",
    "DomainError",
    "DriftField",
    "FieldDecomposer",
    "Frontier",
    "GlobalStitcher",
    "GlobalSurface",
    "Grid",
    "GridParams",
    "LocalSurface",
    "NodeStatus",
    "NumericalError",
    "QPotError",
    "QPotParams",
    "QuasiPotentialSolver",
    "ShapeMismatchError",
    "SolverParams",
    "StitchParams",
    "VectorFieldSet",
    "evaluate",
    "evaluate_grid",
    "load_default_params",
    "qp_global",
    "qpotential",
    "segment_action",
    "vec_decom_all",
]
