# src/quantfin/numerics/__init__.py
"""
Numerical building blocks (advanced API).

Top-level package `quantfin` exposes the everyday pricing API.
This subpackage exposes the scalar abstraction, the normal distribution and
the root finders.
"""

from .normal import norm_cdf, norm_cdf_exact, norm_pdf
from .root_finding import (
    BracketSearchExhaustedError,
    DerivativeTooSmallError,
    NoConvergenceError,
    NotBracketedError,
    RootFindingError,
    RootMethod,
    RootResult,
    bisection_method,
    expand_bracket,
    get_root_method,
    newton_method,
)
from .scalar import FLOAT32, FLOAT64, Scalar, ScalarOps, scalar_ops

__all__ = [
    # Scalars
    "Scalar",
    "ScalarOps",
    "FLOAT32",
    "FLOAT64",
    "scalar_ops",
    # Normal distribution
    "norm_cdf",
    "norm_cdf_exact",
    "norm_pdf",
    # Root finding
    "RootMethod",
    "RootResult",
    "RootFindingError",
    "NotBracketedError",
    "BracketSearchExhaustedError",
    "NoConvergenceError",
    "DerivativeTooSmallError",
    "bisection_method",
    "newton_method",
    "expand_bracket",
    "get_root_method",
]
