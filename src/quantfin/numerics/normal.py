from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import DTypeLike
from scipy.stats import norm

from .scalar import ScalarOps, scalar_ops

# Abramowitz & Stegun 26.2.17, |error| < 7.5e-8
_P = 0.2316419
_B1 = 0.319381530
_B2 = -0.356563782
_B3 = 1.781477937
_B4 = -1.821255978
_B5 = 1.330274429
_INV_SQRT_2PI = 0.3989422804014327


def norm_pdf(x: Any, *, dtype: DTypeLike | ScalarOps = np.float64) -> Any:
    """Standard normal density."""
    ops = scalar_ops(dtype)
    x = ops.cast(x) if np.isscalar(x) else ops.array(x)
    return ops.cast(_INV_SQRT_2PI) * ops.exp(-(x * x) * ops.cast(0.5))


def norm_cdf(x: Any, *, dtype: DTypeLike | ScalarOps = np.float64) -> Any:
    """Standard normal cdf by the five-term polynomial of A&S 26.2.17.

    Accepts scalars or arrays. Accurate to about 7 decimal digits, which is
    the precision the closed-form pricers and implied-vol solvers assume.
    """
    ops = scalar_ops(dtype)
    x = ops.cast(x) if np.isscalar(x) else ops.array(x)
    ax = ops.abs(x)
    t = ops.one() / (ops.one() + ops.cast(_P) * ax)
    poly = t * (
        ops.cast(_B1)
        + t * (ops.cast(_B2) + t * (ops.cast(_B3) + t * (ops.cast(_B4) + t * ops.cast(_B5))))
    )
    upper_tail = norm_pdf(ax, dtype=ops) * poly
    return np.where(x >= 0, ops.one() - upper_tail, upper_tail).astype(ops.dtype)[()]


def norm_cdf_exact(x: Any) -> Any:
    """Reference cdf to full double precision (``scipy.stats.norm``)."""
    return norm.cdf(x)
