from __future__ import annotations

import logging
import warnings
from functools import partial

import numpy as np
from numpy.typing import DTypeLike

from ..config import NumericsConfig
from ..numerics.root_finding import (
    NoConvergenceError,
    NotBracketedError,
    RootResult,
    bisection_method,
)
from ..numerics.scalar import ScalarOps, scalar_ops
from ..typing import ArrayLike, FloatArray

logger = logging.getLogger(__name__)


def _as_schedule(
    times: ArrayLike, amounts: ArrayLike, ops: ScalarOps
) -> tuple[FloatArray, FloatArray]:
    t = ops.array(times)
    a = ops.array(amounts)
    if t.shape != a.shape or t.ndim != 1:
        raise ValueError("times and amounts must be 1-D sequences of equal length")
    return t, a


def pv(
    times: ArrayLike,
    amounts: ArrayLike,
    rate: float,
    *,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> np.floating:
    """Present value under continuous compounding: ``sum(a_i * exp(-r * t_i))``."""
    ops = scalar_ops(dtype)
    t, a = _as_schedule(times, amounts, ops)
    r = ops.cast(rate)
    return ops.cast(np.sum(a * ops.exp(-(r * t))))


def pv_discrete(
    times: ArrayLike,
    amounts: ArrayLike,
    rate: float,
    *,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> np.floating:
    """Present value under discrete compounding: ``sum(a_i / (1 + r) ** t_i)``."""
    ops = scalar_ops(dtype)
    t, a = _as_schedule(times, amounts, ops)
    acc = ops.one() + ops.cast(rate)
    return ops.cast(np.sum(a / ops.pow(acc, t)))


def has_unique_irr(times: ArrayLike, amounts: ArrayLike) -> bool:
    """Whether the schedule is guaranteed a single internal rate of return.

    One sign change in the amounts suffices (Descartes). With several, the
    cumulative amounts must change sign at most once (Norstrom). A schedule
    without any sign change has no IRR at all.
    """
    a = np.asarray(amounts, dtype=np.float64)
    if np.asarray(times).shape != a.shape:
        raise ValueError("times and amounts must have the same length")
    signs = np.sign(a[a != 0.0])
    changes = int(np.count_nonzero(signs[1:] != signs[:-1]))
    if changes == 0:
        return False
    if changes == 1:
        return True

    cum = np.cumsum(a)
    cum_signs = np.sign(cum[cum != 0.0])
    return int(np.count_nonzero(cum_signs[1:] != cum_signs[:-1])) <= 1


def irr_result(
    times: ArrayLike,
    amounts: ArrayLike,
    *,
    bracket: tuple[float, float] = (0.0, 1.0),
    accuracy: float | None = None,
    max_iter: int | None = None,
    cfg: NumericsConfig | None = None,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> RootResult:
    """Internal rate of return with solver diagnostics.

    Bisects the continuously-compounded present value over ``bracket``.
    Explicit ``accuracy``/``max_iter`` override the values in ``cfg``.

    Raises
    ------
    NotBracketedError
        If the present value has the same sign at both ends of ``bracket``.
    NoConvergenceError
        If the bisection runs out of iterations.
    """
    cfg = cfg or NumericsConfig()
    ops = scalar_ops(dtype)
    t, a = _as_schedule(times, amounts, ops)
    if not has_unique_irr(t, a):
        warnings.warn(
            "Cash flows change sign more than once; the IRR may not be unique.",
            RuntimeWarning,
            stacklevel=2,
        )

    objective = partial(pv, t, a, dtype=ops)
    rr = bisection_method(
        objective,
        bracket[0],
        bracket[1],
        accuracy=cfg.accuracy if accuracy is None else accuracy,
        max_iter=cfg.max_iter if max_iter is None else max_iter,
        dtype=ops,
    )
    logger.debug("IRR solved after %s iterations: %s", rr.iterations, rr.root)
    return rr


def irr(
    times: ArrayLike,
    amounts: ArrayLike,
    *,
    bracket: tuple[float, float] = (0.0, 1.0),
    accuracy: float | None = None,
    max_iter: int | None = None,
    cfg: NumericsConfig | None = None,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> np.floating | None:
    """Internal rate of return, or ``None`` when no root is found in ``bracket``.

    Both "not bracketed" and "did not converge" give ``None``; use
    :func:`irr_result` to tell them apart.
    """
    try:
        return irr_result(
            times,
            amounts,
            bracket=bracket,
            accuracy=accuracy,
            max_iter=max_iter,
            cfg=cfg,
            dtype=dtype,
        ).root
    except (NotBracketedError, NoConvergenceError) as exc:
        logger.debug("IRR not found: %s", exc)
        return None
