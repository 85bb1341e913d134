from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import DTypeLike

from .scalar import ScalarOps, scalar_ops

logger = logging.getLogger(__name__)

# ---------------------------
# Results + Exceptions
# ---------------------------


@dataclass(frozen=True, slots=True)
class RootResult:
    root: float
    converged: bool
    iterations: int
    method: str
    f_at_root: float
    bracket: tuple[float, float] | None = None


class RootFindingError(Exception):
    """Base class for root-finding failures."""


class NotBracketedError(RootFindingError):
    """Raised when a bracketing method is called without a valid sign change."""


class NoConvergenceError(RootFindingError):
    """Raised when the method fails to converge within max_iter."""


class DerivativeTooSmallError(RootFindingError):
    """Raised when Newton's method cannot proceed due to tiny derivative."""


class BracketSearchExhaustedError(NotBracketedError):
    """Raised by expand_bracket when the upper end passes the safety ceiling."""


class RootMethod(str, Enum):
    BISECTION = "bisection"
    NEWTON = "newton"


def _clamp(x: Any, domain: tuple[float, float] | None) -> Any:
    if domain is None:
        return x
    lo, hi = domain
    if x < lo:
        return type(x)(lo)
    if x > hi:
        return type(x)(hi)
    return x


def _check_tolerances(accuracy: float, max_iter: int) -> None:
    if accuracy <= 0:
        raise ValueError("accuracy must be > 0")
    if max_iter <= 0:
        raise ValueError("max_iter must be > 0")


# ---------------------------
# Root finders
# ---------------------------


def bisection_method(
    Fn: Callable[[Any], Any],
    lo: float,
    hi: float,
    *,
    accuracy: float = 1e-5,
    max_iter: int = 100,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> RootResult:
    """Bisection that narrows a displacement from the negative end.

    The end where ``Fn <= 0`` becomes the anchor ``rtb`` and ``dx`` is the signed
    distance to the other end. Each iteration halves ``dx`` and evaluates
    ``rtb + dx``; the anchor moves only when the trial point is negative. The far end
    is never stored, it shrinks through ``dx`` alone.

    Terminates when ``|Fn(mid)| < accuracy`` or ``|dx| < accuracy``. An endpoint
    that is already an exact root is not returned early: the trial sequence
    still runs, so results are reproducible across brackets sharing an anchor.

    Raises
    ------
    NotBracketedError
        If ``Fn(lo) * Fn(hi) > 0``.
    NoConvergenceError
        If neither tolerance is met within ``max_iter`` halvings.
    """
    _check_tolerances(accuracy, max_iter)
    ops = scalar_ops(dtype)
    tol = ops.cast(accuracy)
    zero = ops.zero()

    x1, x2 = ops.cast(lo), ops.cast(hi)
    f1, f2 = ops.cast(Fn(x1)), ops.cast(Fn(x2))

    if f1 * f2 > zero:
        raise NotBracketedError(
            "Bisection requires Fn(lo) and Fn(hi) to have opposite signs."
        )

    if f1 > zero:
        x1, x2 = x2, x1
        f1, f2 = f2, f1

    rtb, dx = x1, x2 - x1
    for it in range(1, max_iter + 1):
        dx = ops.half(dx)
        x_mid = rtb + dx
        f_mid = ops.cast(Fn(x_mid))
        if ops.abs(f_mid) < tol or ops.abs(dx) < tol:
            logger.debug(
                "Bisection converged after %s iterations: x=%s f=%s", it, x_mid, f_mid
            )
            return RootResult(
                root=x_mid,
                converged=True,
                iterations=it,
                method="bisection",
                f_at_root=f_mid,
                bracket=(ops.cast(lo), ops.cast(hi)),
            )
        if f_mid < zero:
            rtb = x_mid

    raise NoConvergenceError("Bisection did not converge within max_iter.")


def newton_method(
    Fn: Callable[[Any], Any],
    x0: float,
    *,
    dFn: Callable[[Any], Any],
    target: float = 0.0,
    accuracy: float = 1e-5,
    max_iter: int = 100,
    min_derivative: float = 1e-12,
    domain: tuple[float, float] | None = None,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> RootResult:
    """Solve ``Fn(x) = target`` by Newton's method.

    Iterates ``x <- x + (target - Fn(x)) / dFn(x)`` from ``x0`` and succeeds once
    ``|target - Fn(x)| < accuracy``. If ``domain`` is given, each iterate is
    clamped into it.

    Raises
    ------
    DerivativeTooSmallError
        If ``|dFn(x)| < min_derivative`` or an update is not finite.
    NoConvergenceError
        If the target is not reached within ``max_iter`` iterations.
    """
    _check_tolerances(accuracy, max_iter)
    if min_derivative <= 0:
        raise ValueError("min_derivative must be > 0")
    ops = scalar_ops(dtype)
    tol = ops.cast(accuracy)
    y = ops.cast(target)
    x = _clamp(ops.cast(x0), domain)

    for it in range(1, max_iter + 1):
        resid = y - ops.cast(Fn(x))
        logger.debug("Newton iter %s: x=%s residual=%s", it, x, resid)
        if ops.abs(resid) < tol:
            return RootResult(
                root=x,
                converged=True,
                iterations=it - 1,
                method="newton",
                f_at_root=-resid,
            )

        dfx = ops.cast(dFn(x))
        if not ops.is_finite(dfx) or ops.abs(dfx) < ops.cast(min_derivative):
            raise DerivativeTooSmallError(
                f"Newton failed: derivative too small at x={x!r} (dFn={dfx!r})."
            )

        x_new = _clamp(x + resid / dfx, domain)
        if not ops.is_finite(x_new):
            raise DerivativeTooSmallError(
                f"Newton failed: non-finite update from x={x!r}."
            )
        x = x_new

    raise NoConvergenceError("Newton did not converge within max_iter.")


def expand_bracket(
    Fn: Callable[[Any], Any],
    lo: float,
    hi: float,
    *,
    grow: float = 2.0,
    ceiling: float = 1e10,
) -> tuple[float, float]:
    """
    Grow `hi` geometrically until Fn(lo) and Fn(hi) no longer share a sign.

    Returns (lo, hi) such that Fn(lo) * Fn(hi) <= 0. Raises
    BracketSearchExhaustedError once `hi` would pass `ceiling`.
    """
    if hi <= lo:
        raise ValueError("Require lo < hi.")
    if grow <= 1.0:
        raise ValueError("Require grow > 1.0.")

    f_lo = Fn(lo)
    f_hi = Fn(hi)
    steps = 0
    while f_lo * f_hi > 0:
        if hi * grow > ceiling:
            logger.debug("Bracket expansion hit ceiling %s after %s steps", ceiling, steps)
            raise BracketSearchExhaustedError(
                f"No sign change found in [{lo!r}, {hi!r}] before reaching "
                f"ceiling={ceiling:g}."
            )
        hi = hi * grow
        f_hi = Fn(hi)
        steps += 1

    logger.debug("Bracket found after %s expansions: [%s, %s]", steps, lo, hi)
    return lo, hi


_METHODS: dict[RootMethod, Callable[..., RootResult]] = {
    RootMethod.BISECTION: bisection_method,
    RootMethod.NEWTON: newton_method,
}


def get_root_method(method: RootMethod | str) -> Callable[..., RootResult]:
    try:
        return _METHODS[RootMethod(method)]
    except ValueError as e:
        raise ValueError(f"Unknown root method: {method!r}") from e
