from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import final

import numpy as np

from ..typing import FloatArray

# -------------------------
# Rate conversions
# -------------------------


def yield_from_df(df: float, t: float) -> float:
    """Continuously-compounded zero yield implied by a discount factor at ``t > 0``."""
    if t <= 0.0:
        raise ValueError("t must be > 0")
    if df <= 0.0:
        raise ValueError("df must be > 0")
    return -math.log(df) / t


def df_from_yield(r: float, t: float) -> float:
    return math.exp(-r * t)


def forward_rate_from_dfs(df_t1: float, df_t2: float, dt: float) -> float:
    """Continuously-compounded forward rate between two discount factors ``dt`` apart."""
    if dt <= 0.0:
        raise ValueError("dt must be > 0")
    return math.log(df_t1 / df_t2) / dt


def forward_rate_from_yields(
    r1: float, r2: float, t: float, t1: float, t2: float
) -> float:
    """Forward rate for [t1, t2] seen at t, from yields r1 (to t1) and r2 (to t2).

    Requires t <= t1 < t2.
    """
    if not (t <= t1 < t2):
        raise ValueError("Require t <= t1 < t2")
    return (r2 * (t2 - t) - r1 * (t1 - t)) / (t2 - t1)


def yield_linearly_interpolated(
    t: float, times: Sequence[float] | FloatArray, yields: Sequence[float] | FloatArray
) -> float:
    """Linear interpolation between bracketing observations, flat outside them.

    An empty curve yields 0.
    """
    ts = np.asarray(times, dtype=np.float64)
    ys = np.asarray(yields, dtype=np.float64)
    if ts.shape != ys.shape:
        raise ValueError("times and yields must have same shape")
    if ts.size == 0:
        return 0.0
    if np.any(np.diff(ts) <= 0.0):
        raise ValueError("times must be strictly increasing")
    return float(np.interp(float(t), ts, ys))


# -------------------------
# Term structures
# -------------------------


class TermStructure(ABC):
    """Discount curve defined by one primitive, the discount factor.

    Subclasses implement :meth:`df` only. Zero yields and forward rates are
    derived from it and are not meant to be overridden.
    """

    @abstractmethod
    def df(self, T: float) -> float: ...

    @final
    def zero_yield(self, T: float) -> float:
        return yield_from_df(self.df(T), T)

    @final
    def forward_rate(self, T1: float, T2: float) -> float:
        if T2 <= T1:
            raise ValueError("Require T1 < T2")
        return forward_rate_from_dfs(self.df(T1), self.df(T2), T2 - T1)

    @final
    def __call__(self, T: float) -> float:
        return self.df(T)


@dataclass(frozen=True, slots=True)
class FlatTermStructure(TermStructure):
    r: float

    def df(self, T: float) -> float:
        T = float(T)
        if T < 0:
            raise ValueError("T must be >= 0")
        return df_from_yield(self.r, T)


@dataclass(frozen=True, slots=True)
class InterpolatedTermStructure(TermStructure):
    """Zero yields observed at increasing maturities, linearly interpolated."""

    times: tuple[float, ...]
    yields: tuple[float, ...]
    _ts: FloatArray = field(init=False, repr=False, compare=False)
    _ys: FloatArray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ts = np.asarray(self.times, dtype=np.float64)
        ys = np.asarray(self.yields, dtype=np.float64)
        if ts.shape != ys.shape or ts.ndim != 1:
            raise ValueError("times and yields must be 1-D and of equal length")
        if np.any(np.diff(ts) <= 0.0):
            raise ValueError("times must be strictly increasing")
        object.__setattr__(self, "times", tuple(ts.tolist()))
        object.__setattr__(self, "yields", tuple(ys.tolist()))
        object.__setattr__(self, "_ts", ts)
        object.__setattr__(self, "_ys", ys)

    def yield_at(self, T: float) -> float:
        if self._ts.size == 0:
            return 0.0
        return float(np.interp(float(T), self._ts, self._ys))

    def df(self, T: float) -> float:
        T = float(T)
        if T < 0:
            raise ValueError("T must be >= 0")
        return df_from_yield(self.yield_at(T), T)
