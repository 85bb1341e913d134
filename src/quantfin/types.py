from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, Flag, auto

import numpy as np

from .typing import FloatArray


class OptionType(str, Enum):
    """Option contract type.

    An enumeration of plain-vanilla option types.

    Attributes
    ----------
    CALL : str
        Call option ("call").
    PUT : str
        Put option ("put").
    """

    CALL = "call"
    PUT = "put"


@dataclass(frozen=True, slots=True)
class MarketData:
    """Market observables needed for option pricing.

    Parameters
    ----------
    spot : float
        Current spot price of the underlying, typically denoted :math:`S`.
    rate : float
        Continuously-compounded risk-free interest rate, typically denoted :math:`r`
        (annualized).
    dividend_yield : float, default 0.0
        Continuously-compounded dividend yield, typically denoted :math:`q`
        (annualized).
    """

    spot: float
    rate: float
    dividend_yield: float = 0.0


@dataclass(frozen=True, slots=True)
class OptionSpec:
    """Specification of a plain-vanilla European option.

    Parameters
    ----------
    kind : OptionType
        Option type (call or put).
    strike : float
        Strike price of the option, typically denoted :math:`K`.
    expiry : float
        Option expiry time in the same time units as `t` in :class:`PricingInputs`
        (commonly years).
    """

    kind: OptionType
    strike: float
    expiry: float


@dataclass(frozen=True, slots=True)
class PricingInputs:
    """Inputs for an option pricing routine.

    Bundles an option specification, market data and the volatility into one
    immutable object. Implied-volatility solvers never mutate an instance; they
    return a new one through :func:`dataclasses.replace`.

    Parameters
    ----------
    spec : OptionSpec
        Option contract specification.
    market : MarketData
        Market observables (spot, rates, yields).
    sigma : float
        Black-Scholes volatility (annualized).
    t : float, default 0.0
        Current valuation time in the same units as `spec.expiry`.

    Raises
    ------
    ValueError
        If ``T - t <= 0`` when accessing :attr:`tau`.
    """

    spec: OptionSpec
    market: MarketData
    sigma: float
    t: float = 0.0

    @property
    def S(self) -> float:
        return self.market.spot

    @property
    def K(self) -> float:
        return self.spec.strike

    @property
    def r(self) -> float:
        return self.market.rate

    @property
    def q(self) -> float:
        return self.market.dividend_yield

    @property
    def T(self) -> float:
        return self.spec.expiry

    @property
    def tau(self) -> float:
        tau = self.T - self.t
        if tau <= 0.0:
            raise ValueError("Need expiry > t")
        return tau


@dataclass(frozen=True, slots=True)
class CashFlowSchedule:
    """Ordered (time, amount) pairs; the sign of an amount encodes its direction.

    Times must be strictly increasing. The schedule is stored as tuples so that
    instances stay hashable and cannot be modified after construction.
    """

    times: tuple[float, ...]
    amounts: tuple[float, ...]

    def __post_init__(self) -> None:
        times = tuple(float(t) for t in self.times)
        amounts = tuple(float(a) for a in self.amounts)
        if len(times) != len(amounts):
            raise ValueError("times and amounts must have the same length")
        if any(b <= a for a, b in zip(times, times[1:])):
            raise ValueError("times must be strictly increasing")
        object.__setattr__(self, "times", times)
        object.__setattr__(self, "amounts", amounts)

    @classmethod
    def from_pairs(cls, pairs: Sequence[tuple[float, float]]) -> CashFlowSchedule:
        return cls(
            times=tuple(t for t, _ in pairs), amounts=tuple(a for _, a in pairs)
        )

    def __len__(self) -> int:
        return len(self.times)

    def as_arrays(self, dtype=np.float64) -> tuple[FloatArray, FloatArray]:
        return np.asarray(self.times, dtype=dtype), np.asarray(self.amounts, dtype=dtype)

    def pv(self, rate: float) -> float:
        from .fixed_income.cash_flow import pv

        return pv(self.times, self.amounts, rate)

    def pv_discrete(self, rate: float) -> float:
        from .fixed_income.cash_flow import pv_discrete

        return pv_discrete(self.times, self.amounts, rate)


class GreeksRequest(Flag):
    """Set of sensitivities a caller wants computed alongside the price.

    Combine members with ``|``; e.g. ``GreeksRequest.DELTA | GreeksRequest.VEGA``.
    """

    NONE = 0
    DELTA = auto()
    GAMMA = auto()
    THETA = auto()
    VEGA = auto()
    RHO = auto()
    ALL = DELTA | GAMMA | THETA | VEGA | RHO

    @property
    def needs_pdf(self) -> bool:
        return bool(self & (GreeksRequest.GAMMA | GreeksRequest.THETA | GreeksRequest.VEGA))


@dataclass(frozen=True, slots=True)
class Greeks:
    """Price sensitivities. A field is ``None`` when it was not requested.

    theta is the derivative with respect to calendar time (expiry fixed), per
    unit of time; it is usually negative for long options.
    """

    delta: float | None = None
    gamma: float | None = None
    theta: float | None = None
    vega: float | None = None
    rho: float | None = None

    def as_dict(self) -> dict[str, float]:
        out = {
            "delta": self.delta,
            "gamma": self.gamma,
            "theta": self.theta,
            "vega": self.vega,
            "rho": self.rho,
        }
        return {k: v for k, v in out.items() if v is not None}
