from __future__ import annotations

from dataclasses import dataclass
from math import exp, sqrt

from ..exceptions import InvalidLatticeError


@dataclass(frozen=True, slots=True)
class BinomialLattice:
    spot: float  # initial underlying price
    up: float  # up factor
    down: float  # down factor
    rate: float  # risk-free rate (cc, per unit of dt)
    n_periods: int
    dividend_yield: float = 0.0  # cc
    dt: float = 1.0  # period length; 1.0 means `rate` is per period

    def __post_init__(self) -> None:
        if int(self.n_periods) != self.n_periods or self.n_periods < 0:
            raise ValueError("n_periods must be a non-negative integer")
        if not (0.0 < self.down < self.up):
            raise ValueError("Need 0 < down < up")
        if self.dt <= 0.0:
            raise ValueError("dt must be positive")
        if self.spot <= 0.0:
            raise ValueError("spot must be positive")

        p = self.p_up
        if not (0.0 <= p <= 1.0):
            raise InvalidLatticeError(
                f"Risk-neutral probability out of bounds: p_up={p:.6g}. "
                f"Need down <= growth <= up (down={self.down:.6g}, "
                f"growth={self.growth:.6g}, up={self.up:.6g})."
            )

    @classmethod
    def from_crr(
        cls, *, spot: float, r: float, q: float, sigma: float, T: float, n_steps: int
    ) -> BinomialLattice:
        """Cox-Ross-Rubinstein factors ``u = exp(sigma sqrt(dt))``, ``d = 1/u``."""
        if n_steps <= 0:
            raise ValueError("n_steps must be positive")
        if T <= 0.0:
            raise ValueError("T must be positive")
        if sigma <= 0.0:
            raise ValueError("sigma must be positive")

        dt = T / n_steps
        u = exp(sigma * sqrt(dt))
        return cls(
            spot=spot,
            up=u,
            down=1.0 / u,
            rate=r,
            n_periods=n_steps,
            dividend_yield=q,
            dt=dt,
        )

    @property
    def T(self) -> float:
        return self.dt * self.n_periods

    @property
    def growth(self) -> float:
        # Under continuous dividend yield q: E[S_{t+dt}/S_t] = exp((r-q)dt)
        return exp((self.rate - self.dividend_yield) * self.dt)

    @property
    def p_up(self) -> float:
        return (self.growth - self.down) / (self.up - self.down)

    @property
    def p_down(self) -> float:
        return 1.0 - self.p_up

    @property
    def disc_step(self) -> float:
        return exp(-self.rate * self.dt)
