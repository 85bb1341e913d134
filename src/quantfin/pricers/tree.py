from __future__ import annotations

from collections.abc import Callable
from functools import partial
from math import comb, exp
from typing import Literal

import numpy as np
from numpy.typing import DTypeLike

from ..models.binomial import BinomialLattice
from ..numerics.scalar import ScalarOps, scalar_ops
from ..types import OptionType, PricingInputs
from ..typing import FloatArray

type Payoff = Callable[[FloatArray], FloatArray]

# ----------------------------
# Payoff helpers
# ----------------------------


def _call_payoff(S: FloatArray, *, K: float) -> FloatArray:
    return np.maximum(S - K, 0.0)


def _put_payoff(S: FloatArray, *, K: float) -> FloatArray:
    return np.maximum(K - S, 0.0)


def _payoff_for(kind: OptionType, strike: float) -> Payoff:
    if kind == OptionType.CALL:
        return partial(_call_payoff, K=strike)
    if kind == OptionType.PUT:
        return partial(_put_payoff, K=strike)
    raise ValueError(f"Unsupported option kind: {kind}")


# ----------------------------
# Lattice evaluation
# ----------------------------


def terminal_prices(
    lattice: BinomialLattice, *, dtype: DTypeLike | ScalarOps = np.float64
) -> FloatArray:
    """Underlying prices at expiry, lowest first.

    Starts from ``spot * down**n`` and multiplies by ``up / down`` from one node
    to the next, so the array is strictly increasing.
    """
    ops = scalar_ops(dtype)
    n = lattice.n_periods
    lowest = ops.cast(lattice.spot) * ops.pow(ops.cast(lattice.down), n)
    steps = np.full(n + 1, ops.cast(lattice.up) / ops.cast(lattice.down), dtype=ops.dtype)
    steps[0] = lowest
    return np.cumprod(steps, dtype=ops.dtype)


def price_european(
    lattice: BinomialLattice,
    payoff: Payoff,
    *,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> np.floating:
    """
    European pricing via backward induction on a recombining binomial tree.

    Only one row of option values is kept: at each step node ``i`` is replaced
    by the discounted risk-neutral expectation of nodes ``i`` (down) and
    ``i + 1`` (up). With ``n_periods == 0`` the payoff at spot is returned as is.
    """
    ops = scalar_ops(dtype)
    n = lattice.n_periods

    dt = ops.cast(lattice.dt)
    growth = ops.exp((ops.cast(lattice.rate) - ops.cast(lattice.dividend_yield)) * dt)
    r_exp = ops.exp(ops.cast(lattice.rate) * dt)
    up, down = ops.cast(lattice.up), ops.cast(lattice.down)
    p_up = (growth - down) / (up - down)
    p_down = ops.one() - p_up

    values = ops.array(payoff(terminal_prices(lattice, dtype=ops)))
    for step in range(n - 1, -1, -1):
        values[: step + 1] = (
            p_down * values[: step + 1] + p_up * values[1 : step + 2]
        ) / r_exp

    return ops.cast(values[0])


def price_european_closed_form(lattice: BinomialLattice, payoff: Payoff) -> float:
    """
    European pricing via the binomial distribution (closed-form sum).
    """
    N = lattice.n_periods
    p = lattice.p_up
    disc = exp(-lattice.rate * lattice.T)

    S_T = terminal_prices(lattice)
    pay = np.asarray(payoff(S_T), dtype=np.float64)
    total = 0.0
    for j in range(N + 1):
        total += comb(N, j) * (p**j) * ((1.0 - p) ** (N - j)) * float(pay[j])

    return disc * total


def price_call_european(
    spot: float,
    strike: float,
    rate: float,
    up: float,
    down: float,
    n_periods: int,
    *,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> np.floating:
    """European call on a binomial lattice; ``rate`` is continuously compounded per period.

    Raises
    ------
    InvalidLatticeError
        If ``exp(rate)`` lies outside ``[down, up]``.
    """
    lattice = BinomialLattice(
        spot=spot, up=up, down=down, rate=rate, n_periods=n_periods
    )
    return price_european(lattice, partial(_call_payoff, K=strike), dtype=dtype)


# ----------------------------
# PricingInputs wrappers (CRR)
# ----------------------------


def _lattice_from_inputs(p: PricingInputs, n_steps: int) -> BinomialLattice:
    return BinomialLattice.from_crr(
        spot=p.S, r=p.r, q=p.q, sigma=p.sigma, T=p.tau, n_steps=n_steps
    )


def binom_price(
    p: PricingInputs,
    n_steps: int,
    *,
    method: Literal["tree", "closed_form"] = "tree",
) -> float:
    """
    European CRR binomial price using p.spec.kind (CALL/PUT).

    method:
      - "tree": backward induction
      - "closed_form": binomial sum over terminal nodes
    """
    lattice = _lattice_from_inputs(p, n_steps)
    payoff = _payoff_for(p.spec.kind, p.K)

    if method == "tree":
        return float(price_european(lattice, payoff))
    if method == "closed_form":
        return price_european_closed_form(lattice, payoff)
    raise ValueError(f"Unknown method: {method!r}")
