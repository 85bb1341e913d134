"""
Bond analytics on top of the present-value evaluator and the IRR solver.

All yields are continuously compounded unless the function name says
otherwise. ``times`` and ``amounts`` describe the remaining coupon and
principal payments, with times measured from today.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from ..config import NumericsConfig
from ..market.curves import TermStructure
from ..numerics.root_finding import expand_bracket
from ..typing import ArrayLike
from .cash_flow import irr, pv, pv_discrete

logger = logging.getLogger(__name__)


def price(times: ArrayLike, amounts: ArrayLike, r: float) -> float:
    """Bond price as the continuously-discounted value of its cash flows."""
    return float(pv(times, amounts, r))


def price_discrete(times: ArrayLike, amounts: ArrayLike, r: float) -> float:
    """Bond price with annual (discrete) compounding."""
    return float(pv_discrete(times, amounts, r))


def yield_to_maturity(
    times: ArrayLike,
    amounts: ArrayLike,
    bond_price: float,
    *,
    cfg: NumericsConfig | None = None,
) -> float | None:
    """Yield at which the discounted cash flows equal ``bond_price``.

    The upper end of the search interval starts at 1 and doubles while the bond
    would still be worth more than its quoted price. The IRR is then solved on
    the cash flows extended with ``-bond_price`` paid today.

    Returns
    -------
    float or None
        ``None`` if the bisection does not converge.

    Raises
    ------
    BracketSearchExhaustedError
        If no sign change is found below ``cfg.ceiling``; for example when the
        quoted price exceeds the undiscounted sum of the cash flows.
    """
    cfg = cfg or NumericsConfig()
    t = np.asarray(times, dtype=np.float64)
    a = np.asarray(amounts, dtype=np.float64)

    def excess(y: float) -> float:
        return price(t, a, y) - bond_price

    _, top = expand_bracket(excess, 0.0, 1.0, grow=cfg.grow, ceiling=cfg.ceiling)
    logger.debug("YTM search interval [0, %s]", top)

    flows_t = np.concatenate(([0.0], t))
    flows_a = np.concatenate(([-bond_price], a))
    y = irr(flows_t, flows_a, bracket=(0.0, top), cfg=cfg)
    return None if y is None else float(y)


def duration(times: ArrayLike, amounts: ArrayLike, r: float) -> float:
    """Present-value weighted average time to the cash flows at rate ``r``."""
    t = np.asarray(times, dtype=np.float64)
    disc = np.asarray(amounts, dtype=np.float64) * np.exp(-r * t)
    total = np.sum(disc)
    if total == 0.0:
        raise ValueError("discounted cash flows sum to zero")
    return float(np.sum(t * disc) / total)


def duration_macaulay(
    times: ArrayLike,
    amounts: ArrayLike,
    bond_price: float,
    *,
    cfg: NumericsConfig | None = None,
) -> float | None:
    """Duration evaluated at the bond's own yield to maturity."""
    y = yield_to_maturity(times, amounts, bond_price, cfg=cfg)
    return None if y is None else duration(times, amounts, y)


def duration_modified(
    times: ArrayLike,
    amounts: ArrayLike,
    bond_price: float,
    *,
    cfg: NumericsConfig | None = None,
) -> float | None:
    """Macaulay duration divided by ``1 + ytm``."""
    y = yield_to_maturity(times, amounts, bond_price, cfg=cfg)
    if y is None:
        return None
    return duration(times, amounts, y) / (1.0 + y)


def convexity(times: ArrayLike, amounts: ArrayLike, y: float) -> float:
    """Second derivative of the continuously-compounded price with respect to yield."""
    t = np.asarray(times, dtype=np.float64)
    a = np.asarray(amounts, dtype=np.float64)
    return float(np.sum(a * t * t * np.exp(-y * t)))


def price_from_curve(
    times: ArrayLike, amounts: ArrayLike, curve: TermStructure
) -> float:
    return math.fsum(
        float(a) * curve.df(float(t)) for t, a in zip(times, amounts, strict=True)
    )


def duration_from_curve(
    times: ArrayLike, amounts: ArrayLike, curve: TermStructure
) -> float:
    total = 0.0
    weighted = 0.0
    for t, a in zip(times, amounts, strict=True):
        discounted = float(a) * curve.df(float(t))
        total += discounted
        weighted += float(t) * discounted
    if total == 0.0:
        raise ValueError("discounted cash flows sum to zero")
    return weighted / total
