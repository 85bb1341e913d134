from __future__ import annotations

import math

from quantfin.types import PricingInputs


def parity_forward_value(p: PricingInputs) -> float:
    """Value today of a long forward struck at K: ``S e^{-q tau} - K e^{-r tau}``."""
    return p.S * math.exp(-p.q * p.tau) - p.K * math.exp(-p.r * p.tau)


def put_call_parity_residual(*, call: float, put: float, p: PricingInputs) -> float:
    """``(C - P) - (S e^{-q tau} - K e^{-r tau})``; zero for consistent European prices."""
    return (call - put) - parity_forward_value(p)


def put_from_call(call: float, p: PricingInputs) -> float:
    return call - parity_forward_value(p)


def call_from_put(put: float, p: PricingInputs) -> float:
    return put + parity_forward_value(p)
