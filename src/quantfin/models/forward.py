from __future__ import annotations

import math


def future_price(spot: float, rate: float, t: float, maturity: float) -> float:
    """Cost-of-carry futures price ``S * exp(r * (maturity - t))``.

    ``t`` is the current time and ``maturity`` the delivery date, in the same
    units as the continuously-compounded ``rate``.
    """
    if maturity < t:
        raise ValueError("maturity must be >= t")
    return spot * math.exp(rate * (maturity - t))
