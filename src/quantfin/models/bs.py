from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import DTypeLike

from ..numerics.normal import norm_cdf, norm_pdf
from ..numerics.scalar import ScalarOps, scalar_ops
from ..types import Greeks, GreeksRequest, OptionType


def _validate_scalar_inputs(
    *, spot: float, strike: float, sigma: float, tau: float
) -> None:
    if spot <= 0.0:
        raise ValueError("spot must be positive")
    if strike <= 0.0:
        raise ValueError("strike must be positive")
    if sigma <= 0.0:
        raise ValueError("sigma must be positive")
    if tau <= 0.0:
        raise ValueError("tau must be positive")


def discount_factor(
    rate: float, tau: float, *, dtype: DTypeLike | ScalarOps = np.float64
) -> np.floating:
    ops = scalar_ops(dtype)
    return ops.exp(-ops.cast(rate) * ops.cast(tau))


def d1_d2(
    *,
    spot: float,
    strike: float,
    r: float,
    q: float = 0.0,
    sigma: float,
    tau: float,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> tuple[np.floating, np.floating]:
    _validate_scalar_inputs(spot=spot, strike=strike, sigma=sigma, tau=tau)
    ops = scalar_ops(dtype)
    vol_sqrt_t = ops.cast(sigma) * ops.sqrt(ops.cast(tau))
    num = ops.log(ops.cast(spot) / ops.cast(strike)) + (
        ops.cast(r) - ops.cast(q)
    ) * ops.cast(tau)
    d1 = num / vol_sqrt_t + ops.half(vol_sqrt_t)
    d2 = d1 - vol_sqrt_t
    return d1, d2


def call_price(
    *,
    spot: float,
    strike: float,
    r: float,
    q: float = 0.0,
    sigma: float,
    tau: float,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> np.floating:
    """
    Black–Scholes European call with continuous dividend yield q.
    """
    price, _ = price_and_greeks(
        OptionType.CALL,
        spot=spot,
        strike=strike,
        r=r,
        q=q,
        sigma=sigma,
        tau=tau,
        request=GreeksRequest.NONE,
        dtype=dtype,
    )
    return price


def put_price(
    *,
    spot: float,
    strike: float,
    r: float,
    q: float = 0.0,
    sigma: float,
    tau: float,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> np.floating:
    """
    Black–Scholes European put with continuous dividend yield q.
    """
    price, _ = price_and_greeks(
        OptionType.PUT,
        spot=spot,
        strike=strike,
        r=r,
        q=q,
        sigma=sigma,
        tau=tau,
        request=GreeksRequest.NONE,
        dtype=dtype,
    )
    return price


def vega(
    *,
    spot: float,
    strike: float,
    r: float,
    q: float = 0.0,
    sigma: float,
    tau: float,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> np.floating:
    """∂Price/∂sigma, identical for calls and puts."""
    ops = scalar_ops(dtype)
    d1, _ = d1_d2(spot=spot, strike=strike, r=r, q=q, sigma=sigma, tau=tau, dtype=ops)
    df_q = discount_factor(q, tau, dtype=ops)
    return ops.cast(spot) * df_q * norm_pdf(d1, dtype=ops) * ops.sqrt(ops.cast(tau))


def price_and_greeks(
    kind: OptionType,
    *,
    spot: float,
    strike: float,
    r: float,
    q: float = 0.0,
    sigma: float,
    tau: float,
    request: GreeksRequest = GreeksRequest.ALL,
    dtype: DTypeLike | ScalarOps = np.float64,
) -> tuple[np.floating, Greeks]:
    """
    Black–Scholes price and the requested analytic Greeks.

    Greeks absent from `request` are left as None. The normal density is only
    evaluated when gamma, theta or vega is requested.

    theta is ∂Price/∂t (calendar time, holding expiry fixed), per year.
    """
    if kind not in (OptionType.CALL, OptionType.PUT):
        raise ValueError(f"Unsupported option kind: {kind}")
    ops = scalar_ops(dtype)
    d1, d2 = d1_d2(spot=spot, strike=strike, r=r, q=q, sigma=sigma, tau=tau, dtype=ops)
    S, K, r_, q_ = ops.cast(spot), ops.cast(strike), ops.cast(r), ops.cast(q)
    tau_ = ops.cast(tau)
    df_r = discount_factor(r, tau, dtype=ops)
    df_q = discount_factor(q, tau, dtype=ops)

    is_call = kind == OptionType.CALL
    # signed arguments: N(d) for calls, N(-d) for puts
    sgn = ops.one() if is_call else -ops.one()
    Nd1 = norm_cdf(sgn * d1, dtype=ops)
    Nd2 = norm_cdf(sgn * d2, dtype=ops)

    price = sgn * (S * df_q * Nd1 - K * df_r * Nd2)

    fields: dict[str, Any] = {}
    if GreeksRequest.DELTA in request:
        fields["delta"] = sgn * df_q * Nd1
    if GreeksRequest.RHO in request:
        fields["rho"] = sgn * K * tau_ * df_r * Nd2

    if request.needs_pdf:
        sqrt_tau = ops.sqrt(tau_)
        sig = ops.cast(sigma)
        phi_d1 = norm_pdf(d1, dtype=ops)
        if GreeksRequest.GAMMA in request:
            fields["gamma"] = df_q * phi_d1 / (S * sig * sqrt_tau)
        if GreeksRequest.VEGA in request:
            fields["vega"] = S * df_q * phi_d1 * sqrt_tau
        if GreeksRequest.THETA in request:
            fields["theta"] = (
                -(S * df_q * phi_d1 * sig) / (ops.cast(2.0) * sqrt_tau)
                - sgn * r_ * K * df_r * Nd2
                + sgn * q_ * S * df_q * Nd1
            )

    return price, Greeks(**fields)
