from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from math import exp, log, sqrt

from quantfin.config import ImpliedVolConfig
from quantfin.exceptions import ArbitrageViolationError, InvalidOptionPriceError
from quantfin.models import bs as bs_model
from quantfin.numerics.root_finding import (
    RootMethod,
    RootResult,
    bisection_method,
    expand_bracket,
    newton_method,
)
from quantfin.types import MarketData, OptionSpec, OptionType, PricingInputs

logger = logging.getLogger(__name__)

# Brenner-Subrahmanyam: ATM price ~ 0.398 * S * sigma * sqrt(tau)
_BS_ATM_SLOPE = 0.398


@dataclass(frozen=True, slots=True)
class ImpliedVolResult:
    """Result container for Black-Scholes implied volatility inversion.

    Parameters
    ----------
    vol : float
        Implied volatility corresponding to the root found by the solver.
    root_result : RootResult
        Diagnostics returned by the chosen root-finding method (iterations, status,
        final residual, etc.). ``method == "boundary"`` marks a price sitting on
        the zero-volatility floor, answered without iterating.
    mkt_price : float
        The input market option price used for inversion.
    bounds : tuple[float, float]
        No-arbitrage bounds ``(lb, ub)`` for the option price.
    tau : float
        Time to expiry used in inversion, ``tau = spec.expiry - t``.
    """

    vol: float
    root_result: RootResult
    mkt_price: float
    bounds: tuple[float, float]  # (lb, ub)
    tau: float


def _df(r: float, tau: float) -> float:
    return exp(-r * tau)


def _prepaid_forward(spot: float, q: float, tau: float) -> float:
    """Prepaid forward ``S * exp(-q * tau)``."""
    return spot * exp(-q * tau)


def _bounds(
    spec: OptionSpec,
    market: MarketData,
    t: float,
) -> tuple[float, float, float]:
    """Compute tight no-arbitrage bounds for a European option price.

    Let ``tau = spec.expiry - t``, ``df = exp(-r*tau)`` and
    ``Fp = S*exp(-q*tau)``. The lower bound is the zero-volatility price:

    - Call: ``max(Fp - K*df, 0) <= C <= Fp``
    - Put : ``max(K*df - Fp, 0) <= P <= K*df``

    Returns
    -------
    lb, ub, tau : float
    """
    tau = spec.expiry - t
    if tau <= 0.0:
        raise ValueError("Need expiry > t")

    df = _df(market.rate, tau)
    fp = _prepaid_forward(market.spot, market.dividend_yield, tau)
    K_df = spec.strike * df

    if spec.kind == OptionType.CALL:
        lb = max(fp - K_df, 0.0)
        ub = fp
    elif spec.kind == OptionType.PUT:
        lb = max(K_df - fp, 0.0)
        ub = K_df
    else:
        raise ValueError(f"Unknown option kind: {spec.kind!r}")

    return lb, ub, tau


def _validate_bounds(
    price: float,
    spec: OptionSpec,
    market: MarketData,
    t: float,
    *,
    eps: float = 1e-12,
) -> tuple[float, float, float]:
    """Check a market price against :func:`_bounds`.

    Raises
    ------
    ArbitrageViolationError
        If ``price < lb - eps``: below the zero-volatility floor.
    InvalidOptionPriceError
        If ``price > ub + eps``.
    """
    lb, ub, tau = _bounds(spec, market, t)
    details = (
        f"price={price:.12g}, bounds=[{lb:.12g}, {ub:.12g}], "
        f"S={market.spot:.12g}, K={spec.strike:.12g}, r={market.rate:.12g}, "
        f"q={market.dividend_yield:.12g}, tau={tau:.12g}"
    )
    if price < lb - eps:
        raise ArbitrageViolationError(
            f"Option price below zero-volatility floor: {details}", floor=lb
        )
    if price > ub + eps:
        raise InvalidOptionPriceError(f"Option price above upper bound: {details}")
    return lb, ub, tau


def _brenner_subrahmanyam_seed(mkt_price: float, spot: float, tau: float) -> float:
    """Closed-form starting volatility ``(C / S) / (0.398 * sqrt(tau))``."""
    return (mkt_price / spot) / (_BS_ATM_SLOPE * sqrt(tau))


def _inflection_vol(spec: OptionSpec, market: MarketData, tau: float) -> float:
    """Volatility ``sqrt(2 * |ln(Fp / (K * df))| / tau)`` where vega peaks.

    The price is convex in sigma below this point and concave above it, so
    Newton started anywhere between it and the root converges monotonically.
    Zero at the money.
    """
    fp = _prepaid_forward(market.spot, market.dividend_yield, tau)
    log_moneyness = log(fp / (spec.strike * _df(market.rate, tau)))
    return sqrt(2.0 * abs(log_moneyness) / tau)


def _newton_seed(
    mkt_price: float,
    spec: OptionSpec,
    market: MarketData,
    tau: float,
    model_price: Callable[[float], float],
    *,
    domain: tuple[float, float],
) -> float:
    """Starting volatility for Newton.

    The Brenner-Subrahmanyam seed is kept when it lies between the root and
    the inflection point; otherwise (typically far from the money, where that
    seed lands in a region of vanishing vega) Newton starts at the inflection
    point itself.
    """
    lo, hi = domain
    seed = min(max(_brenner_subrahmanyam_seed(mkt_price, market.spot, tau), lo), hi)
    inflection = _inflection_vol(spec, market, tau)
    if inflection <= 0.0:
        return seed
    inflection = min(max(inflection, lo), hi)

    if model_price(inflection) >= mkt_price:
        # root at or below the inflection point, price convex there
        safe = seed <= inflection and model_price(seed) >= mkt_price
    else:
        safe = seed >= inflection and model_price(seed) <= mkt_price
    if safe:
        return seed
    logger.debug("Seed %s outside monotone region; starting at %s", seed, inflection)
    return inflection


def implied_vol_bs_result(
    mkt_price: float,
    spec: OptionSpec,
    market: MarketData,
    *,
    cfg: ImpliedVolConfig | None = None,
    t: float = 0.0,
    sigma0: float | None = None,
) -> ImpliedVolResult:
    """Compute Black-Scholes implied volatility and return diagnostics.

    Solves ``BS_price(sigma) = mkt_price`` with the method in ``cfg.root_method``:

    - ``BISECTION``: the interval ``[cfg.sigma_lo, cfg.sigma_hi]`` is widened by
      doubling its upper end (up to ``cfg.numerics.ceiling``) until it brackets
      the price, then bisected.
    - ``NEWTON``: Newton iterations on the price with vega as derivative, seeded
      by the Brenner-Subrahmanyam approximation unless ``sigma0`` is given.
      When that seed does not lie between the root and the inflection point
      ``sqrt(2 |ln(Fp / (K df))| / tau)`` (far out of or in the money),
      Newton starts from the inflection point instead.
      Iterates are clamped into ``[cfg.sigma_lo, cfg.numerics.ceiling]``.

    Volatility is carried as loop state; no :class:`PricingInputs` is mutated.

    Parameters
    ----------
    mkt_price : float
        Observed market option price.
    spec : OptionSpec
        Option specification (kind, strike, expiry).
    market : MarketData
        Market observables (spot, rate, dividend yield).
    cfg : ImpliedVolConfig or None
        Solver settings; defaults to ``ImpliedVolConfig()``.
    t : float, default 0.0
        Valuation time in the same units as ``spec.expiry``.
    sigma0 : float or None, default None
        Newton starting point. Ignored by bisection.

    Returns
    -------
    ImpliedVolResult

    Raises
    ------
    ArbitrageViolationError
        If the price is below the zero-volatility floor. A price on the floor
        (within ``cfg.bounds_eps``) returns ``vol == 0.0`` instead.
    InvalidOptionPriceError
        If the price exceeds the upper no-arbitrage bound.
    BracketSearchExhaustedError
        Bisection only: no bracket below the ceiling.
    NoConvergenceError, DerivativeTooSmallError
        Propagated from the root finder.
    """
    cfg = cfg or ImpliedVolConfig()
    num = cfg.numerics
    lb, ub, tau = _validate_bounds(mkt_price, spec, market, t, eps=cfg.bounds_eps)

    if mkt_price <= lb + cfg.bounds_eps:
        logger.debug("Price %s on zero-vol floor %s; returning vol=0", mkt_price, lb)
        rr = RootResult(
            root=0.0,
            converged=True,
            iterations=0,
            method="boundary",
            f_at_root=float(mkt_price - lb),
        )
        return ImpliedVolResult(
            vol=0.0, root_result=rr, mkt_price=float(mkt_price), bounds=(lb, ub), tau=tau
        )

    def model_price(sigma: float) -> float:
        if spec.kind == OptionType.CALL:
            fn = bs_model.call_price
        else:
            fn = bs_model.put_price
        return float(
            fn(
                spot=market.spot,
                strike=spec.strike,
                r=market.rate,
                q=market.dividend_yield,
                sigma=float(sigma),
                tau=tau,
            )
        )

    def model_vega(sigma: float) -> float:
        return float(
            bs_model.vega(
                spot=market.spot,
                strike=spec.strike,
                r=market.rate,
                q=market.dividend_yield,
                sigma=float(sigma),
                tau=tau,
            )
        )

    if cfg.root_method == RootMethod.BISECTION:

        def excess(sigma: float) -> float:
            return model_price(sigma) - mkt_price

        lo, hi = expand_bracket(
            excess, cfg.sigma_lo, cfg.sigma_hi, grow=num.grow, ceiling=num.ceiling
        )
        rr = bisection_method(
            excess, lo, hi, accuracy=num.accuracy, max_iter=num.max_iter
        )
    elif cfg.root_method == RootMethod.NEWTON:
        if sigma0 is None:
            sigma0 = _newton_seed(
                mkt_price,
                spec,
                market,
                tau,
                model_price,
                domain=(cfg.sigma_lo, num.ceiling),
            )
        rr = newton_method(
            model_price,
            sigma0,
            dFn=model_vega,
            target=mkt_price,
            accuracy=num.accuracy,
            max_iter=num.max_iter,
            min_derivative=num.min_derivative,
            domain=(cfg.sigma_lo, num.ceiling),
        )
    else:
        raise ValueError(f"Unsupported root method: {cfg.root_method!r}")

    logger.debug(
        "Implied vol %s via %s in %s iterations", rr.root, rr.method, rr.iterations
    )
    return ImpliedVolResult(
        vol=float(rr.root),
        root_result=rr,
        mkt_price=float(mkt_price),
        bounds=(float(lb), float(ub)),
        tau=float(tau),
    )


def implied_vol_bs(
    mkt_price: float,
    spec: OptionSpec,
    market: MarketData,
    *,
    cfg: ImpliedVolConfig | None = None,
    t: float = 0.0,
    sigma0: float | None = None,
) -> float:
    """Convenience wrapper around :func:`implied_vol_bs_result` returning only the vol."""
    return implied_vol_bs_result(
        mkt_price, spec, market, cfg=cfg, t=t, sigma0=sigma0
    ).vol


def implied_vol(
    spot: float,
    strike: float,
    rate: float,
    maturity: float,
    observed_price: float,
    *,
    method: RootMethod | str = RootMethod.BISECTION,
    kind: OptionType = OptionType.CALL,
    dividend_yield: float = 0.0,
    cfg: ImpliedVolConfig | None = None,
) -> float:
    """Implied volatility from plain scalars.

    ``method`` selects the root finder and overrides ``cfg.root_method``.
    """
    cfg = replace(cfg or ImpliedVolConfig(), root_method=RootMethod(method))
    spec = OptionSpec(kind=kind, strike=strike, expiry=maturity)
    market = MarketData(spot=spot, rate=rate, dividend_yield=dividend_yield)
    return implied_vol_bs(observed_price, spec, market, cfg=cfg)


def with_implied_vol(
    p: PricingInputs,
    mkt_price: float,
    *,
    cfg: ImpliedVolConfig | None = None,
    sigma0: float | None = None,
) -> PricingInputs:
    """Return a copy of ``p`` whose sigma reproduces ``mkt_price``.

    ``p`` itself is untouched, also when the solver raises.

    Raises
    ------
    ArbitrageViolationError
        Also for a price on the zero-volatility floor: the solved vol is 0,
        which no pricer accepts as ``sigma``.
    """
    res = implied_vol_bs_result(
        mkt_price, p.spec, p.market, cfg=cfg, t=p.t, sigma0=sigma0
    )
    if res.root_result.method == "boundary":
        raise ArbitrageViolationError(
            f"Option price {mkt_price:.12g} sits on the zero-volatility floor "
            f"{res.bounds[0]:.12g}; no positive sigma reproduces it",
            floor=res.bounds[0],
        )
    return replace(p, sigma=res.vol)
