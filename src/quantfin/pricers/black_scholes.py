from __future__ import annotations

from ..models import bs as bs_model
from ..types import Greeks, GreeksRequest, OptionType, PricingInputs


def bs_price(p: PricingInputs) -> float:
    if p.spec.kind == OptionType.CALL:
        return float(
            bs_model.call_price(
                spot=p.S, strike=p.K, r=p.r, q=p.q, sigma=p.sigma, tau=p.tau
            )
        )
    if p.spec.kind == OptionType.PUT:
        return float(
            bs_model.put_price(
                spot=p.S, strike=p.K, r=p.r, q=p.q, sigma=p.sigma, tau=p.tau
            )
        )
    raise ValueError(f"Unsupported option kind: {p.spec.kind}")


def bs_vega(p: PricingInputs) -> float:
    return float(
        bs_model.vega(spot=p.S, strike=p.K, r=p.r, q=p.q, sigma=p.sigma, tau=p.tau)
    )


def bs_price_and_greeks(
    p: PricingInputs, request: GreeksRequest = GreeksRequest.ALL
) -> tuple[float, Greeks]:
    price, greeks = bs_model.price_and_greeks(
        p.spec.kind,
        spot=p.S,
        strike=p.K,
        r=p.r,
        q=p.q,
        sigma=p.sigma,
        tau=p.tau,
        request=request,
    )
    return float(price), Greeks(
        **{k: float(v) for k, v in greeks.as_dict().items()}
    )


def bs_greeks(
    p: PricingInputs, request: GreeksRequest = GreeksRequest.ALL
) -> dict[str, float]:
    """Price plus the requested Greeks as a flat dict keyed by name."""
    price, greeks = bs_price_and_greeks(p, request)
    return {"price": price, **greeks.as_dict()}
