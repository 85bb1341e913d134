import math

import numpy as np
import pytest

from quantfin import GreeksRequest, OptionType, bs_greeks, bs_price, bs_price_and_greeks
from quantfin.market.parity import put_call_parity_residual, put_from_call
from quantfin.models.bs import call_price, d1_d2, price_and_greeks, put_price, vega
from quantfin.pricers.black_scholes import bs_vega


def test_put_call_parity_no_dividends():
    """C - P = S - K*exp(-rT) for European options with q=0."""
    S, K, r, sigma, T = 100.0, 105.0, 0.03, 0.25, 1.2

    df = math.exp(-r * T)
    C = float(call_price(spot=S, strike=K, r=r, sigma=sigma, tau=T))
    P = float(put_price(spot=S, strike=K, r=r, sigma=sigma, tau=T))

    assert abs((C - P) - (S - K * df)) < 1e-8


@pytest.mark.parametrize("q", [0.0, 0.02, 0.07])
@pytest.mark.parametrize("K", [70.0, 100.0, 140.0])
def test_put_call_parity_with_dividend_yield(make_inputs, K, q):
    p_call = make_inputs(S=100.0, K=K, r=0.04, q=q, sigma=0.3, T=0.8)
    p_put = make_inputs(S=100.0, K=K, r=0.04, q=q, sigma=0.3, T=0.8, kind=OptionType.PUT)

    C = bs_price(p_call)
    P = bs_price(p_put)

    assert put_call_parity_residual(call=C, put=P, p=p_call) == pytest.approx(0.0, abs=1e-9)
    assert put_from_call(C, p_call) == pytest.approx(P, abs=1e-9)


def test_known_reference_prices(make_inputs):
    # Hull: S=42, K=40, r=10%, sigma=20%, T=0.5 -> C=4.76, P=0.81
    p = make_inputs(S=42.0, K=40.0, r=0.10, sigma=0.20, T=0.5)
    assert bs_price(p) == pytest.approx(4.76, abs=5e-3)
    p_put = make_inputs(S=42.0, K=40.0, r=0.10, sigma=0.20, T=0.5, kind=OptionType.PUT)
    assert bs_price(p_put) == pytest.approx(0.81, abs=5e-3)

    atm = make_inputs(S=100.0, K=100.0, r=0.05, sigma=0.20, T=1.0)
    assert bs_price(atm) == pytest.approx(10.4506, abs=5e-4)


def test_d1_d2_formula():
    d1, d2 = d1_d2(spot=100.0, strike=95.0, r=0.03, q=0.01, sigma=0.25, tau=2.0)
    vst = 0.25 * math.sqrt(2.0)
    expected_d1 = (math.log(100.0 / 95.0) + 0.02 * 2.0) / vst + 0.5 * vst
    assert d1 == pytest.approx(expected_d1, rel=1e-14)
    assert d1 - d2 == pytest.approx(vst, rel=1e-14)


def test_call_bounds():
    """max(S-K*df,0) <= C <= S."""
    S, K, r, sigma, T = 120.0, 100.0, 0.04, 0.3, 0.75

    df = math.exp(-r * T)
    C = float(call_price(spot=S, strike=K, r=r, sigma=sigma, tau=T))

    assert max(S - K * df, 0.0) - 1e-12 <= C <= S + 1e-12


def test_call_monotone_decreasing_in_strike():
    strikes = np.array([60, 80, 100, 120, 140], dtype=float)
    prices = np.array(
        [call_price(spot=100.0, strike=float(K), r=0.05, sigma=0.2, tau=1.0) for K in strikes]
    )
    assert np.all(np.diff(prices) <= 1e-10)


@pytest.mark.parametrize(
    "bad",
    [
        dict(spot=0.0),
        dict(strike=-1.0),
        dict(sigma=0.0),
        dict(tau=0.0),
    ],
)
def test_invalid_inputs_raise(bad):
    kwargs = dict(spot=100.0, strike=100.0, r=0.05, sigma=0.2, tau=1.0)
    kwargs.update(bad)
    with pytest.raises(ValueError):
        call_price(**kwargs)


def _fd(f, x, h):
    return (f(x + h) - f(x - h)) / (2.0 * h)


@pytest.mark.parametrize("kind", [OptionType.CALL, OptionType.PUT])
def test_greeks_match_finite_differences(kind):
    S, K, r, q, sigma, T = 100.0, 95.0, 0.03, 0.01, 0.25, 1.5
    base = dict(spot=S, strike=K, r=r, q=q, sigma=sigma, tau=T)

    def px(**kw):
        args = {**base, **kw}
        return float(price_and_greeks(kind, request=GreeksRequest.NONE, **args)[0])

    _, g = price_and_greeks(kind, **base)

    # A&S cdf is good to ~1e-7, so keep bumps moderate
    assert g.delta == pytest.approx(_fd(lambda s: px(spot=s), S, 1e-2), abs=1e-5)
    assert g.gamma == pytest.approx(
        (px(spot=S + 0.5) - 2 * px(spot=S) + px(spot=S - 0.5)) / 0.25, abs=1e-4
    )
    assert g.vega == pytest.approx(_fd(lambda v: px(sigma=v), sigma, 1e-4), rel=1e-4)
    assert g.rho == pytest.approx(_fd(lambda x: px(r=x), r, 1e-4), rel=1e-4)
    # theta: calendar-time derivative = -d/dtau
    assert g.theta == pytest.approx(-_fd(lambda t: px(tau=t), T, 1e-4), rel=1e-4)


def test_selective_greeks_leave_others_none(make_inputs):
    p = make_inputs(S=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0)
    price, g = bs_price_and_greeks(p, GreeksRequest.DELTA | GreeksRequest.RHO)

    assert price == pytest.approx(bs_price(p))
    assert g.delta is not None and g.rho is not None
    assert g.gamma is None and g.vega is None and g.theta is None

    _, none = bs_price_and_greeks(p, GreeksRequest.NONE)
    assert none.as_dict() == {}


def test_delta_and_rho_skip_density(monkeypatch, make_inputs):
    import quantfin.models.bs as bs_mod

    def _boom(*args, **kwargs):
        raise RuntimeError("pdf evaluated")

    monkeypatch.setattr(bs_mod, "norm_pdf", _boom)
    p = make_inputs(S=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0)
    _, g = bs_price_and_greeks(p, GreeksRequest.DELTA | GreeksRequest.RHO)
    assert g.delta is not None

    with pytest.raises(RuntimeError):
        bs_price_and_greeks(p, GreeksRequest.VEGA)


def test_bs_greeks_dict_and_vega(make_inputs):
    p = make_inputs(S=100.0, K=110.0, r=0.01, sigma=0.35, T=0.5)
    out = bs_greeks(p)
    assert set(out) == {"price", "delta", "gamma", "theta", "vega", "rho"}
    assert out["vega"] == pytest.approx(
        float(vega(spot=100.0, strike=110.0, r=0.01, sigma=0.35, tau=0.5))
    )
    assert 0.0 < out["delta"] < 1.0
    assert out["gamma"] > 0.0


def test_float32_price_close_to_float64():
    p64 = call_price(spot=100.0, strike=100.0, r=0.05, sigma=0.2, tau=1.0)
    p32 = call_price(spot=100.0, strike=100.0, r=0.05, sigma=0.2, tau=1.0, dtype=np.float32)
    assert isinstance(p32, np.float32)
    assert float(p32) == pytest.approx(float(p64), rel=1e-5)


def test_vega_same_for_calls_and_puts(make_inputs):
    p_call = make_inputs(S=100.0, K=90.0, r=0.03, q=0.01, sigma=0.25, T=1.0)
    p_put = make_inputs(
        S=100.0, K=90.0, r=0.03, q=0.01, sigma=0.25, T=1.0, kind=OptionType.PUT
    )
    assert bs_vega(p_call) == bs_vega(p_put)
    assert bs_vega(p_call) == pytest.approx(bs_greeks(p_put)["vega"], rel=1e-14)


def test_base_case_delta_between_zero_and_one(base_params, make_inputs):
    bp = base_params
    p = make_inputs(
        S=bp["S"], K=bp["K"], r=bp["r"], q=bp["q"], sigma=bp["sigma"], T=bp["T"], t=bp["t"]
    )
    _, g = bs_price_and_greeks(p, GreeksRequest.DELTA)
    # ATM with positive carry: slightly above one half
    assert 0.5 < g.delta < 1.0
    assert bs_price(p) == pytest.approx(10.4506, abs=5e-4)
