from __future__ import annotations

import math

import pytest

from quantfin import OptionType, bs_price
from quantfin.market.curves import (
    FlatTermStructure,
    InterpolatedTermStructure,
    TermStructure,
    df_from_yield,
    forward_rate_from_dfs,
    forward_rate_from_yields,
    yield_from_df,
    yield_linearly_interpolated,
)
from quantfin.market.parity import (
    call_from_put,
    parity_forward_value,
    put_call_parity_residual,
)
from quantfin.models.forward import future_price


def test_flat_curve_is_consistent():
    curve = FlatTermStructure(0.03)
    assert curve.df(2.0) == pytest.approx(math.exp(-0.06))
    assert curve(2.0) == curve.df(2.0)
    assert curve.zero_yield(2.0) == pytest.approx(0.03, rel=1e-12)
    assert curve.forward_rate(1.0, 4.0) == pytest.approx(0.03, rel=1e-12)
    assert curve.df(0.0) == 1.0


def test_flat_curve_allows_negative_rates():
    curve = FlatTermStructure(-0.005)
    assert curve.df(1.0) > 1.0
    assert curve.zero_yield(1.0) == pytest.approx(-0.005, rel=1e-12)


def test_term_structure_requires_df():
    with pytest.raises(TypeError):
        TermStructure()

    class Hyperbolic(TermStructure):
        def df(self, T: float) -> float:
            return 1.0 / (1.0 + 0.05 * T)

    curve = Hyperbolic()
    assert curve.zero_yield(2.0) == pytest.approx(math.log(1.1) / 2.0)
    assert curve.forward_rate(1.0, 2.0) == pytest.approx(math.log(1.1 / 1.05))


def test_interpolated_curve_linear_inside_flat_outside():
    curve = InterpolatedTermStructure(times=(1.0, 2.0, 5.0), yields=(0.02, 0.03, 0.04))

    assert curve.yield_at(1.5) == pytest.approx(0.025)
    assert curve.yield_at(3.5) == pytest.approx(0.035)
    assert curve.yield_at(0.25) == pytest.approx(0.02)
    assert curve.yield_at(10.0) == pytest.approx(0.04)
    assert curve.zero_yield(1.5) == pytest.approx(0.025, rel=1e-12)
    # forward between pillars: (r2*t2 - r1*t1) / (t2 - t1)
    assert curve.forward_rate(1.0, 2.0) == pytest.approx(0.04, rel=1e-10)


def test_interpolated_curve_validation():
    with pytest.raises(ValueError):
        InterpolatedTermStructure(times=(2.0, 1.0), yields=(0.01, 0.02))
    with pytest.raises(ValueError):
        InterpolatedTermStructure(times=(1.0, 2.0), yields=(0.01,))
    with pytest.raises(ValueError):
        FlatTermStructure(0.01).df(-1.0)
    with pytest.raises(ValueError):
        FlatTermStructure(0.01).forward_rate(2.0, 2.0)


def test_empty_interpolated_curve_is_zero_rate():
    curve = InterpolatedTermStructure(times=(), yields=())
    assert curve.yield_at(3.0) == 0.0
    assert curve.df(3.0) == 1.0
    assert yield_linearly_interpolated(3.0, [], []) == 0.0


def test_rate_conversions_round_trip():
    assert yield_from_df(df_from_yield(0.042, 3.0), 3.0) == pytest.approx(0.042, rel=1e-12)
    with pytest.raises(ValueError):
        yield_from_df(0.9, 0.0)
    with pytest.raises(ValueError):
        yield_from_df(0.0, 1.0)


def test_forward_rates_agree():
    r1, r2, t1, t2 = 0.02, 0.03, 1.0, 3.0
    from_dfs = forward_rate_from_dfs(df_from_yield(r1, t1), df_from_yield(r2, t2), t2 - t1)
    assert forward_rate_from_yields(r1, r2, 0.0, t1, t2) == pytest.approx(0.035)
    assert from_dfs == pytest.approx(0.035, rel=1e-12)

    with pytest.raises(ValueError):
        forward_rate_from_dfs(0.99, 0.98, 0.0)
    with pytest.raises(ValueError):
        forward_rate_from_yields(r1, r2, 0.0, t2, t1)


def test_future_price_cost_of_carry():
    assert future_price(100.0, 0.05, 0.0, 1.0) == pytest.approx(100.0 * math.exp(0.05))
    assert future_price(100.0, 0.05, 0.5, 0.5) == 100.0
    with pytest.raises(ValueError):
        future_price(100.0, 0.05, 1.0, 0.5)


def test_parity_helpers(make_inputs):
    p_call = make_inputs(S=100.0, K=90.0, r=0.03, q=0.02, sigma=0.25, T=2.0)
    p_put = make_inputs(
        S=100.0, K=90.0, r=0.03, q=0.02, sigma=0.25, T=2.0, kind=OptionType.PUT
    )
    fwd = parity_forward_value(p_call)
    assert fwd == pytest.approx(100.0 * math.exp(-0.04) - 90.0 * math.exp(-0.06))

    C, P = bs_price(p_call), bs_price(p_put)
    assert call_from_put(P, p_call) == pytest.approx(C, abs=1e-9)
    assert put_call_parity_residual(call=C + 0.5, put=P, p=p_call) == pytest.approx(0.5, abs=1e-9)
