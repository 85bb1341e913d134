from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import replace

import numpy as np
import pandas as pd

from quantfin.config import ImpliedVolConfig
from quantfin.exceptions import InvalidOptionPriceError
from quantfin.models.bs import call_price, put_price
from quantfin.numerics.root_finding import RootFindingError, RootMethod
from quantfin.types import MarketData, OptionSpec, OptionType
from quantfin.vol.implied_vol import implied_vol_bs_result


def iv_recovery_table(
    *,
    S: float,
    r: float,
    tau: float,
    Ks: Sequence[float],
    true_vol_fn: Callable[[float], float],
    q: float = 0.0,
    kind: OptionType = OptionType.CALL,
    methods: Sequence[RootMethod] = (RootMethod.BISECTION, RootMethod.NEWTON),
    cfg: ImpliedVolConfig | None = None,
) -> pd.DataFrame:
    """
    Price each strike at sigma_true(K) with Black-Scholes, then invert the
    price with every root method in `methods`.

    Returns one row per (K, method) with columns:
      K, method, sigma_true, mkt_price, implied_vol, abs_error, converged,
      iterations, error

    Failed inversions keep their row with implied_vol = NaN and the exception
    class name in `error`.
    """
    cfg = ImpliedVolConfig() if cfg is None else cfg
    market = MarketData(spot=float(S), rate=float(r), dividend_yield=float(q))
    price_fn = call_price if kind == OptionType.CALL else put_price

    rows = []
    for K in Ks:
        K = float(K)
        sigma_true = float(true_vol_fn(K))
        spec = OptionSpec(kind=kind, strike=K, expiry=float(tau))
        mkt_price = float(
            price_fn(spot=S, strike=K, r=r, q=q, sigma=sigma_true, tau=tau)
        )

        for method in methods:
            method = RootMethod(method)
            try:
                res = implied_vol_bs_result(
                    mkt_price, spec, market, cfg=replace(cfg, root_method=method)
                )
                iv = res.vol
                converged = res.root_result.converged
                iterations = res.root_result.iterations
                error = ""
            except (RootFindingError, InvalidOptionPriceError) as exc:
                iv = np.nan
                converged = False
                iterations = -1
                error = type(exc).__name__

            rows.append(
                dict(
                    K=K,
                    method=method.value,
                    sigma_true=sigma_true,
                    mkt_price=mkt_price,
                    implied_vol=iv,
                    abs_error=float(abs(iv - sigma_true)) if np.isfinite(iv) else np.nan,
                    converged=converged,
                    iterations=iterations,
                    error=error,
                )
            )

    return pd.DataFrame(rows)
