from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd

from quantfin.pricers.black_scholes import bs_price
from quantfin.pricers.tree import binom_price
from quantfin.types import PricingInputs


def binom_convergence_table(
    p: PricingInputs,
    n_steps: int | Sequence[int],
) -> pd.DataFrame:
    """CRR binomial prices against the Black-Scholes benchmark across n_steps.

    An int means "every step count from 1 to n_steps". Returns a DataFrame with
    columns n_steps, binom, bs, abs_error, sorted by n_steps.
    """
    if isinstance(n_steps, (int, np.integer)):
        if n_steps <= 0:
            raise ValueError("n_steps must be a positive integer")
        n_steps_vals = np.arange(1, int(n_steps) + 1, dtype=int)
    else:
        n_steps_vals = np.asarray(list(n_steps), dtype=int)
        if n_steps_vals.size == 0:
            raise ValueError("n_steps must be non-empty")
        if np.any(n_steps_vals <= 0):
            raise ValueError("n_steps must be positive integers")
        n_steps_vals = np.unique(n_steps_vals)

    binom_vals = np.array([binom_price(p, int(n)) for n in n_steps_vals], dtype=float)
    bs_val = bs_price(p)

    return pd.DataFrame(
        {
            "n_steps": n_steps_vals,
            "binom": binom_vals,
            "bs": np.full(n_steps_vals.size, bs_val),
            "abs_error": np.abs(binom_vals - bs_val),
        }
    )
