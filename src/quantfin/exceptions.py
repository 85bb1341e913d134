class InvalidOptionPriceError(ValueError):
    """Raised when an input option price violates no-arbitrage bounds.

    Raised by the implied-volatility solvers in :mod:`quantfin.vol.implied_vol`
    when the market option price is inconsistent with the bounds for European
    options under continuous rates and dividend yield.

    Notes
    -----
    The bounds used are:

    - Call: ``max(Fp - K*df, 0) <= C <= Fp``
    - Put : ``max(K*df - Fp, 0) <= P <= K*df``

    where ``df = exp(-r*tau)`` and ``Fp = S*exp(-q*tau)`` is the prepaid forward.
    """


class ArbitrageViolationError(InvalidOptionPriceError):
    """Price is below the zero-volatility floor.

    No volatility reproduces such a price. ``boundary_vol`` carries the
    boundary answer (zero) for callers that prefer to clamp instead of fail.
    """

    def __init__(self, message: str, *, floor: float, boundary_vol: float = 0.0):
        super().__init__(message)
        self.floor = floor
        self.boundary_vol = boundary_vol


class InvalidLatticeError(ValueError):
    """Binomial lattice parameters imply a risk-neutral probability outside [0, 1]."""
