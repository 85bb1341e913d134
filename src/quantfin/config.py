from __future__ import annotations

from dataclasses import dataclass, field

from quantfin.numerics.root_finding import RootMethod


@dataclass(frozen=True, slots=True)
class NumericsConfig:
    accuracy: float = 1e-5
    max_iter: int = 100
    ceiling: float = 1e10  # upper limit for bracket expansion
    grow: float = 2.0
    min_derivative: float = 1e-12

    def __post_init__(self) -> None:
        if self.accuracy <= 0:
            raise ValueError("accuracy must be > 0")
        if self.max_iter <= 0:
            raise ValueError("max_iter must be > 0")
        if self.ceiling <= 0:
            raise ValueError("ceiling must be > 0")
        if self.grow <= 1.0:
            raise ValueError("grow must be > 1")
        if self.min_derivative <= 0:
            raise ValueError("min_derivative must be > 0")


@dataclass(frozen=True, slots=True)
class ImpliedVolConfig:
    root_method: RootMethod = RootMethod.BISECTION
    sigma_lo: float = 1e-8
    sigma_hi: float = 1.0  # initial bracket end, grown up to numerics.ceiling
    bounds_eps: float = 1e-12
    numerics: NumericsConfig = field(
        default_factory=lambda: NumericsConfig(max_iter=200)
    )

    def __post_init__(self) -> None:
        if self.sigma_lo <= 0 or self.sigma_hi <= 0:
            raise ValueError("sigma bounds must be > 0")
        if self.sigma_lo >= self.sigma_hi:
            raise ValueError("sigma_lo must be < sigma_hi")
        if self.bounds_eps < 0:
            raise ValueError("bounds_eps must be >= 0")
        object.__setattr__(self, "root_method", RootMethod(self.root_method))
