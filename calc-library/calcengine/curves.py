"""
Curve primitives bound into scenario market data.

Calibration is out of scope; curves are supplied ready-made by the market
data source. Conventions:
- Times are **year fractions** from the valuation date.
- ZeroRateCurve: continuously compounded zero rates, **linear in rates**,
  flat extrapolation.
- HazardRateCurve: piecewise-constant hazard; `df(t)` is the survival
  probability S(t), not a discount factor.
- VolatilityCurve: Black volatilities by expiry, linear, flat extrapolation.

Every curve is immutable: `bumped` / `bumped_at` return new instances, which is
what scenario perturbations and bump-and-reprice sensitivities rely on.
"""

import math
from dataclasses import dataclass


def _validate_pillars(pillars: tuple[float, ...], values: tuple[float, ...], label: str) -> None:
    if len(pillars) != len(values):
        raise ValueError(f"pillars and {label} must have the same length")
    if not pillars:
        raise ValueError("curve has no pillars")
    for i in range(1, len(pillars)):
        if pillars[i] <= pillars[i - 1]:
            raise ValueError("pillars must be strictly increasing")


def _interpolate(pillars: tuple[float, ...], values: tuple[float, ...], t: float) -> float:
    """Linear interpolation with flat extrapolation."""
    if t <= pillars[0]:
        return values[0]
    if t >= pillars[-1]:
        return values[-1]
    for i in range(len(pillars) - 1):
        t0, t1 = pillars[i], pillars[i + 1]
        if t0 <= t <= t1:
            v0, v1 = values[i], values[i + 1]
            return v0 + (v1 - v0) * (t - t0) / (t1 - t0)
    return values[-1]


def _shift_at(values: tuple[float, ...], index: int, bump: float) -> tuple[float, ...]:
    if not 0 <= index < len(values):
        raise IndexError(f"pillar index {index} out of range")
    return tuple(v + bump if i == index else v for i, v in enumerate(values))


@dataclass(frozen=True)
class ZeroRateCurve:
    """
    Zero rate curve (continuously compounded) with linear interpolation.

    `zero_rates_cc[i]` is the zero rate at `pillars[i]`.
    """

    name: str
    pillars: tuple[float, ...]
    zero_rates_cc: tuple[float, ...]

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so the curve stays hashable/immutable
        object.__setattr__(self, "pillars", tuple(self.pillars))
        object.__setattr__(self, "zero_rates_cc", tuple(self.zero_rates_cc))
        _validate_pillars(self.pillars, self.zero_rates_cc, "zero_rates_cc")

    @property
    def parameter_count(self) -> int:
        return len(self.pillars)

    def zero_rate_cc(self, t: float) -> float:
        """Continuously compounded zero rate at time t (t >= 0)."""
        if t < 0:
            raise ValueError("t must be >= 0")
        return _interpolate(self.pillars, self.zero_rates_cc, t)

    def df(self, t: float) -> float:
        r"""
        Discount factor to time t.

        DF(t) = exp(-r(t)*t). Times at or before the valuation date discount at 1.
        """
        if t <= 0:
            return 1.0
        return math.exp(-self.zero_rate_cc(t) * t)

    def forward_rate(self, t0: float, t1: float) -> float:
        """Simply-compounded forward rate over [t0, t1]."""
        if t1 <= t0:
            raise ValueError("forward period end must be after start")
        return (self.df(t0) / self.df(t1) - 1.0) / (t1 - t0)

    def bumped(self, bump: float) -> "ZeroRateCurve":
        """Parallel additive shift of every zero rate (1bp = 0.0001)."""
        return ZeroRateCurve(
            name=self.name,
            pillars=self.pillars,
            zero_rates_cc=tuple(r + bump for r in self.zero_rates_cc),
        )

    def bumped_at(self, index: int, bump: float) -> "ZeroRateCurve":
        """Additive shift of the zero rate at a single pillar."""
        return ZeroRateCurve(
            name=self.name,
            pillars=self.pillars,
            zero_rates_cc=_shift_at(self.zero_rates_cc, index, bump),
        )


@dataclass(frozen=True)
class HazardRateCurve:
    """
    Hazard rate curve with piecewise-constant hazard between pillars.

    hazard_rates[i] applies on the segment (pillars[i-1], pillars[i]]; the first
    segment starts at 0 and the last rate extends flat beyond the final pillar.
    """

    name: str
    pillars: tuple[float, ...]
    hazard_rates: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "pillars", tuple(self.pillars))
        object.__setattr__(self, "hazard_rates", tuple(self.hazard_rates))
        _validate_pillars(self.pillars, self.hazard_rates, "hazard_rates")

    @property
    def parameter_count(self) -> int:
        return len(self.pillars)

    def hazard_rate(self, t: float) -> float:
        """Piecewise-constant hazard at time t."""
        if t < 0:
            raise ValueError("t must be >= 0")
        for pillar, rate in zip(self.pillars, self.hazard_rates):
            if t <= pillar:
                return rate
        return self.hazard_rates[-1]

    def df(self, t: float) -> float:
        """Survival probability S(t) = exp(-integral_0^t h(u) du)."""
        if t <= 0:
            return 1.0
        integral = 0.0
        prev = 0.0
        for pillar, rate in zip(self.pillars, self.hazard_rates):
            t_end = min(pillar, t)
            if t_end > prev:
                integral += rate * (t_end - prev)
            prev = pillar
            if prev >= t:
                break
        if t > self.pillars[-1]:
            integral += self.hazard_rates[-1] * (t - self.pillars[-1])
        return math.exp(-integral)

    def bumped(self, bump: float) -> "HazardRateCurve":
        """Parallel additive shift of every hazard rate."""
        return HazardRateCurve(
            name=self.name,
            pillars=self.pillars,
            hazard_rates=tuple(h + bump for h in self.hazard_rates),
        )

    def bumped_at(self, index: int, bump: float) -> "HazardRateCurve":
        return HazardRateCurve(
            name=self.name,
            pillars=self.pillars,
            hazard_rates=_shift_at(self.hazard_rates, index, bump),
        )


@dataclass(frozen=True)
class VolatilityCurve:
    """Black (lognormal) volatility term structure by option expiry."""

    name: str
    expiries: tuple[float, ...]
    volatilities: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "expiries", tuple(self.expiries))
        object.__setattr__(self, "volatilities", tuple(self.volatilities))
        _validate_pillars(self.expiries, self.volatilities, "volatilities")
        if any(v < 0 for v in self.volatilities):
            raise ValueError("volatilities must be >= 0")

    def volatility(self, expiry: float) -> float:
        return _interpolate(self.expiries, self.volatilities, expiry)

    def bumped(self, bump: float) -> "VolatilityCurve":
        return VolatilityCurve(
            name=self.name,
            expiries=self.expiries,
            volatilities=tuple(v + bump for v in self.volatilities),
        )
