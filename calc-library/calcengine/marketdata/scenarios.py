"""
Scenario definitions: named sets of perturbations applied to baseline market data.

A perturbation is applied to one resolved value at a time and must return a
new value; the baseline object is never modified (curves and rates are
immutable, `bumped` returns a copy).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional, Protocol

from calcengine.currency import CurrencyPair
from calcengine.marketdata.ids import CurveId, FxRateId, IssuerCurveId, MarketDataId


class Perturbation(Protocol):
    def applies_to(self, market_data_id: MarketDataId) -> bool:
        ...

    def apply(self, market_data_id: MarketDataId, value: Any) -> Any:
        """Return the perturbed copy of `value`."""
        ...


def _curve_name(market_data_id: MarketDataId) -> Optional[str]:
    if isinstance(market_data_id, (CurveId, IssuerCurveId)):
        return market_data_id.name
    return None


@dataclass(frozen=True)
class CurveParallelShift:
    """
    Additive parallel shift of curve parameters (0.0001 = 1bp).

    Applies to every curve when `curve_names` is None, otherwise to the named curves.
    """

    shift: float
    curve_names: Optional[frozenset[str]] = None

    def __post_init__(self) -> None:
        if self.curve_names is not None:
            object.__setattr__(self, "curve_names", frozenset(self.curve_names))

    @classmethod
    def of_bp(cls, shift_bp: float, curve_names: Optional[Iterable[str]] = None) -> CurveParallelShift:
        return cls(shift_bp / 10000.0, None if curve_names is None else frozenset(curve_names))

    def applies_to(self, market_data_id: MarketDataId) -> bool:
        name = _curve_name(market_data_id)
        if name is None:
            return False
        return self.curve_names is None or name in self.curve_names

    def apply(self, market_data_id: MarketDataId, value: Any) -> Any:
        return value.bumped(self.shift)


@dataclass(frozen=True)
class CurvePointShift:
    """Additive shift of a single pillar of one named curve."""

    curve_name: str
    pillar_index: int
    shift: float

    def applies_to(self, market_data_id: MarketDataId) -> bool:
        return _curve_name(market_data_id) == self.curve_name

    def apply(self, market_data_id: MarketDataId, value: Any) -> Any:
        return value.bumped_at(self.pillar_index, self.shift)


@dataclass(frozen=True)
class FxRateShift:
    """Relative shift of an FX rate: 0.01 moves base/counter up 1%."""

    pair: CurrencyPair
    relative_shift: float

    def __post_init__(self) -> None:
        if self.relative_shift <= -1.0:
            raise ValueError("relative_shift must be > -1")

    def applies_to(self, market_data_id: MarketDataId) -> bool:
        if not isinstance(market_data_id, FxRateId):
            return False
        return market_data_id.pair in (self.pair, self.pair.inverse())

    def apply(self, market_data_id: MarketDataId, value: Any) -> Any:
        factor = 1.0 + self.relative_shift
        if market_data_id.pair == self.pair:
            return value * factor
        return value / factor


@dataclass(frozen=True)
class Scenario:
    """
    A named what-if variant of the baseline market.

    Perturbations apply in order. `valuation_date` overrides the baseline
    valuation date for this scenario only.
    """

    name: str
    perturbations: tuple[Perturbation, ...] = ()
    valuation_date: Optional[date] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "perturbations", tuple(self.perturbations))

    @classmethod
    def base(cls, name: str = "Base") -> Scenario:
        return cls(name=name)

    @classmethod
    def parallel_shift(cls, name: str, shift_bp: float) -> Scenario:
        return cls(name=name, perturbations=(CurveParallelShift.of_bp(shift_bp),))

    def is_base(self) -> bool:
        return not self.perturbations

    def perturb(self, market_data_id: MarketDataId, value: Any) -> Any:
        """Apply every matching perturbation to a baseline value."""
        for perturbation in self.perturbations:
            if perturbation.applies_to(market_data_id):
                value = perturbation.apply(market_data_id, value)
        return value


def parallel_shift_scenarios(shifts_bp: Iterable[float]) -> list[Scenario]:
    """One parallel-shift scenario per shift, e.g. [-100, 0, 100]."""
    scenarios = []
    for shift_bp in shifts_bp:
        if shift_bp == 0:
            scenarios.append(Scenario.base())
        else:
            scenarios.append(Scenario.parallel_shift(f"Parallel {shift_bp:+g}bp", shift_bp))
    return scenarios
