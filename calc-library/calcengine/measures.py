"""
Measures: identifiers of the analytics a caller can request.

`Measures` lists the standard set. The set is open: callers may declare their
own `Measure("MyMeasure")` and register functions for it.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Measure:
    """Named analytic quantity, e.g. Measure("PresentValue")."""

    name: str

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("measure name must not be empty")

    def __str__(self) -> str:
        return self.name


class Measures:
    """Standard measures known to the built-in calculation functions."""

    PRESENT_VALUE = Measure("PresentValue")
    PV01 = Measure("PV01")
    BUCKETED_PV01 = Measure("BucketedPV01")
    PAR_RATE = Measure("ParRate")
    PAR_SPREAD = Measure("ParSpread")
    CASH_FLOWS = Measure("CashFlows")
    CURRENCY_EXPOSURE = Measure("CurrencyExposure")
    CURRENT_CASH = Measure("CurrentCash")
    FORWARD_FX_RATE = Measure("ForwardFxRate")
    FX_DELTA = Measure("FxDelta")
    CS01 = Measure("CS01")

    @classmethod
    def standard(cls) -> tuple[Measure, ...]:
        return tuple(v for v in vars(cls).values() if isinstance(v, Measure))

    @classmethod
    def of(cls, name: str) -> Measure:
        """Return the standard measure with this name. Raises ValueError if unknown."""
        for measure in cls.standard():
            if measure.name.lower() == name.strip().lower():
                return measure
        raise ValueError(f"unknown measure: {name!r}")
