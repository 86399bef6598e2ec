"""Structured (non-scalar) measure values: cash flow lists and curve sensitivities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from calcengine.currency import CurrencyAmount, FxRateLookup


@dataclass(frozen=True)
class CashFlow:
    """A single future payment with its discounting applied."""

    payment_time: float
    currency: str
    forecast_amount: float
    discount_factor: float

    @property
    def present_value(self) -> float:
        return self.forecast_amount * self.discount_factor


@dataclass(frozen=True)
class CashFlows:
    """Ordered cash flows of a trade (by payment time)."""

    flows: tuple[CashFlow, ...] = ()

    @classmethod
    def of(cls, flows: list[CashFlow]) -> CashFlows:
        return cls(tuple(sorted(flows, key=lambda f: (f.payment_time, f.currency))))

    def __iter__(self) -> Iterator[CashFlow]:
        return iter(self.flows)

    def __len__(self) -> int:
        return len(self.flows)

    def total_present_value(self, currency: str) -> CurrencyAmount:
        pv = sum(f.present_value for f in self.flows if f.currency == currency)
        return CurrencyAmount(currency, pv)


@dataclass(frozen=True)
class CurveSensitivity:
    """Per-pillar sensitivity to one curve."""

    curve_name: str
    currency: str
    pillars: tuple[float, ...]
    sensitivities: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.pillars) != len(self.sensitivities):
            raise ValueError("pillars and sensitivities must have the same length")

    def total(self) -> CurrencyAmount:
        return CurrencyAmount(self.currency, sum(self.sensitivities))

    def convert_to(self, currency: str, fx: FxRateLookup) -> CurveSensitivity:
        if currency == self.currency:
            return self
        rate = fx(self.currency, currency)
        return CurveSensitivity(
            curve_name=self.curve_name,
            currency=currency,
            pillars=self.pillars,
            sensitivities=tuple(s * rate for s in self.sensitivities),
        )


@dataclass(frozen=True)
class CurveSensitivities:
    """Bucketed sensitivities, one entry per curve, ordered by curve name."""

    entries: tuple[CurveSensitivity, ...] = ()

    @classmethod
    def of(cls, entries: list[CurveSensitivity]) -> CurveSensitivities:
        return cls(tuple(sorted(entries, key=lambda e: e.curve_name)))

    def get(self, curve_name: str) -> CurveSensitivity:
        for entry in self.entries:
            if entry.curve_name == curve_name:
                return entry
        raise KeyError(curve_name)

    def curve_names(self) -> tuple[str, ...]:
        return tuple(e.curve_name for e in self.entries)

    def total(self, currency: str) -> CurrencyAmount:
        """Sum of all buckets; every entry must already be in `currency`."""
        total = CurrencyAmount(currency, 0.0)
        for entry in self.entries:
            total = total.plus(entry.total())
        return total

    def convert_to(self, currency: str, fx: FxRateLookup) -> CurveSensitivities:
        return CurveSensitivities(tuple(e.convert_to(currency, fx) for e in self.entries))
