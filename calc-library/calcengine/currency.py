"""
Currency value types.

Currencies are plain ISO-4217 codes ("USD", "EUR"). Amounts are floats, in line
with the rest of the library's year-fraction / float conventions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Mapping

FxRateLookup = Callable[[str, str], float]
"""fx(base, counter) -> units of counter per unit of base."""


def validate_currency(code: str) -> None:
    """Raise ValueError unless `code` looks like an ISO-4217 code."""
    if len(code) != 3 or not code.isalpha() or not code.isupper():
        raise ValueError(f"invalid currency code: {code!r}")


@dataclass(frozen=True, order=True)
class CurrencyPair:
    """Ordered currency pair; a rate for EUR/USD is USD per EUR."""

    base: str
    counter: str

    def __post_init__(self) -> None:
        validate_currency(self.base)
        validate_currency(self.counter)

    @classmethod
    def parse(cls, text: str) -> CurrencyPair:
        """Parse 'EUR/USD' or 'EURUSD'."""
        cleaned = text.strip().upper().replace("/", "")
        if len(cleaned) != 6:
            raise ValueError(f"invalid currency pair: {text!r}")
        return cls(cleaned[:3], cleaned[3:])

    def inverse(self) -> CurrencyPair:
        return CurrencyPair(self.counter, self.base)

    def is_identity(self) -> bool:
        return self.base == self.counter

    def __str__(self) -> str:
        return f"{self.base}/{self.counter}"


@dataclass(frozen=True)
class CurrencyAmount:
    """An amount of money in a single currency."""

    currency: str
    amount: float

    def __post_init__(self) -> None:
        validate_currency(self.currency)

    def plus(self, other: CurrencyAmount) -> CurrencyAmount:
        if other.currency != self.currency:
            raise ValueError(
                f"cannot add {other.currency} amount to {self.currency} amount"
            )
        return CurrencyAmount(self.currency, self.amount + other.amount)

    def minus(self, other: CurrencyAmount) -> CurrencyAmount:
        return self.plus(other.multiplied_by(-1.0))

    def multiplied_by(self, factor: float) -> CurrencyAmount:
        return CurrencyAmount(self.currency, self.amount * factor)

    def convert_to(self, currency: str, fx: FxRateLookup) -> CurrencyAmount:
        """Convert into `currency` using fx(self.currency, currency)."""
        if currency == self.currency:
            return self
        return CurrencyAmount(currency, self.amount * fx(self.currency, currency))

    def __str__(self) -> str:
        return f"{self.currency} {self.amount:,.2f}"


@dataclass(frozen=True)
class MultiCurrencyAmount:
    """A set of amounts in distinct currencies, e.g. an FX forward's exposure."""

    amounts: tuple[CurrencyAmount, ...] = ()

    def __post_init__(self) -> None:
        currencies = [a.currency for a in self.amounts]
        if len(set(currencies)) != len(currencies):
            raise ValueError("MultiCurrencyAmount currencies must be distinct")

    @classmethod
    def of(cls, *amounts: CurrencyAmount) -> MultiCurrencyAmount:
        """Combine amounts, summing those that share a currency."""
        totals: dict[str, float] = {}
        for a in amounts:
            totals[a.currency] = totals.get(a.currency, 0.0) + a.amount
        return cls(tuple(CurrencyAmount(c, v) for c, v in sorted(totals.items())))

    @classmethod
    def from_mapping(cls, amounts: Mapping[str, float]) -> MultiCurrencyAmount:
        return cls.of(*(CurrencyAmount(c, v) for c, v in amounts.items()))

    def amount(self, currency: str) -> CurrencyAmount:
        for a in self.amounts:
            if a.currency == currency:
                return a
        return CurrencyAmount(currency, 0.0)

    def currencies(self) -> tuple[str, ...]:
        return tuple(a.currency for a in self.amounts)

    def __iter__(self) -> Iterator[CurrencyAmount]:
        return iter(self.amounts)

    def __len__(self) -> int:
        return len(self.amounts)
