"""
Market data requirements: abstract keys that do not yet resolve to a value.

Calculation functions describe what they need in these terms ("the discount
curve for USD"); MarketDataRules map each key to a concrete MarketDataId in
the source. Keys are frozen and hashable so that the requirements of many
cells can be unioned and deduplicated.
"""

from __future__ import annotations

from dataclasses import dataclass

from calcengine.currency import CurrencyPair


class MarketDataRequirement:
    """Base class of all requirement keys."""

    def sort_key(self) -> tuple[str, str]:
        """Deterministic ordering across key types."""
        return (type(self).__name__, str(self))


@dataclass(frozen=True)
class DiscountCurveKey(MarketDataRequirement):
    currency: str

    def __str__(self) -> str:
        return f"DiscountCurve:{self.currency}"


@dataclass(frozen=True)
class ForwardCurveKey(MarketDataRequirement):
    index: str

    def __str__(self) -> str:
        return f"ForwardCurve:{self.index}"


@dataclass(frozen=True)
class IssuerCurveKey(MarketDataRequirement):
    issuer: str
    currency: str

    def __str__(self) -> str:
        return f"IssuerCurve:{self.issuer}/{self.currency}"


@dataclass(frozen=True)
class RepoCurveKey(MarketDataRequirement):
    issuer: str
    currency: str

    def __str__(self) -> str:
        return f"RepoCurve:{self.issuer}/{self.currency}"


@dataclass(frozen=True)
class CreditCurveKey(MarketDataRequirement):
    reference_entity: str
    currency: str

    def __str__(self) -> str:
        return f"CreditCurve:{self.reference_entity}/{self.currency}"


@dataclass(frozen=True)
class FxRateKey(MarketDataRequirement):
    pair: CurrencyPair

    def __str__(self) -> str:
        return f"FxRate:{self.pair}"


@dataclass(frozen=True)
class IndexFixingsKey(MarketDataRequirement):
    """Historical fixings of a rate index."""

    index: str

    def __str__(self) -> str:
        return f"IndexFixings:{self.index}"


@dataclass(frozen=True)
class VolatilitiesKey(MarketDataRequirement):
    index: str

    def __str__(self) -> str:
        return f"Volatilities:{self.index}"


CURVE_KEY_TYPES = (
    DiscountCurveKey,
    ForwardCurveKey,
    IssuerCurveKey,
    RepoCurveKey,
    CreditCurveKey,
)
