"""
Concrete market data identifiers: the keys of values held by a market data source.
"""

from __future__ import annotations

from dataclasses import dataclass

from calcengine.currency import CurrencyPair


class MarketDataId:
    """Base class of all concrete identifiers."""


@dataclass(frozen=True)
class CurveId(MarketDataId):
    """A curve within a named curve group."""

    group: str
    name: str

    def __str__(self) -> str:
        return f"CurveId:{self.group}/{self.name}"


@dataclass(frozen=True)
class IssuerCurveId(MarketDataId):
    """
    An issuer curve within a named curve group, optionally tied to a source of
    observable market data (empty source = the default source).
    """

    group: str
    name: str
    source: str = ""

    def __str__(self) -> str:
        text = f"IssuerCurveId:{self.group}/{self.name}"
        return f"{text}/{self.source}" if self.source else text


@dataclass(frozen=True)
class FxRateId(MarketDataId):
    pair: CurrencyPair
    source: str = ""

    def inverse(self) -> FxRateId:
        return FxRateId(self.pair.inverse(), self.source)

    def __str__(self) -> str:
        text = f"FxRateId:{self.pair}"
        return f"{text}/{self.source}" if self.source else text


@dataclass(frozen=True)
class TimeSeriesId(MarketDataId):
    index: str
    source: str = ""

    def __str__(self) -> str:
        text = f"TimeSeriesId:{self.index}"
        return f"{text}/{self.source}" if self.source else text


@dataclass(frozen=True)
class VolatilitiesId(MarketDataId):
    name: str

    def __str__(self) -> str:
        return f"VolatilitiesId:{self.name}"
