"""
Baseline market data snapshot.

`MarketSnapshot` is a simple in-memory market data source for one valuation
date: values (curves, FX rates, time series, volatilities) keyed by concrete
MarketDataId. It is the default implementation of the MarketDataSource protocol;
the engine never mutates it. `with_value` returns a new snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Mapping, Optional

from calcengine.marketdata.ids import FxRateId, MarketDataId


@dataclass(frozen=True)
class TimeSeries:
    """Dated observations (e.g. index fixings)."""

    points: Mapping[date, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", MappingProxyType(dict(sorted(self.points.items()))))

    def get(self, day: date) -> float:
        """Return the observation for `day`. Raises KeyError if absent."""
        try:
            return self.points[day]
        except KeyError:
            raise KeyError(f"no observation on {day.isoformat()}") from None

    def find(self, day: date) -> Optional[float]:
        return self.points.get(day)

    def __len__(self) -> int:
        return len(self.points)


class MarketSnapshot:
    """
    Market snapshot for a valuation date: values keyed by MarketDataId.
    Immutable-style: with_value returns a new MarketSnapshot.
    """

    def __init__(
        self,
        valuation_date: date,
        values: Optional[dict[MarketDataId, Any]] = None,
    ) -> None:
        # Copy so callers can keep mutating their own dict
        self._valuation_date = valuation_date
        self._values: dict[MarketDataId, Any] = dict(values) if values else {}

    @property
    def valuation_date(self) -> date:
        return self._valuation_date

    @property
    def ids(self) -> frozenset[MarketDataId]:
        return frozenset(self._values)

    def contains(self, market_data_id: MarketDataId) -> bool:
        if market_data_id in self._values:
            return True
        if not isinstance(market_data_id, FxRateId):
            return False
        return market_data_id.pair.is_identity() or market_data_id.inverse() in self._values

    def get(self, market_data_id: MarketDataId) -> Any:
        """
        Return the value for an id. Raises KeyError if not found.

        FX rates are also found through their inverse pair (rate = 1 / inverse).
        """
        if market_data_id in self._values:
            return self._values[market_data_id]
        if isinstance(market_data_id, FxRateId):
            if market_data_id.pair.is_identity():
                return 1.0
            inverse = market_data_id.inverse()
            if inverse in self._values:
                return 1.0 / self._values[inverse]
        raise KeyError(f"{market_data_id} not found in market snapshot")

    def with_value(self, market_data_id: MarketDataId, value: Any) -> MarketSnapshot:
        """Return a new snapshot with the given value updated/added."""
        new_values = dict(self._values)
        new_values[market_data_id] = value
        return MarketSnapshot(self._valuation_date, new_values)

    def with_valuation_date(self, valuation_date: date) -> MarketSnapshot:
        return MarketSnapshot(valuation_date, self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"MarketSnapshot(valuation_date={self._valuation_date.isoformat()}, size={len(self._values)})"
