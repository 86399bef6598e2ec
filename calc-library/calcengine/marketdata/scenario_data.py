"""
Resolved market data for a run.

`ScenarioMarketData` binds requirement keys to values, once per scenario, and
records the keys that could not be resolved together with the reason. It is
immutable and shared read-only by every cell of a run.

`MarketDataView` is what a calculation function sees: the bindings of a single
scenario. Bump-and-reprice functions derive modified views with `with_value`;
the underlying scenario data is never changed.
"""

from __future__ import annotations

from datetime import date
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Sequence

from calcengine.currency import CurrencyPair
from calcengine.errors import MarketDataNotFoundError
from calcengine.interfaces import Curve
from calcengine.marketdata.keys import FxRateKey, MarketDataRequirement
from calcengine.marketdata.snapshot import TimeSeries


class MarketDataView:
    """Market data of one scenario, keyed by requirement."""

    def __init__(
        self,
        valuation_date: date,
        values: Mapping[MarketDataRequirement, Any],
        failures: Optional[Mapping[MarketDataRequirement, str]] = None,
        scenario_name: str = "Base",
    ) -> None:
        self._valuation_date = valuation_date
        self._values = MappingProxyType(dict(values))
        self._failures = MappingProxyType(dict(failures or {}))
        self._scenario_name = scenario_name

    @property
    def valuation_date(self) -> date:
        return self._valuation_date

    @property
    def scenario_name(self) -> str:
        return self._scenario_name

    @property
    def requirements(self) -> frozenset[MarketDataRequirement]:
        return frozenset(self._values)

    @property
    def failures(self) -> Mapping[MarketDataRequirement, str]:
        return self._failures

    def contains(self, key: MarketDataRequirement) -> bool:
        return key in self._values

    def value(self, key: MarketDataRequirement) -> Any:
        """Return the bound value. Raises MarketDataNotFoundError if unbound."""
        try:
            return self._values[key]
        except KeyError:
            raise MarketDataNotFoundError(key, self._failures.get(key)) from None

    def curve(self, key: MarketDataRequirement) -> Curve:
        value = self.value(key)
        if not isinstance(value, Curve):
            raise ValueError(f"market data for {key} is not a curve: {type(value).__name__}")
        return value

    def fx_rate(self, base: str, counter: str) -> float:
        """Units of `counter` per unit of `base`; the inverse pair is used if bound."""
        if base == counter:
            return 1.0
        pair = CurrencyPair(base, counter)
        key = FxRateKey(pair)
        if key in self._values:
            return self._values[key]
        inverse = FxRateKey(pair.inverse())
        if inverse in self._values:
            return 1.0 / self._values[inverse]
        raise MarketDataNotFoundError(key, self._failures.get(key))

    def time_series(self, key: MarketDataRequirement) -> TimeSeries:
        value = self.value(key)
        if not isinstance(value, TimeSeries):
            raise ValueError(f"market data for {key} is not a time series")
        return value

    def volatilities(self, key: MarketDataRequirement) -> Any:
        return self.value(key)

    def with_value(self, key: MarketDataRequirement, value: Any) -> MarketDataView:
        """Return a new view with one binding replaced or added."""
        values = dict(self._values)
        values[key] = value
        return MarketDataView(self._valuation_date, values, self._failures, self._scenario_name)

    def __repr__(self) -> str:
        return (
            f"MarketDataView(scenario={self._scenario_name!r}, "
            f"valuation_date={self._valuation_date.isoformat()}, size={len(self._values)})"
        )


class ScenarioMarketData:
    """
    Bound market data for one or more scenarios.

    Scenario `i` has its own valuation date, bindings and failures; all
    scenarios share the same set of requested keys.
    """

    def __init__(
        self,
        valuation_dates: Sequence[date],
        values: Sequence[Mapping[MarketDataRequirement, Any]],
        failures: Optional[Sequence[Mapping[MarketDataRequirement, str]]] = None,
        scenario_names: Optional[Sequence[str]] = None,
    ) -> None:
        if not valuation_dates:
            raise ValueError("scenario market data needs at least one scenario")
        count = len(valuation_dates)
        if failures is None:
            failures = [{} for _ in range(count)]
        if scenario_names is None:
            scenario_names = ["Base"] if count == 1 else [f"Scenario {i + 1}" for i in range(count)]
        if not len(values) == len(failures) == len(scenario_names) == count:
            raise ValueError("every scenario needs a valuation date, values, failures and a name")
        self._views = tuple(
            MarketDataView(valuation_dates[i], values[i], failures[i], scenario_names[i])
            for i in range(count)
        )

    @classmethod
    def of(
        cls,
        valuation_date: date,
        values: Mapping[MarketDataRequirement, Any],
    ) -> ScenarioMarketData:
        """Pre-built single-scenario market data."""
        return cls([valuation_date], [values])

    @property
    def scenario_count(self) -> int:
        return len(self._views)

    @property
    def valuation_dates(self) -> tuple[date, ...]:
        return tuple(v.valuation_date for v in self._views)

    @property
    def scenario_names(self) -> tuple[str, ...]:
        return tuple(v.scenario_name for v in self._views)

    @property
    def requirements(self) -> frozenset[MarketDataRequirement]:
        """Keys bound in at least one scenario."""
        keys: set[MarketDataRequirement] = set()
        for view in self._views:
            keys |= view.requirements
        return frozenset(keys)

    @property
    def failures(self) -> Mapping[MarketDataRequirement, str]:
        """Every unresolved key with its first reported reason, in scenario order."""
        merged: dict[MarketDataRequirement, str] = {}
        for view in self._views:
            for key, reason in view.failures.items():
                merged.setdefault(key, reason)
        return MappingProxyType(merged)

    def has_failures(self) -> bool:
        return any(view.failures for view in self._views)

    def scenario(self, index: int) -> MarketDataView:
        if not 0 <= index < len(self._views):
            raise IndexError(f"scenario index {index} out of range (count={len(self._views)})")
        return self._views[index]

    def __iter__(self) -> Iterator[MarketDataView]:
        return iter(self._views)

    def __len__(self) -> int:
        return len(self._views)

    def __repr__(self) -> str:
        return f"ScenarioMarketData(scenarios={len(self._views)}, keys={len(self.requirements)})"
