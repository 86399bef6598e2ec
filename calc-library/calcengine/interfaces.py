"""
Protocol-based interfaces for the engine's extension points.

Using typing.Protocol enables structural subtyping: any class that implements
the required methods satisfies the protocol without explicit inheritance. New
curve types, market data sources and calculation functions plug in without
changes to the runner.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol, runtime_checkable

from calcengine.currency import FxRateLookup

if TYPE_CHECKING:
    from calcengine.marketdata.ids import MarketDataId
    from calcengine.marketdata.keys import MarketDataRequirement
    from calcengine.marketdata.scenario_data import MarketDataView
    from calcengine.refdata import ReferenceData
    from calcengine.trade import Trade


@runtime_checkable
class Curve(Protocol):
    """Protocol for discount / survival curves.

    `bumped` and `bumped_at` drive scenario shifts and bucketed sensitivities.
    """

    name: str
    pillars: tuple[float, ...]

    def df(self, t: float) -> float:
        """Return discount factor (or survival probability) to time t."""
        ...

    def bumped(self, bump: float) -> Curve:
        """Return new curve with parallel additive shift."""
        ...

    def bumped_at(self, index: int, bump: float) -> Curve:
        """Return new curve with an additive shift at one pillar."""
        ...


@runtime_checkable
class FxConvertible(Protocol):
    """A measure value that can be expressed in another currency."""

    def convert_to(self, currency: str, fx: FxRateLookup) -> Any:
        ...


@runtime_checkable
class MarketDataSource(Protocol):
    """Baseline market data keyed by concrete identifier.

    The engine only looks values up; how the source was loaded is not its concern.
    """

    @property
    def valuation_date(self) -> date:
        ...

    def contains(self, market_data_id: MarketDataId) -> bool:
        ...

    def get(self, market_data_id: MarketDataId) -> Any:
        """Return the value for an id. Raises KeyError if absent."""
        ...


class CalculationFunction(Protocol):
    """Protocol for the calculation of one measure for one product type.

    Functions are registered with the MeasureRegistry under
    (product type, measure). `requirements` must not touch market data;
    `calculate` receives the bound market data of a single scenario.
    """

    def requirements(
        self, trade: Trade, ref_data: ReferenceData
    ) -> set[MarketDataRequirement]:
        """Market data keys needed to calculate the measure for the trade."""
        ...

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        """Currency the result is naturally expressed in (None if not monetary)."""
        ...

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        """Compute the measure value for one scenario."""
        ...
