"""Base class for calculation function implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping, Optional

from calcengine.marketdata.keys import MarketDataRequirement
from calcengine.marketdata.scenario_data import MarketDataView
from calcengine.refdata import ReferenceData
from calcengine.trade import Trade


class BaseCalculationFunction(ABC):
    """Abstract base class for calculation functions.

    One subclass calculates one measure for one product type. Subclasses
    implement requirements() and calculate(); monetary measures also override
    natural_currency() so that results can be converted to a reporting currency.
    """

    product_type: ClassVar[type] = object

    def product(self, trade: Trade) -> Any:
        """Return the trade's product, checking it is of the expected type."""
        if not isinstance(trade.product, self.product_type):
            raise ValueError(
                f"{type(self).__name__} expects {self.product_type.__name__}, "
                f"got {type(trade.product).__name__}"
            )
        return trade.product

    @abstractmethod
    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        """Market data keys needed; must not access market data."""
        ...

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        """Currency of the result; None for non-monetary measures."""
        return None

    @abstractmethod
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        """Compute the measure for one scenario."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
