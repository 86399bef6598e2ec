"""Calculation rules: how measures are calculated and where market data comes from."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from calcengine.currency import validate_currency
from calcengine.marketdata.rules import MarketDataRules
from calcengine.registry import MeasureRegistry, create_default_registry


@dataclass(frozen=True)
class CalculationRules:
    """
    Inputs of a run besides trades, columns and data.

    - `registry`: (product type, measure) -> calculation function
    - `market_data_rules`: requirement key -> concrete market data id
    - `reporting_currency`: default currency for monetary results; a column's
      own reporting currency takes precedence
    """

    registry: MeasureRegistry
    market_data_rules: MarketDataRules = field(default_factory=MarketDataRules)
    reporting_currency: Optional[str] = None

    def __post_init__(self) -> None:
        if self.reporting_currency is not None:
            validate_currency(self.reporting_currency)

    @classmethod
    def of(
        cls,
        market_data_rules: MarketDataRules,
        registry: Optional[MeasureRegistry] = None,
        reporting_currency: Optional[str] = None,
    ) -> CalculationRules:
        """Rules using the default registry unless one is given."""
        return cls(
            registry=registry if registry is not None else create_default_registry(),
            market_data_rules=market_data_rules,
            reporting_currency=reporting_currency,
        )
