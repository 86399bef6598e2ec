"""GraphQL schema: calculation queries."""

from typing import Optional

import strawberry
from calcengine import Measures

from calc_api.services import calculate
from calc_api.types import CalculationResult, ColumnInput, MarketInput, TradesInput


@strawberry.type
class Query:
    @strawberry.field
    def version(self) -> str:
        return "0.1.0"

    @strawberry.field
    def measures(self) -> list[str]:
        """Names of the standard measures."""
        return [m.name for m in Measures.standard()]

    @strawberry.field
    def calculate(
        self,
        trades: TradesInput,
        columns: list[ColumnInput],
        market: MarketInput,
        reporting_currency: Optional[str] = None,
        scenario_shifts_bp: Optional[list[float]] = None,
    ) -> CalculationResult:
        """
        Calculate a grid of measures for a set of trades.

        Cells that cannot be calculated carry a failure instead of a value;
        invalid requests (no trades, no columns, malformed market) are errors.
        """
        return calculate(
            trades=trades,
            columns=columns,
            market=market,
            reporting_currency=reporting_currency,
            scenario_shifts_bp=scenario_shifts_bp,
        )


schema = strawberry.Schema(query=Query)
