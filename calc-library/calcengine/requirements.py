"""
Market data requirements collection.

Requirements are gathered for every (trade, column) pair before any market
data is built, so that exactly the needed data is resolved once. Collection
never prices and never reads market data: it only asks each calculation
function what it will need. The result is a set, so the order of trades and
columns does not matter.
"""

from __future__ import annotations

from typing import Optional, Sequence

from calcengine.column import Column
from calcengine.currency import CurrencyPair
from calcengine.interfaces import CalculationFunction
from calcengine.marketdata.keys import FxRateKey, MarketDataRequirement
from calcengine.refdata import ReferenceData
from calcengine.registry import MeasureRegistry
from calcengine.trade import Trade


def cell_requirements(
    function: CalculationFunction,
    trade: Trade,
    ref_data: ReferenceData,
    reporting_currency: Optional[str] = None,
) -> frozenset[MarketDataRequirement]:
    """
    Requirements of one cell.

    When the result must be reported in a currency other than the function's
    natural currency, the FX rate natural/reporting is required too.
    """
    keys = set(function.requirements(trade, ref_data))
    if reporting_currency:
        natural = function.natural_currency(trade, ref_data)
        if natural and natural != reporting_currency:
            keys.add(FxRateKey(CurrencyPair(natural, reporting_currency)))
    return frozenset(keys)


def collect_requirements(
    trades: Sequence[Trade],
    columns: Sequence[Column],
    registry: MeasureRegistry,
    ref_data: Optional[ReferenceData] = None,
    reporting_currency: Optional[str] = None,
) -> frozenset[MarketDataRequirement]:
    """
    Union of the requirements of every (trade, column) pair.

    Pairs with no registered function, or whose function cannot state its
    requirements, contribute nothing; those cells fail when calculated.
    """
    from calcengine.tasks import CalculationTasks

    tasks = CalculationTasks.of(
        trades,
        columns,
        registry,
        ref_data or ReferenceData.empty(),
        reporting_currency,
    )
    return tasks.requirements
