"""
The calculation plan of a run: one task per (trade, column) cell.

Building the plan resolves every cell's function through the registry and
asks it for its requirements. A cell whose measure is not supported for its
product, or whose requirements cannot be determined, keeps the failure in its
task and is reported as a failed cell; it never prevents the plan from being built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from calcengine.column import Column
from calcengine.interfaces import CalculationFunction
from calcengine.log import get_logger
from calcengine.marketdata.keys import MarketDataRequirement
from calcengine.refdata import ReferenceData
from calcengine.registry import MeasureRegistry
from calcengine.requirements import cell_requirements
from calcengine.results import Failure
from calcengine.trade import Trade

logger = get_logger(__name__)


@dataclass(frozen=True)
class CalculationTask:
    """Everything needed to calculate one cell."""

    row: int
    column_index: int
    trade: Trade
    column: Column
    function: Optional[CalculationFunction] = None
    requirements: frozenset[MarketDataRequirement] = frozenset()
    reporting_currency: Optional[str] = None
    natural_currency: Optional[str] = None
    failure: Optional[Failure] = None

    @property
    def is_runnable(self) -> bool:
        return self.function is not None and self.failure is None


def _plan_cell(
    row: int,
    column_index: int,
    trade: Trade,
    column: Column,
    registry: MeasureRegistry,
    ref_data: ReferenceData,
    default_reporting_currency: Optional[str],
) -> CalculationTask:
    reporting_currency = column.reporting_currency or default_reporting_currency
    try:
        function = registry.lookup(trade.product_type, column.measure)
        requirements = cell_requirements(function, trade, ref_data, reporting_currency)
        natural_currency = function.natural_currency(trade, ref_data)
    except Exception as exc:
        failure = Failure.from_exception(exc, trade.id, column.header)
        logger.debug(
            "cell_not_runnable",
            trade_id=trade.id,
            column=column.header,
            reason=failure.reason.value,
            message=failure.message,
        )
        return CalculationTask(row, column_index, trade, column, failure=failure)
    return CalculationTask(
        row=row,
        column_index=column_index,
        trade=trade,
        column=column,
        function=function,
        requirements=requirements,
        reporting_currency=reporting_currency,
        natural_currency=natural_currency,
    )


class CalculationTasks:
    """Row-major list of cell tasks plus the union of their requirements."""

    def __init__(self, trades: Sequence[Trade], columns: Sequence[Column], tasks: Sequence[CalculationTask]) -> None:
        self._trades = tuple(trades)
        self._columns = tuple(columns)
        self._tasks = tuple(tasks)

    @classmethod
    def of(
        cls,
        trades: Sequence[Trade],
        columns: Sequence[Column],
        registry: MeasureRegistry,
        ref_data: ReferenceData,
        reporting_currency: Optional[str] = None,
    ) -> CalculationTasks:
        tasks = [
            _plan_cell(i, j, trade, column, registry, ref_data, reporting_currency)
            for i, trade in enumerate(trades)
            for j, column in enumerate(columns)
        ]
        return cls(trades, columns, tasks)

    @property
    def trades(self) -> tuple[Trade, ...]:
        return self._trades

    @property
    def columns(self) -> tuple[Column, ...]:
        return self._columns

    @property
    def requirements(self) -> frozenset[MarketDataRequirement]:
        keys: set[MarketDataRequirement] = set()
        for task in self._tasks:
            keys |= task.requirements
        return frozenset(keys)

    def __iter__(self) -> Iterator[CalculationTask]:
        return iter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)
