"""
Results of a calculation run.

`Results` is a grid indexed by (trade row, column) in input order. Every cell
holds a `Result`: either a value or a `Failure` describing why that one cell
could not be calculated. In multi-scenario runs the value of every cell is a
`ScenarioArray` with one `Result` per scenario, so single- and multi-scenario
runs share one results shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Optional, Sequence

from calcengine.column import Column
from calcengine.errors import (
    CalculationEngineError,
    CurrencyConversionError,
    FailedResultError,
    MarketDataNotFoundError,
    ReferenceDataNotFoundError,
    UnsupportedMeasureError,
)


class FailureReason(Enum):
    UNSUPPORTED = "UNSUPPORTED"
    MISSING_DATA = "MISSING_DATA"
    INVALID_INPUT = "INVALID_INPUT"
    CALCULATION_FAILED = "CALCULATION_FAILED"
    CURRENCY_CONVERSION = "CURRENCY_CONVERSION"
    ERROR = "ERROR"


def _reason_for(exc: BaseException) -> FailureReason:
    # Order matters: the engine's KeyError subclasses before ValueError
    if isinstance(exc, UnsupportedMeasureError):
        return FailureReason.UNSUPPORTED
    if isinstance(exc, (MarketDataNotFoundError, ReferenceDataNotFoundError)):
        return FailureReason.MISSING_DATA
    if isinstance(exc, CurrencyConversionError):
        return FailureReason.CURRENCY_CONVERSION
    if isinstance(exc, ValueError):
        return FailureReason.INVALID_INPUT
    if isinstance(exc, ArithmeticError):
        return FailureReason.CALCULATION_FAILED
    return FailureReason.ERROR


@dataclass(frozen=True)
class Failure:
    """Why a cell (or one scenario of a cell) has no value."""

    reason: FailureReason
    message: str
    trade_id: Optional[str] = None
    column_name: Optional[str] = None

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        trade_id: Optional[str] = None,
        column_name: Optional[str] = None,
    ) -> Failure:
        reason = _reason_for(exc)
        if isinstance(exc, CalculationEngineError):
            message = exc.message
        elif reason is FailureReason.ERROR:
            message = f"{type(exc).__name__}: {exc}"
        else:
            message = str(exc) or type(exc).__name__
        return cls(reason=reason, message=message, trade_id=trade_id, column_name=column_name)

    def __str__(self) -> str:
        return f"{self.reason.value}: {self.message}"


@dataclass(frozen=True)
class Result:
    """Outcome of one calculation: a value or a failure, never both."""

    value: Any = None
    failure: Optional[Failure] = None

    @classmethod
    def success(cls, value: Any) -> Result:
        return cls(value=value)

    @classmethod
    def failed(cls, failure: Failure) -> Result:
        return cls(failure=failure)

    @property
    def is_success(self) -> bool:
        return self.failure is None

    @property
    def is_failure(self) -> bool:
        return self.failure is not None

    def get_value(self) -> Any:
        """Return the value. Raises FailedResultError for a failure."""
        if self.failure is not None:
            raise FailedResultError(
                f"Result is a failure: {self.failure}",
                context={"trade_id": self.failure.trade_id, "column": self.failure.column_name},
            )
        return self.value

    def map(self, fn: Callable[[Any], Any]) -> Result:
        """Apply `fn` to a success value; failures pass through."""
        if self.failure is not None:
            return self
        return Result.success(fn(self.value))


@dataclass(frozen=True)
class ScenarioArray:
    """One Result per scenario, in scenario order."""

    results: tuple[Result, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))

    @classmethod
    def of(cls, scenario_count: int, fn: Callable[[int], Result]) -> ScenarioArray:
        return cls(tuple(fn(i) for i in range(scenario_count)))

    @property
    def scenario_count(self) -> int:
        return len(self.results)

    def get(self, index: int) -> Result:
        return self.results[index]

    def is_all_success(self) -> bool:
        return all(r.is_success for r in self.results)

    def values(self) -> tuple[Any, ...]:
        """Per-scenario values. Raises FailedResultError if any scenario failed."""
        return tuple(r.get_value() for r in self.results)

    def failures(self) -> tuple[Failure, ...]:
        return tuple(r.failure for r in self.results if r.failure is not None)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[Result]:
        return iter(self.results)


class Results:
    """
    Grid of results: `cell(i, j)` is trade `i` calculated for column `j`.

    Row and column order are the input order of the run and never change.
    """

    def __init__(
        self,
        trade_ids: Sequence[str],
        columns: Sequence[Column],
        cells: Sequence[Sequence[Result]],
        scenario_count: int = 1,
    ) -> None:
        if len(cells) != len(trade_ids):
            raise ValueError("one row of cells is required per trade")
        if any(len(row) != len(columns) for row in cells):
            raise ValueError("every row must have one cell per column")
        self._trade_ids = tuple(trade_ids)
        self._columns = tuple(columns)
        self._cells = tuple(tuple(row) for row in cells)
        self._scenario_count = scenario_count

    @property
    def row_count(self) -> int:
        return len(self._cells)

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def scenario_count(self) -> int:
        return self._scenario_count

    @property
    def trade_ids(self) -> tuple[str, ...]:
        return self._trade_ids

    @property
    def columns(self) -> tuple[Column, ...]:
        return self._columns

    def cell(self, row: int, column: int) -> Result:
        if not 0 <= row < self.row_count:
            raise IndexError(f"row {row} out of range (rows={self.row_count})")
        if not 0 <= column < self.column_count:
            raise IndexError(f"column {column} out of range (columns={self.column_count})")
        return self._cells[row][column]

    def row_results(self, row: int) -> tuple[Result, ...]:
        return self._cells[row]

    def column_results(self, column: int) -> tuple[Result, ...]:
        return tuple(row[column] for row in self._cells)

    def cells(self) -> Iterator[tuple[int, int, Result]]:
        """(row, column, result) in row-major input order."""
        for i, row in enumerate(self._cells):
            for j, result in enumerate(row):
                yield i, j, result

    def failures(self) -> list[Failure]:
        """All failures, including per-scenario ones, in grid order."""
        out = []
        for _, _, result in self.cells():
            if result.failure is not None:
                out.append(result.failure)
            elif isinstance(result.value, ScenarioArray):
                out.extend(result.value.failures())
        return out

    def __iter__(self) -> Iterator[tuple[Result, ...]]:
        return iter(self._cells)

    def __len__(self) -> int:
        return self.row_count * self.column_count

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Results):
            return NotImplemented
        return (
            self._trade_ids == other._trade_ids
            and self._columns == other._columns
            and self._cells == other._cells
            and self._scenario_count == other._scenario_count
        )

    def __hash__(self) -> int:
        return hash((self._trade_ids, self._columns))

    def __repr__(self) -> str:
        return (
            f"Results(rows={self.row_count}, columns={self.column_count}, "
            f"scenarios={self._scenario_count})"
        )
