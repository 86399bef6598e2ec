"""Tests for the results model."""

import pytest

from calcengine import Column, Failure, FailureReason, Measures, Result, Results, ScenarioArray
from calcengine.errors import (
    CurrencyConversionError,
    FailedResultError,
    MarketDataNotFoundError,
    ReferenceDataNotFoundError,
    UnsupportedMeasureError,
)
from calcengine.products import TermDeposit

COLUMNS = [Column.of(Measures.PRESENT_VALUE), Column.of(Measures.PV01)]


@pytest.mark.parametrize(
    "exc, reason",
    [
        (UnsupportedMeasureError(TermDeposit, Measures.CS01), FailureReason.UNSUPPORTED),
        (MarketDataNotFoundError("DiscountCurve:USD"), FailureReason.MISSING_DATA),
        (ReferenceDataNotFoundError("ISIN~X"), FailureReason.MISSING_DATA),
        (CurrencyConversionError("no rate"), FailureReason.CURRENCY_CONVERSION),
        (ValueError("bad"), FailureReason.INVALID_INPUT),
        (ZeroDivisionError("division by zero"), FailureReason.CALCULATION_FAILED),
        (RuntimeError("boom"), FailureReason.ERROR),
    ],
)
def test_failure_reason_from_exception(exc, reason) -> None:
    failure = Failure.from_exception(exc, "T1", "PV")
    assert failure.reason is reason
    assert failure.trade_id == "T1"
    assert failure.column_name == "PV"


def test_failure_messages() -> None:
    assert Failure.from_exception(RuntimeError("boom")).message == "RuntimeError: boom"
    assert (
        Failure.from_exception(MarketDataNotFoundError("DiscountCurve:USD")).message
        == "No market data available for DiscountCurve:USD"
    )
    assert str(Failure(FailureReason.INVALID_INPUT, "bad")) == "INVALID_INPUT: bad"


def test_result_success_and_failure() -> None:
    ok = Result.success(1.5)
    assert ok.is_success and not ok.is_failure
    assert ok.get_value() == 1.5
    assert ok.map(lambda v: v * 2).get_value() == 3.0

    failed = Result.failed(Failure(FailureReason.MISSING_DATA, "no curve", "T1", "PV"))
    assert failed.is_failure
    assert failed.map(lambda v: v * 2) is failed
    with pytest.raises(FailedResultError) as exc_info:
        failed.get_value()
    assert exc_info.value.context == {"trade_id": "T1", "column": "PV"}


def test_scenario_array() -> None:
    failure = Failure(FailureReason.MISSING_DATA, "no curve")
    array = ScenarioArray.of(3, lambda i: Result.failed(failure) if i == 1 else Result.success(float(i)))
    assert array.scenario_count == 3
    assert len(array) == 3
    assert array.get(2).get_value() == 2.0
    assert not array.is_all_success()
    assert array.failures() == (failure,)
    with pytest.raises(FailedResultError):
        array.values()
    assert ScenarioArray.of(2, lambda i: Result.success(i)).values() == (0, 1)


def _grid() -> Results:
    failure = Failure(FailureReason.UNSUPPORTED, "nope", "B", "PV01")
    cells = [
        [Result.success(1.0), Result.success(2.0)],
        [Result.success(3.0), Result.failed(failure)],
        [Result.success(5.0), Result.success(6.0)],
    ]
    return Results(["A", "B", "C"], COLUMNS, cells)


def test_results_grid_access() -> None:
    results = _grid()
    assert results.row_count == 3
    assert results.column_count == 2
    assert len(results) == 6
    assert results.trade_ids == ("A", "B", "C")
    assert results.cell(2, 1).get_value() == 6.0
    assert [r.value for r in results.column_results(0)] == [1.0, 3.0, 5.0]
    assert results.row_results(1)[1].is_failure
    assert [(i, j) for i, j, _ in results.cells()] == [(0, 0), (0, 1), (1, 0), (1, 1), (2, 0), (2, 1)]


def test_results_index_errors() -> None:
    results = _grid()
    with pytest.raises(IndexError):
        results.cell(3, 0)
    with pytest.raises(IndexError):
        results.cell(0, 2)
    with pytest.raises(IndexError):
        results.cell(-1, 0)


def test_results_failures_include_scenarios() -> None:
    scenario_failure = Failure(FailureReason.MISSING_DATA, "shifted curve missing")
    array = ScenarioArray((Result.success(1.0), Result.failed(scenario_failure)))
    results = Results(["A"], COLUMNS[:1], [[Result.success(array)]], scenario_count=2)
    assert results.scenario_count == 2
    assert results.failures() == [scenario_failure]
    assert len(_grid().failures()) == 1


def test_results_shape_validation() -> None:
    with pytest.raises(ValueError):
        Results(["A", "B"], COLUMNS, [[Result.success(1.0), Result.success(2.0)]])
    with pytest.raises(ValueError):
        Results(["A"], COLUMNS, [[Result.success(1.0)]])


def test_results_equality() -> None:
    assert _grid() == _grid()
    assert hash(_grid()) == hash(_grid())
