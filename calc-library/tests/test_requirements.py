"""Tests for requirements collection."""

from datetime import date

from hypothesis import given, settings
from hypothesis import strategies as st

from calcengine import Column, CurrencyPair, Measure, Measures, Trade, collect_requirements, create_default_registry
from calcengine.marketdata import DiscountCurveKey, ForwardCurveKey, FxRateKey, IndexFixingsKey
from calcengine.products import FixedFloatSwap, FxForward, TermDeposit

REGISTRY = create_default_registry()

TRADES = [
    Trade.of("TD-1", TermDeposit(currency="USD", notional=1e6, rate=0.05, start=0.0, end=1.0)),
    Trade.of("TD-2", TermDeposit(currency="EUR", notional=1e6, rate=0.03, start=0.0, end=2.0)),
    Trade.of(
        "SW-1",
        FixedFloatSwap(currency="USD", index="USD-SOFR", notional=1e7, fixed_rate=0.04, pay_times=(0.5, 1.0)),
    ),
    Trade.of(
        "FX-1",
        FxForward(pair=CurrencyPair("EUR", "USD"), notional_base=1e6, strike=1.1, maturity=1.0),
    ),
]
COLUMNS = [
    Column.of(Measures.PRESENT_VALUE),
    Column.of(Measures.PAR_RATE),
    Column.of(Measures.PV01),
]


def test_union_of_cell_requirements() -> None:
    keys = collect_requirements(TRADES, COLUMNS, REGISTRY)
    assert keys == {
        DiscountCurveKey("USD"),
        DiscountCurveKey("EUR"),
        ForwardCurveKey("USD-SOFR"),
        FxRateKey(CurrencyPair("EUR", "USD")),
    }


def test_duplicates_collapse() -> None:
    """Many trades needing the same curve need it once."""
    trades = [
        Trade.of(f"TD-{i}", TermDeposit(currency="USD", notional=1e6, rate=0.05, start=0.0, end=1.0))
        for i in range(10)
    ]
    keys = collect_requirements(trades, COLUMNS, REGISTRY)
    assert keys == {DiscountCurveKey("USD")}


def test_unsupported_pairs_contribute_nothing() -> None:
    keys = collect_requirements(TRADES[3:], [Column.of(Measures.PAR_RATE), Column.of(Measure("Gamma"))], REGISTRY)
    assert keys == frozenset()


def test_measures_without_market_data() -> None:
    keys = collect_requirements(TRADES[:1], [Column.of(Measures.CURRENT_CASH)], REGISTRY)
    assert keys == frozenset()


def test_reporting_currency_adds_fx_requirement() -> None:
    keys = collect_requirements(TRADES[1:2], [Column.of(Measures.PRESENT_VALUE)], REGISTRY, reporting_currency="USD")
    assert FxRateKey(CurrencyPair("EUR", "USD")) in keys


def test_non_monetary_measures_need_no_fx() -> None:
    keys = collect_requirements(TRADES[1:2], [Column.of(Measures.PAR_RATE)], REGISTRY, reporting_currency="USD")
    assert keys == {DiscountCurveKey("EUR")}


def test_column_currency_overrides_default() -> None:
    columns = [Column.of(Measures.PRESENT_VALUE, reporting_currency="EUR")]
    keys = collect_requirements(TRADES[:1], columns, REGISTRY, reporting_currency="EUR")
    assert FxRateKey(CurrencyPair("USD", "EUR")) in keys
    keys = collect_requirements(TRADES[1:2], columns, REGISTRY, reporting_currency="USD")
    assert not any(isinstance(k, FxRateKey) for k in keys)


def test_seasoned_swap_needs_fixings() -> None:
    swap = FixedFloatSwap(
        currency="USD",
        index="USD-SOFR",
        notional=1e7,
        fixed_rate=0.04,
        pay_times=(0.25, 0.75),
        t0=-0.25,
        first_fixing_date=date(2023, 10, 2),
    )
    keys = collect_requirements([Trade.of("SW-2", swap)], COLUMNS, REGISTRY)
    assert IndexFixingsKey("USD-SOFR") in keys


@settings(max_examples=50, deadline=None)
@given(
    trade_order=st.permutations(TRADES),
    column_order=st.permutations(COLUMNS),
)
def test_order_independence(trade_order, column_order) -> None:
    """Collected requirements do not depend on trade or column order."""
    expected = collect_requirements(TRADES, COLUMNS, REGISTRY)
    assert collect_requirements(trade_order, column_order, REGISTRY) == expected
