"""End-to-end run of a mixed portfolio through the multi-threaded runner."""

from datetime import date

import pytest

from calcengine import (
    CalculationRules,
    CalculationRunner,
    Column,
    CurrencyPair,
    CurveGroupRule,
    FailureReason,
    FxRateRule,
    HazardRateCurve,
    MarketDataRules,
    MarketSnapshot,
    Measures,
    Trade,
    VolatilityCurve,
    ZeroRateCurve,
)
from calcengine.marketdata import (
    CurveId,
    FxRateId,
    IssuerCurveId,
    VolatilitiesId,
    VolatilityRule,
    parallel_shift_scenarios,
)
from calcengine.products import (
    Cds,
    FixedCouponBondPosition,
    FixedCouponBondSecurity,
    FixedFloatSwap,
    FxForward,
    IborCapletFloorlet,
    TermDeposit,
)
from calcengine.refdata import ReferenceData, SecurityId

VALUATION_DATE = date(2024, 1, 2)
GROUP = "EOD"
PILLARS = [0.5, 1.0, 2.0, 5.0]
BOND_ID = SecurityId("ISIN", "US0000000001")

SNAPSHOT = MarketSnapshot(
    VALUATION_DATE,
    {
        CurveId(GROUP, "USD-DISC"): ZeroRateCurve(name="USD-DISC", pillars=PILLARS, zero_rates_cc=[0.04] * 4),
        CurveId(GROUP, "EUR-DISC"): ZeroRateCurve(name="EUR-DISC", pillars=PILLARS, zero_rates_cc=[0.03] * 4),
        CurveId(GROUP, "CORP-HAZ"): HazardRateCurve(name="CORP-HAZ", pillars=PILLARS, hazard_rates=[0.01] * 4),
        IssuerCurveId(GROUP, "ACME-USD"): ZeroRateCurve(name="ACME-USD", pillars=[1.0, 2.0], zero_rates_cc=[0.05] * 2),
        IssuerCurveId(GROUP, "ACME-REPO"): ZeroRateCurve(name="ACME-REPO", pillars=[1.0, 2.0], zero_rates_cc=[0.03] * 2),
        VolatilitiesId("USD-SOFR-VOL"): VolatilityCurve(name="USD-SOFR-VOL", expiries=[0.5, 1.0], volatilities=[0.2] * 2),
        FxRateId(CurrencyPair("EUR", "USD")): 1.1,
    },
)

RULES = CalculationRules.of(
    MarketDataRules.of(
        CurveGroupRule(
            GROUP,
            discount_curves={"USD": "USD-DISC", "EUR": "EUR-DISC"},
            forward_curves={"USD-SOFR": "USD-DISC"},
            issuer_curves={("ACME", "USD"): "ACME-USD"},
            repo_curves={("ACME", "USD"): "ACME-REPO"},
            credit_curves={("CORP", "USD"): "CORP-HAZ"},
        ),
        VolatilityRule({"USD-SOFR": "USD-SOFR-VOL"}),
        FxRateRule(),
    )
)

REF_DATA = ReferenceData.of(
    {BOND_ID: FixedCouponBondSecurity(BOND_ID, "USD", "ACME", 100.0, 0.05, (1.0, 2.0))}
)

TRADES = [
    Trade.of("TD-1", TermDeposit(currency="USD", notional=1_000_000, rate=0.05, start=0.0, end=1.0)),
    Trade.of(
        "SW-1",
        FixedFloatSwap(
            currency="USD",
            index="USD-SOFR",
            notional=10_000_000,
            fixed_rate=0.04,
            pay_times=(0.5, 1.0, 1.5, 2.0),
        ),
    ),
    Trade.of("BOND-1", FixedCouponBondPosition(BOND_ID, quantity=1000)),
    Trade.of("FX-1", FxForward(CurrencyPair("EUR", "USD"), notional_base=1_000_000, strike=1.1, maturity=1.0)),
    Trade.of(
        "CAP-1",
        IborCapletFloorlet("USD", "USD-SOFR", 1_000_000, strike=0.035, fixing_time=0.5, start=0.5, end=1.0),
    ),
    Trade.of("CDS-1", Cds("CORP", "USD", 10_000_000, premium_rate=0.005, pay_times=(0.5, 1.0, 1.5, 2.0))),
]
COLUMNS = [Column.of(Measures.PRESENT_VALUE), Column.of(Measures.PV01), Column.of(Measures.PAR_RATE)]


@pytest.fixture(scope="module")
def results():
    with CalculationRunner.of_multi_threaded(4) as runner:
        return runner.calculate(RULES, TRADES, COLUMNS, SNAPSHOT, REF_DATA)


def test_grid_shape_and_order(results) -> None:
    assert results.trade_ids == ("TD-1", "SW-1", "BOND-1", "FX-1", "CAP-1", "CDS-1")
    assert results.columns == tuple(COLUMNS)
    assert results.row_count == 6
    assert results.column_count == 3


def test_present_values(results) -> None:
    expected = {"TD-1": 8828.911110, "SW-1": 7662.737648, "BOND-1": 99764.076016, "FX-1": 10621.703836}
    for row, trade_id in enumerate(results.trade_ids):
        pv = results.cell(row, 0).get_value()
        assert pv.currency == "USD"
        if trade_id in expected:
            assert pv.amount == pytest.approx(expected[trade_id], abs=1e-4)
    assert results.cell(4, 0).get_value().amount > 0
    assert results.cell(5, 0).get_value().amount > 0


def test_unsupported_cells_only(results) -> None:
    failed = [(f.trade_id, f.column_name) for f in results.failures()]
    assert sorted(failed) == [
        ("BOND-1", "ParRate"),
        ("CAP-1", "ParRate"),
        ("CDS-1", "PV01"),
        ("CDS-1", "ParRate"),
        ("FX-1", "ParRate"),
    ]
    assert {f.reason for f in results.failures()} == {FailureReason.UNSUPPORTED}
    assert results.cell(0, 2).get_value() == pytest.approx(0.0408107742, abs=1e-9)
    assert results.cell(1, 2).get_value() == pytest.approx(0.0404026801, abs=1e-9)


def test_single_and_multi_threaded_agree(results) -> None:
    with CalculationRunner.of_single_threaded() as runner:
        assert runner.calculate(RULES, TRADES, COLUMNS, SNAPSHOT, REF_DATA) == results


def test_parallel_shift_scenarios() -> None:
    scenarios = parallel_shift_scenarios([-100, 0, 100])
    with CalculationRunner.of_multi_threaded(4) as runner:
        results = runner.calculate_multi_scenario(
            RULES, TRADES, COLUMNS[:1], SNAPSHOT, REF_DATA, scenarios=scenarios
        )
    assert results.scenario_count == 3
    deposit = results.cell(0, 0).get_value()
    assert [r.get_value().amount for r in deposit] == pytest.approx(
        [18967.810226, 8828.911110, -1209.104274], abs=1e-4
    )
    bond = [r.get_value().amount for r in results.cell(2, 0).get_value()]
    assert bond[0] > bond[1] > bond[2]


def test_deposit_grid_matches_reference_values() -> None:
    """Two term deposits x {PresentValue, ParRate} against recorded values."""
    deposits = [
        Trade.of("TD-1Y", TermDeposit(currency="USD", notional=1_000_000, rate=0.05, start=0.0, end=1.0)),
        Trade.of("TD-2Y", TermDeposit(currency="USD", notional=1_000_000, rate=0.045, start=0.0, end=2.0)),
    ]
    columns = [Column.of(Measures.PRESENT_VALUE), Column.of(Measures.PAR_RATE)]
    with CalculationRunner.of_multi_threaded(2) as runner:
        results = runner.calculate(RULES, deposits, columns, SNAPSHOT, REF_DATA)

    assert results.cell(0, 0).get_value().amount == pytest.approx(8828.911110, abs=1e-4)
    assert results.cell(0, 1).get_value() == pytest.approx(0.0408107742, abs=1e-9)
    assert results.cell(1, 0).get_value().amount == pytest.approx(6196.817561, abs=1e-4)
    assert results.cell(1, 1).get_value() == pytest.approx(0.0416435338, abs=1e-9)
