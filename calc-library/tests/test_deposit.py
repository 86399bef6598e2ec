"""Tests for term deposit calculation functions."""

import math

import pytest

from calcengine import CurrencyAmount, Trade
from calcengine.functions.deposit import (
    TermDepositBucketedPV01,
    TermDepositCashFlows,
    TermDepositCurrentCash,
    TermDepositParRate,
    TermDepositParSpread,
    TermDepositPresentValue,
    TermDepositPV01,
)
from calcengine.marketdata import DiscountCurveKey
from calcengine.products import BuySell, TermDeposit
from calcengine.refdata import ReferenceData

REF_DATA = ReferenceData.empty()
PARAMS = {"shift_bp": 1.0}


def test_present_value(view, usd_deposit) -> None:
    """PV = -N + N(1 + r*tau) * DF(end) for a deposit starting today."""
    pv = TermDepositPresentValue().calculate(usd_deposit, view, REF_DATA, PARAMS)
    assert pv.currency == "USD"
    assert abs(pv.amount - (1_050_000 * math.exp(-0.04) - 1_000_000)) < 1e-6


def test_sell_flips_sign(view) -> None:
    deposit = TermDeposit(currency="USD", notional=1_000_000, rate=0.05, start=0.0, end=1.0, buy_sell=BuySell.SELL)
    pv = TermDepositPresentValue().calculate(Trade.of("TD", deposit), view, REF_DATA, PARAMS)
    assert abs(pv.amount + 8828.911110) < 1e-4


def test_settled_start_payment_excluded(view) -> None:
    deposit = TermDeposit(currency="USD", notional=1_000_000, rate=0.05, start=-0.5, end=0.5)
    pv = TermDepositPresentValue().calculate(Trade.of("TD", deposit), view, REF_DATA, PARAMS)
    assert abs(pv.amount - 1_029_208.606972) < 1e-4


def test_par_rate_and_spread(view, usd_deposit) -> None:
    par = TermDepositParRate().calculate(usd_deposit, view, REF_DATA, PARAMS)
    assert abs(par - (math.exp(0.04) - 1.0)) < 1e-12
    spread = TermDepositParSpread().calculate(usd_deposit, view, REF_DATA, PARAMS)
    assert abs(spread - (-0.0091892258)) < 1e-9
    assert TermDepositParRate().natural_currency(usd_deposit, REF_DATA) is None


def test_deposit_at_par_rate_is_worth_zero(view) -> None:
    par = math.exp(0.04) - 1.0
    deposit = TermDeposit(currency="USD", notional=1_000_000, rate=par, start=0.0, end=1.0)
    pv = TermDepositPresentValue().calculate(Trade.of("TD", deposit), view, REF_DATA, PARAMS)
    assert abs(pv.amount) < 1e-6


def test_pv01_and_buckets(view, usd_deposit) -> None:
    pv01 = TermDepositPV01().calculate(usd_deposit, view, REF_DATA, PARAMS)
    assert abs(pv01.amount - (-100.877847)) < 1e-4

    buckets = TermDepositBucketedPV01().calculate(usd_deposit, view, REF_DATA, PARAMS)
    assert buckets.curve_names() == ("USD-DISC",)
    entry = buckets.get("USD-DISC")
    assert entry.pillars == (0.5, 1.0, 2.0, 5.0)
    assert entry.sensitivities[1] == pytest.approx(-100.877847, abs=1e-4)
    assert entry.sensitivities[0] == pytest.approx(0.0, abs=1e-6)
    assert buckets.total("USD").amount == pytest.approx(pv01.amount, abs=1e-8)


def test_cash_flows(view, usd_deposit) -> None:
    flows = TermDepositCashFlows().calculate(usd_deposit, view, REF_DATA, PARAMS)
    assert [(f.payment_time, f.forecast_amount) for f in flows] == [(0.0, -1_000_000), (1.0, 1_050_000)]
    assert flows.total_present_value("USD").amount == pytest.approx(8828.911110, abs=1e-4)


def test_current_cash() -> None:
    matured = TermDeposit(currency="USD", notional=1_000_000, rate=0.05, start=-1.0, end=0.0)
    cash = TermDepositCurrentCash().calculate(Trade.of("TD", matured), None, REF_DATA, PARAMS)
    assert cash == CurrencyAmount("USD", 1_050_000)
    assert TermDepositCurrentCash().requirements(Trade.of("TD", matured), REF_DATA) == set()


def test_requirements(usd_deposit) -> None:
    assert TermDepositPresentValue().requirements(usd_deposit, REF_DATA) == {DiscountCurveKey("USD")}
    assert TermDepositPresentValue().natural_currency(usd_deposit, REF_DATA) == "USD"


def test_wrong_product_type_rejected(view) -> None:
    trade = Trade.of("X", object())
    with pytest.raises(ValueError, match="expects TermDeposit"):
        TermDepositPresentValue().calculate(trade, view, REF_DATA, PARAMS)


def test_deposit_validation() -> None:
    with pytest.raises(ValueError, match="end must be after start"):
        TermDeposit(currency="USD", notional=1.0, rate=0.05, start=1.0, end=1.0)
    with pytest.raises(ValueError, match="notional"):
        TermDeposit(currency="USD", notional=-1.0, rate=0.05, start=0.0, end=1.0)
