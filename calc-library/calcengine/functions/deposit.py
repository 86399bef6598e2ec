"""
Calculation functions for term deposits (discounting).

PV = final_payment * DF(end) + initial_payment * DF(start), where a payment
before the valuation date (t < 0) has already settled and is excluded.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from calcengine.currency import CurrencyAmount
from calcengine.functions.base import BaseCalculationFunction
from calcengine.functions.sensitivity import (
    PresentValueFn,
    bucketed_pv01,
    parallel_pv01,
    shift_size,
)
from calcengine.interfaces import Curve
from calcengine.marketdata.keys import DiscountCurveKey, MarketDataRequirement
from calcengine.marketdata.scenario_data import MarketDataView
from calcengine.measures import Measure, Measures
from calcengine.products.deposit import TermDeposit
from calcengine.refdata import ReferenceData
from calcengine.trade import Trade
from calcengine.values import CashFlow, CashFlows

# Payments within this distance of t=0 fall on the valuation date
_TODAY = 1e-12


class TermDepositPricer:
    """Discounting pricer for term deposits."""

    @staticmethod
    def payments(deposit: TermDeposit) -> list[tuple[float, float]]:
        """(time, signed amount) of the payments not yet settled."""
        out = []
        if deposit.start >= -_TODAY:
            out.append((deposit.start, deposit.initial_payment))
        if deposit.end >= -_TODAY:
            out.append((deposit.end, deposit.final_payment))
        return out

    @staticmethod
    def present_value(deposit: TermDeposit, discount: Curve) -> float:
        return sum(amount * discount.df(t) for t, amount in TermDepositPricer.payments(deposit))

    @staticmethod
    def par_rate(deposit: TermDeposit, discount: Curve) -> float:
        """Rate that makes the deposit worth zero: (DF(start)/DF(end) - 1) / accrual."""
        return (discount.df(deposit.start) / discount.df(deposit.end) - 1.0) / deposit.accrual

    @staticmethod
    def cash_flows(deposit: TermDeposit, discount: Curve) -> CashFlows:
        return CashFlows.of(
            [
                CashFlow(t, deposit.currency, amount, discount.df(t))
                for t, amount in TermDepositPricer.payments(deposit)
            ]
        )

    @staticmethod
    def current_cash(deposit: TermDeposit) -> float:
        return sum(amount for t, amount in TermDepositPricer.payments(deposit) if abs(t) <= _TODAY)


class _TermDepositFunction(BaseCalculationFunction):
    product_type = TermDeposit

    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        return {DiscountCurveKey(self.product(trade).currency)}

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return self.product(trade).currency

    def discount_curve(self, trade: Trade, market_data: MarketDataView) -> Curve:
        return market_data.curve(DiscountCurveKey(self.product(trade).currency))

    def pv_function(self, trade: Trade) -> PresentValueFn:
        deposit = self.product(trade)
        return lambda market: TermDepositPricer.present_value(
            deposit, market.curve(DiscountCurveKey(deposit.currency))
        )


class TermDepositPresentValue(_TermDepositFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        deposit = self.product(trade)
        pv = TermDepositPricer.present_value(deposit, self.discount_curve(trade, market_data))
        return CurrencyAmount(deposit.currency, pv)


class TermDepositPV01(_TermDepositFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        deposit = self.product(trade)
        keys = self.requirements(trade, ref_data)
        pv01 = parallel_pv01(self.pv_function(trade), market_data, keys, shift_size(parameters))
        return CurrencyAmount(deposit.currency, pv01)


class TermDepositBucketedPV01(_TermDepositFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        deposit = self.product(trade)
        keys = self.requirements(trade, ref_data)
        return bucketed_pv01(self.pv_function(trade), market_data, keys, shift_size(parameters), deposit.currency)


class TermDepositParRate(_TermDepositFunction):
    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        return TermDepositPricer.par_rate(self.product(trade), self.discount_curve(trade, market_data))


class TermDepositParSpread(_TermDepositFunction):
    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        deposit = self.product(trade)
        return TermDepositPricer.par_rate(deposit, self.discount_curve(trade, market_data)) - deposit.rate


class TermDepositCashFlows(_TermDepositFunction):
    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        return TermDepositPricer.cash_flows(self.product(trade), self.discount_curve(trade, market_data))


class TermDepositCurrentCash(_TermDepositFunction):
    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        return set()

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        deposit = self.product(trade)
        return CurrencyAmount(deposit.currency, TermDepositPricer.current_cash(deposit))


def term_deposit_functions() -> dict[Measure, BaseCalculationFunction]:
    return {
        Measures.PRESENT_VALUE: TermDepositPresentValue(),
        Measures.PV01: TermDepositPV01(),
        Measures.BUCKETED_PV01: TermDepositBucketedPV01(),
        Measures.PAR_RATE: TermDepositParRate(),
        Measures.PAR_SPREAD: TermDepositParSpread(),
        Measures.CASH_FLOWS: TermDepositCashFlows(),
        Measures.CURRENT_CASH: TermDepositCurrentCash(),
    }
