"""
Calculation functions for fixed coupon bond positions.

The bond security is looked up in reference data by the position's security
id. Present value discounts the remaining flows on the issuer curve of the
bond's issuer and currency; the cash flows measure reports them discounted on
the repo curve, as used for settlement.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from calcengine.currency import CurrencyAmount, MultiCurrencyAmount
from calcengine.functions.base import BaseCalculationFunction
from calcengine.functions.sensitivity import (
    PresentValueFn,
    bucketed_pv01,
    parallel_pv01,
    shift_size,
)
from calcengine.interfaces import Curve
from calcengine.marketdata.keys import IssuerCurveKey, MarketDataRequirement, RepoCurveKey
from calcengine.marketdata.scenario_data import MarketDataView
from calcengine.measures import Measure, Measures
from calcengine.products.bond import FixedCouponBondPosition, FixedCouponBondSecurity
from calcengine.refdata import ReferenceData
from calcengine.trade import Trade
from calcengine.values import CashFlow, CashFlows

_TODAY = 1e-12


class BondPricer:
    """Discounting pricer for fixed coupon bond positions."""

    @staticmethod
    def remaining_flows(security: FixedCouponBondSecurity, quantity: float) -> list[tuple[float, float]]:
        return [(t, quantity * amount) for t, amount in security.cash_flows() if t >= -_TODAY]

    @staticmethod
    def present_value(security: FixedCouponBondSecurity, quantity: float, issuer_curve: Curve) -> float:
        """PV = quantity * sum_i CF_i * DF_issuer(t_i) over flows not yet paid."""
        return sum(amount * issuer_curve.df(t) for t, amount in BondPricer.remaining_flows(security, quantity))

    @staticmethod
    def currency_exposure(
        security: FixedCouponBondSecurity, quantity: float, issuer_curve: Curve
    ) -> MultiCurrencyAmount:
        return MultiCurrencyAmount.of(
            CurrencyAmount(security.currency, BondPricer.present_value(security, quantity, issuer_curve))
        )

    @staticmethod
    def cash_flows(security: FixedCouponBondSecurity, quantity: float, curve: Curve) -> CashFlows:
        return CashFlows.of(
            [
                CashFlow(t, security.currency, amount, curve.df(t))
                for t, amount in BondPricer.remaining_flows(security, quantity)
            ]
        )

    @staticmethod
    def current_cash(security: FixedCouponBondSecurity, quantity: float) -> float:
        return sum(amount for t, amount in BondPricer.remaining_flows(security, quantity) if abs(t) <= _TODAY)


class _BondFunction(BaseCalculationFunction):
    product_type = FixedCouponBondPosition

    def security(self, trade: Trade, ref_data: ReferenceData) -> FixedCouponBondSecurity:
        position: FixedCouponBondPosition = self.product(trade)
        return position.security(ref_data)

    def issuer_key(self, trade: Trade, ref_data: ReferenceData) -> IssuerCurveKey:
        security = self.security(trade, ref_data)
        return IssuerCurveKey(security.issuer, security.currency)

    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        return {self.issuer_key(trade, ref_data)}

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return self.security(trade, ref_data).currency

    def pv_function(self, trade: Trade, ref_data: ReferenceData) -> PresentValueFn:
        security = self.security(trade, ref_data)
        quantity = self.product(trade).quantity
        key = self.issuer_key(trade, ref_data)
        return lambda market: BondPricer.present_value(security, quantity, market.curve(key))


class BondPresentValue(_BondFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        security = self.security(trade, ref_data)
        pv = self.pv_function(trade, ref_data)(market_data)
        return CurrencyAmount(security.currency, pv)


class BondPV01(_BondFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        security = self.security(trade, ref_data)
        keys = self.requirements(trade, ref_data)
        pv01 = parallel_pv01(self.pv_function(trade, ref_data), market_data, keys, shift_size(parameters))
        return CurrencyAmount(security.currency, pv01)


class BondBucketedPV01(_BondFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        security = self.security(trade, ref_data)
        keys = self.requirements(trade, ref_data)
        return bucketed_pv01(
            self.pv_function(trade, ref_data), market_data, keys, shift_size(parameters), security.currency
        )


class BondCurrencyExposure(_BondFunction):
    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        security = self.security(trade, ref_data)
        issuer = market_data.curve(self.issuer_key(trade, ref_data))
        return BondPricer.currency_exposure(security, self.product(trade).quantity, issuer)


class BondCashFlows(_BondFunction):
    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        security = self.security(trade, ref_data)
        return {RepoCurveKey(security.issuer, security.currency)}

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        security = self.security(trade, ref_data)
        repo = market_data.curve(RepoCurveKey(security.issuer, security.currency))
        return BondPricer.cash_flows(security, self.product(trade).quantity, repo)


class BondCurrentCash(_BondFunction):
    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        return set()

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        security = self.security(trade, ref_data)
        return CurrencyAmount(security.currency, BondPricer.current_cash(security, self.product(trade).quantity))


def bond_functions() -> dict[Measure, BaseCalculationFunction]:
    return {
        Measures.PRESENT_VALUE: BondPresentValue(),
        Measures.PV01: BondPV01(),
        Measures.BUCKETED_PV01: BondBucketedPV01(),
        Measures.CASH_FLOWS: BondCashFlows(),
        Measures.CURRENT_CASH: BondCurrentCash(),
        Measures.CURRENCY_EXPOSURE: BondCurrencyExposure(),
    }
