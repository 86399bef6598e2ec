"""
Calculation functions for Ibor caplets and floorlets (Black model).

Caplet PV = N * accrual * DF(end) * (F * Phi(d1) - K * Phi(d2)),
floorlet PV = N * accrual * DF(end) * (K * Phi(-d2) - F * Phi(-d1)), with
d1,2 = (ln(F/K) +/- sigma^2 T / 2) / (sigma sqrt(T)) and T the time to fixing.
An expired option (T <= 0) or zero volatility is worth its discounted intrinsic value.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from calcengine.currency import CurrencyAmount
from calcengine.functions.base import BaseCalculationFunction
from calcengine.functions.sensitivity import PresentValueFn, parallel_pv01, shift_size
from calcengine.marketdata.keys import (
    DiscountCurveKey,
    ForwardCurveKey,
    MarketDataRequirement,
    VolatilitiesKey,
)
from calcengine.marketdata.scenario_data import MarketDataView
from calcengine.measures import Measure, Measures
from calcengine.products.capfloor import IborCapletFloorlet
from calcengine.refdata import ReferenceData
from calcengine.trade import Trade


def norm_cdf(x: float) -> float:
    return 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))


def black_price(forward: float, strike: float, volatility: float, expiry: float, is_call: bool) -> float:
    """Undiscounted Black price of a call (or put) on `forward`."""
    if forward <= 0:
        raise ValueError("forward rate must be > 0 for the Black model")
    if expiry <= 0 or volatility == 0:
        intrinsic = forward - strike if is_call else strike - forward
        return max(intrinsic, 0.0)
    std_dev = volatility * math.sqrt(expiry)
    d1 = (math.log(forward / strike) + 0.5 * std_dev * std_dev) / std_dev
    d2 = d1 - std_dev
    if is_call:
        return forward * norm_cdf(d1) - strike * norm_cdf(d2)
    return strike * norm_cdf(-d2) - forward * norm_cdf(-d1)


class CapletPricer:
    """Black pricer for Ibor caplets/floorlets."""

    @staticmethod
    def forward_rate(option: IborCapletFloorlet, market: MarketDataView) -> float:
        forward = market.curve(ForwardCurveKey(option.index))
        return (forward.df(option.start) / forward.df(option.end) - 1.0) / option.accrual

    @staticmethod
    def present_value(option: IborCapletFloorlet, market: MarketDataView) -> float:
        discount = market.curve(DiscountCurveKey(option.currency))
        vols = market.volatilities(VolatilitiesKey(option.index))
        expiry = option.fixing_time
        volatility = vols.volatility(max(expiry, 0.0))
        price = black_price(
            CapletPricer.forward_rate(option, market), option.strike, volatility, expiry, option.is_cap
        )
        return option.notional * option.accrual * discount.df(option.end) * price


class _CapletFunction(BaseCalculationFunction):
    product_type = IborCapletFloorlet

    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        option = self.product(trade)
        return {
            DiscountCurveKey(option.currency),
            ForwardCurveKey(option.index),
            VolatilitiesKey(option.index),
        }

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return self.product(trade).currency

    def pv_function(self, trade: Trade) -> PresentValueFn:
        option = self.product(trade)
        return lambda market: CapletPricer.present_value(option, market)


class CapletPresentValue(_CapletFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        option = self.product(trade)
        return CurrencyAmount(option.currency, CapletPricer.present_value(option, market_data))


class CapletPV01(_CapletFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        option = self.product(trade)
        keys = self.requirements(trade, ref_data)
        pv01 = parallel_pv01(self.pv_function(trade), market_data, keys, shift_size(parameters))
        return CurrencyAmount(option.currency, pv01)


def caplet_functions() -> dict[Measure, BaseCalculationFunction]:
    return {
        Measures.PRESENT_VALUE: CapletPresentValue(),
        Measures.PV01: CapletPV01(),
    }
