"""
Calculation functions for fixed-float swaps (two curves).

Float leg forwards come from the forward curve of the swap's index,
F = (DF_fwd(start) / DF_fwd(end) - 1) / accrual; a period that started before
the valuation date uses the historical fixing instead. Both legs are discounted
on the currency's discount curve.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from calcengine.currency import CurrencyAmount
from calcengine.errors import MarketDataNotFoundError
from calcengine.functions.base import BaseCalculationFunction
from calcengine.functions.sensitivity import (
    PresentValueFn,
    bucketed_pv01,
    parallel_pv01,
    shift_size,
)
from calcengine.interfaces import Curve
from calcengine.marketdata.keys import (
    DiscountCurveKey,
    ForwardCurveKey,
    IndexFixingsKey,
    MarketDataRequirement,
)
from calcengine.marketdata.scenario_data import MarketDataView
from calcengine.measures import Measure, Measures
from calcengine.products.swap import FixedFloatSwap
from calcengine.refdata import ReferenceData
from calcengine.trade import Trade
from calcengine.values import CashFlow, CashFlows


class SwapPricer:
    """Discounting pricer for fixed-float swaps."""

    @staticmethod
    def float_rates(swap: FixedFloatSwap, market: MarketDataView) -> list[float]:
        """Fixing or forward rate of every remaining period."""
        forward = market.curve(ForwardCurveKey(swap.index))
        rates = []
        for start, end in swap.periods():
            if start < 0:
                rates.append(SwapPricer.fixing(swap, market))
            else:
                rates.append((forward.df(start) / forward.df(end) - 1.0) / (end - start))
        return rates

    @staticmethod
    def fixing(swap: FixedFloatSwap, market: MarketDataView) -> float:
        key = IndexFixingsKey(swap.index)
        series = market.time_series(key)
        rate = series.find(swap.first_fixing_date)
        if rate is None:
            raise MarketDataNotFoundError(key, f"no fixing on {swap.first_fixing_date.isoformat()}")
        return rate

    @staticmethod
    def annuity(swap: FixedFloatSwap, discount: Curve) -> float:
        """Sum of notional * accrual * DF(pay) over remaining periods."""
        return sum(swap.notional * (end - start) * discount.df(end) for start, end in swap.periods())

    @staticmethod
    def float_leg_pv(swap: FixedFloatSwap, market: MarketDataView) -> float:
        discount = market.curve(DiscountCurveKey(swap.currency))
        pv = 0.0
        for (start, end), rate in zip(swap.periods(), SwapPricer.float_rates(swap, market)):
            pv += swap.notional * (rate + swap.spread) * (end - start) * discount.df(end)
        return pv

    @staticmethod
    def present_value(swap: FixedFloatSwap, market: MarketDataView) -> float:
        """
        PV from the trade's perspective.
        pay_fixed: PV = PV(float leg) - PV(fixed leg); receive fixed flips the sign.
        """
        discount = market.curve(DiscountCurveKey(swap.currency))
        pv_fixed = swap.fixed_rate * SwapPricer.annuity(swap, discount)
        pv_float = SwapPricer.float_leg_pv(swap, market)
        return swap.fixed_sign * pv_fixed - swap.fixed_sign * pv_float

    @staticmethod
    def par_rate(swap: FixedFloatSwap, market: MarketDataView) -> float:
        """Fixed rate that makes the swap worth zero."""
        discount = market.curve(DiscountCurveKey(swap.currency))
        annuity = SwapPricer.annuity(swap, discount)
        if annuity == 0:
            raise ZeroDivisionError("swap has no remaining periods")
        return SwapPricer.float_leg_pv(swap, market) / annuity

    @staticmethod
    def cash_flows(swap: FixedFloatSwap, market: MarketDataView) -> CashFlows:
        discount = market.curve(DiscountCurveKey(swap.currency))
        flows = []
        for (start, end), rate in zip(swap.periods(), SwapPricer.float_rates(swap, market)):
            accrual = end - start
            df = discount.df(end)
            fixed_amount = swap.fixed_sign * swap.notional * swap.fixed_rate * accrual
            float_amount = -swap.fixed_sign * swap.notional * (rate + swap.spread) * accrual
            flows.append(CashFlow(end, swap.currency, fixed_amount, df))
            flows.append(CashFlow(end, swap.currency, float_amount, df))
        return CashFlows.of(flows)


class _SwapFunction(BaseCalculationFunction):
    product_type = FixedFloatSwap

    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        swap = self.product(trade)
        keys: set[MarketDataRequirement] = {DiscountCurveKey(swap.currency), ForwardCurveKey(swap.index)}
        if swap.needs_fixing():
            keys.add(IndexFixingsKey(swap.index))
        return keys

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return self.product(trade).currency

    def pv_function(self, trade: Trade) -> PresentValueFn:
        swap = self.product(trade)
        return lambda market: SwapPricer.present_value(swap, market)


class SwapPresentValue(_SwapFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        swap = self.product(trade)
        return CurrencyAmount(swap.currency, SwapPricer.present_value(swap, market_data))


class SwapPV01(_SwapFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        swap = self.product(trade)
        keys = self.requirements(trade, ref_data)
        return CurrencyAmount(
            swap.currency,
            parallel_pv01(self.pv_function(trade), market_data, keys, shift_size(parameters)),
        )


class SwapBucketedPV01(_SwapFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        swap = self.product(trade)
        keys = self.requirements(trade, ref_data)
        return bucketed_pv01(self.pv_function(trade), market_data, keys, shift_size(parameters), swap.currency)


class SwapParRate(_SwapFunction):
    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        return SwapPricer.par_rate(self.product(trade), market_data)


class SwapCashFlows(_SwapFunction):
    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        return SwapPricer.cash_flows(self.product(trade), market_data)


def swap_functions() -> dict[Measure, BaseCalculationFunction]:
    return {
        Measures.PRESENT_VALUE: SwapPresentValue(),
        Measures.PV01: SwapPV01(),
        Measures.BUCKETED_PV01: SwapBucketedPV01(),
        Measures.PAR_RATE: SwapParRate(),
        Measures.CASH_FLOWS: SwapCashFlows(),
    }
