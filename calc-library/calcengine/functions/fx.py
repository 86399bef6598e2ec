"""Calculation functions for FX forwards (covered interest rate parity)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from calcengine.currency import CurrencyAmount, MultiCurrencyAmount
from calcengine.functions.base import BaseCalculationFunction
from calcengine.functions.sensitivity import PresentValueFn, parallel_pv01, shift_size
from calcengine.marketdata.keys import DiscountCurveKey, FxRateKey, MarketDataRequirement
from calcengine.marketdata.scenario_data import MarketDataView
from calcengine.measures import Measure, Measures
from calcengine.products.fx import FxForward
from calcengine.refdata import ReferenceData
from calcengine.trade import Trade

DEFAULT_BUMP_PCT = 0.01


class FxForwardPricer:
    """Pricer for FX forwards."""

    @staticmethod
    def forward_rate(fwd: FxForward, market: MarketDataView) -> float:
        """F = spot * DF_base(T) / DF_counter(T)."""
        spot = market.fx_rate(fwd.pair.base, fwd.pair.counter)
        df_base = market.curve(DiscountCurveKey(fwd.pair.base)).df(fwd.maturity)
        df_counter = market.curve(DiscountCurveKey(fwd.pair.counter)).df(fwd.maturity)
        return spot * df_base / df_counter

    @staticmethod
    def present_value(fwd: FxForward, market: MarketDataView) -> float:
        """PV in the counter currency: notional_base * DF_counter(T) * (F - strike)."""
        df_counter = market.curve(DiscountCurveKey(fwd.pair.counter)).df(fwd.maturity)
        return fwd.notional_base * df_counter * (FxForwardPricer.forward_rate(fwd, market) - fwd.strike)

    @staticmethod
    def currency_exposure(fwd: FxForward, market: MarketDataView) -> MultiCurrencyAmount:
        """Discounted amounts of both legs, each in its own currency."""
        df_base = market.curve(DiscountCurveKey(fwd.pair.base)).df(fwd.maturity)
        df_counter = market.curve(DiscountCurveKey(fwd.pair.counter)).df(fwd.maturity)
        return MultiCurrencyAmount.of(
            CurrencyAmount(fwd.pair.base, fwd.notional_base * df_base),
            CurrencyAmount(fwd.pair.counter, -fwd.notional_base * fwd.strike * df_counter),
        )


class _FxForwardFunction(BaseCalculationFunction):
    product_type = FxForward

    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        fwd = self.product(trade)
        return {
            DiscountCurveKey(fwd.pair.base),
            DiscountCurveKey(fwd.pair.counter),
            FxRateKey(fwd.pair),
        }

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return self.product(trade).pair.counter

    def pv_function(self, trade: Trade) -> PresentValueFn:
        fwd = self.product(trade)
        return lambda market: FxForwardPricer.present_value(fwd, market)


class FxForwardPresentValue(_FxForwardFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        fwd = self.product(trade)
        return CurrencyAmount(fwd.pair.counter, FxForwardPricer.present_value(fwd, market_data))


class FxForwardPV01(_FxForwardFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        fwd = self.product(trade)
        keys = self.requirements(trade, ref_data)
        pv01 = parallel_pv01(self.pv_function(trade), market_data, keys, shift_size(parameters))
        return CurrencyAmount(fwd.pair.counter, pv01)


class FxForwardCurrencyExposure(_FxForwardFunction):
    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        return FxForwardPricer.currency_exposure(self.product(trade), market_data)


class FxForwardRate(_FxForwardFunction):
    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        return FxForwardPricer.forward_rate(self.product(trade), market_data)


class FxForwardDelta(_FxForwardFunction):
    """FX delta: (PV(bumped) - PV(base)) / (spot_bumped - spot), relative spot bump."""

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        fwd = self.product(trade)
        bump_pct = float(parameters.get("bump_pct", DEFAULT_BUMP_PCT))
        if bump_pct == 0:
            raise ValueError("bump_pct must be non-zero")
        spot = market_data.fx_rate(fwd.pair.base, fwd.pair.counter)
        spot_bumped = spot * (1.0 + bump_pct)
        bumped_market = market_data.with_value(FxRateKey(fwd.pair), spot_bumped)
        pv_base = FxForwardPricer.present_value(fwd, market_data)
        pv_bumped = FxForwardPricer.present_value(fwd, bumped_market)
        return (pv_bumped - pv_base) / (spot_bumped - spot)


def fx_forward_functions() -> dict[Measure, BaseCalculationFunction]:
    return {
        Measures.PRESENT_VALUE: FxForwardPresentValue(),
        Measures.PV01: FxForwardPV01(),
        Measures.CURRENCY_EXPOSURE: FxForwardCurrencyExposure(),
        Measures.FORWARD_FX_RATE: FxForwardRate(),
        Measures.FX_DELTA: FxForwardDelta(),
    }
