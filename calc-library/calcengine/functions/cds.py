"""
Calculation functions for single-name CDS (premium + protection legs, discrete default).

Survival probabilities come from the credit curve of the reference entity
(a HazardRateCurve, whose `df` is S(t)); discounting from the currency's
discount curve. Periods paid before the valuation date are ignored.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from calcengine.currency import CurrencyAmount
from calcengine.functions.base import BaseCalculationFunction
from calcengine.functions.sensitivity import shift_size
from calcengine.interfaces import Curve
from calcengine.marketdata.keys import CreditCurveKey, DiscountCurveKey, MarketDataRequirement
from calcengine.marketdata.scenario_data import MarketDataView
from calcengine.measures import Measure, Measures
from calcengine.products.cds import Cds
from calcengine.refdata import ReferenceData
from calcengine.trade import Trade


class CdsPricer:
    """Pricer for single-name CDS."""

    @staticmethod
    def periods(cds: Cds) -> list[tuple[float, float]]:
        out = []
        prev = cds.t0
        for t in cds.pay_times:
            if t > 0:
                out.append((prev, t))
            prev = t
        return out

    @staticmethod
    def risky_annuity(cds: Cds, disc: Curve, surv: Curve) -> float:
        """sum_i N * accrual_i * DF(t_i) * S(t_i)."""
        return sum(cds.notional * (t - prev) * disc.df(t) * surv.df(t) for prev, t in CdsPricer.periods(cds))

    @staticmethod
    def pv_premium_leg(cds: Cds, disc: Curve, surv: Curve) -> float:
        return cds.premium_rate * CdsPricer.risky_annuity(cds, disc, surv)

    @staticmethod
    def pv_protection_leg(cds: Cds, disc: Curve, surv: Curve) -> float:
        """sum_i N(1-R) * DF(t_mid) * (S(t_{i-1}) - S(t_i)), default risk from today on."""
        pv = 0.0
        for prev, t in CdsPricer.periods(cds):
            start = max(prev, 0.0)
            t_mid = (start + t) / 2.0
            pv += cds.notional * (1.0 - cds.recovery) * disc.df(t_mid) * (surv.df(start) - surv.df(t))
        return pv

    @staticmethod
    def present_value(cds: Cds, disc: Curve, surv: Curve) -> float:
        """Protection buyer: pv_protection - pv_premium; seller flips the sign."""
        npv = CdsPricer.pv_protection_leg(cds, disc, surv) - CdsPricer.pv_premium_leg(cds, disc, surv)
        return npv if cds.protection_buyer else -npv

    @staticmethod
    def par_spread(cds: Cds, disc: Curve, surv: Curve) -> float:
        """Spread s* such that NPV = 0: s* = pv_protection / risky_annuity."""
        annuity = CdsPricer.risky_annuity(cds, disc, surv)
        if annuity <= 0:
            raise ValueError("CDS has no remaining premium periods")
        return CdsPricer.pv_protection_leg(cds, disc, surv) / annuity


class _CdsFunction(BaseCalculationFunction):
    product_type = Cds

    def keys(self, trade: Trade) -> tuple[DiscountCurveKey, CreditCurveKey]:
        cds = self.product(trade)
        return DiscountCurveKey(cds.currency), CreditCurveKey(cds.reference_entity, cds.currency)

    def requirements(self, trade: Trade, ref_data: ReferenceData) -> set[MarketDataRequirement]:
        return set(self.keys(trade))

    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return self.product(trade).currency

    def curves(self, trade: Trade, market_data: MarketDataView) -> tuple[Curve, Curve]:
        discount_key, credit_key = self.keys(trade)
        return market_data.curve(discount_key), market_data.curve(credit_key)


class CdsPresentValue(_CdsFunction):
    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        cds = self.product(trade)
        disc, surv = self.curves(trade, market_data)
        return CurrencyAmount(cds.currency, CdsPricer.present_value(cds, disc, surv))


class CdsParSpread(_CdsFunction):
    def natural_currency(self, trade: Trade, ref_data: ReferenceData) -> Optional[str]:
        return None

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        disc, surv = self.curves(trade, market_data)
        return CdsPricer.par_spread(self.product(trade), disc, surv)


class CdsCS01(_CdsFunction):
    """CS01: PV(credit curve shifted in parallel) - PV(base)."""

    def calculate(
        self,
        trade: Trade,
        market_data: MarketDataView,
        ref_data: ReferenceData,
        parameters: Mapping[str, Any],
    ) -> Any:
        cds = self.product(trade)
        disc, surv = self.curves(trade, market_data)
        bumped = surv.bumped(shift_size(parameters))
        cs01 = CdsPricer.present_value(cds, disc, bumped) - CdsPricer.present_value(cds, disc, surv)
        return CurrencyAmount(cds.currency, cs01)


def cds_functions() -> dict[Measure, BaseCalculationFunction]:
    return {
        Measures.PRESENT_VALUE: CdsPresentValue(),
        Measures.PAR_SPREAD: CdsParSpread(),
        Measures.CS01: CdsCS01(),
    }
