"""Market data: requirement keys, concrete ids, rules, scenarios and resolution."""

from calcengine.marketdata.ids import (
    CurveId,
    FxRateId,
    IssuerCurveId,
    MarketDataId,
    TimeSeriesId,
    VolatilitiesId,
)
from calcengine.marketdata.keys import (
    CreditCurveKey,
    DiscountCurveKey,
    ForwardCurveKey,
    FxRateKey,
    IndexFixingsKey,
    IssuerCurveKey,
    MarketDataRequirement,
    RepoCurveKey,
    VolatilitiesKey,
)
from calcengine.marketdata.resolver import MarketDataResolver
from calcengine.marketdata.rules import (
    CurveGroupRule,
    ExplicitRule,
    FxRateRule,
    MarketDataRule,
    MarketDataRules,
    TimeSeriesRule,
    VolatilityRule,
)
from calcengine.marketdata.scenario_data import MarketDataView, ScenarioMarketData
from calcengine.marketdata.scenarios import (
    CurveParallelShift,
    CurvePointShift,
    FxRateShift,
    Scenario,
    parallel_shift_scenarios,
)
from calcengine.marketdata.snapshot import MarketSnapshot, TimeSeries

__all__ = [
    "CreditCurveKey",
    "CurveGroupRule",
    "CurveId",
    "CurveParallelShift",
    "CurvePointShift",
    "DiscountCurveKey",
    "ExplicitRule",
    "ForwardCurveKey",
    "FxRateId",
    "FxRateKey",
    "FxRateRule",
    "FxRateShift",
    "IndexFixingsKey",
    "IssuerCurveId",
    "IssuerCurveKey",
    "MarketDataId",
    "MarketDataRequirement",
    "MarketDataResolver",
    "MarketDataRule",
    "MarketDataRules",
    "MarketDataView",
    "MarketSnapshot",
    "RepoCurveKey",
    "Scenario",
    "ScenarioMarketData",
    "TimeSeries",
    "TimeSeriesId",
    "TimeSeriesRule",
    "VolatilitiesId",
    "VolatilitiesKey",
    "VolatilityRule",
    "parallel_shift_scenarios",
]
