"""Calculation engine: measures, registry, market data resolution, runner and results."""

from calcengine.calculation import CalculationRules
from calcengine.column import Column
from calcengine.config import EngineConfig, load_config
from calcengine.currency import CurrencyAmount, CurrencyPair, MultiCurrencyAmount
from calcengine.curves import HazardRateCurve, VolatilityCurve, ZeroRateCurve
from calcengine.errors import (
    CalculationEngineError,
    CalculationSetupError,
    MarketDataResolutionError,
    RunnerClosedError,
    UnsupportedMeasureError,
)
from calcengine.interfaces import CalculationFunction, Curve, MarketDataSource
from calcengine.log import configure_logging
from calcengine.marketdata import (
    CurveGroupRule,
    FxRateRule,
    MarketDataRules,
    MarketSnapshot,
    Scenario,
    ScenarioMarketData,
)
from calcengine.measures import Measure, Measures
from calcengine.refdata import ReferenceData
from calcengine.registry import MeasureRegistry, create_default_registry
from calcengine.requirements import collect_requirements
from calcengine.results import Failure, FailureReason, Result, Results, ScenarioArray
from calcengine.runner import CalculationRunner, RunState
from calcengine.trade import Trade, TradeInfo

__all__ = [
    "CalculationEngineError",
    "CalculationFunction",
    "CalculationRules",
    "CalculationRunner",
    "CalculationSetupError",
    "Column",
    "CurrencyAmount",
    "CurrencyPair",
    "Curve",
    "CurveGroupRule",
    "EngineConfig",
    "Failure",
    "FailureReason",
    "FxRateRule",
    "HazardRateCurve",
    "MarketDataResolutionError",
    "MarketDataRules",
    "MarketDataSource",
    "MarketSnapshot",
    "Measure",
    "MeasureRegistry",
    "Measures",
    "MultiCurrencyAmount",
    "ReferenceData",
    "Result",
    "Results",
    "RunState",
    "RunnerClosedError",
    "Scenario",
    "ScenarioArray",
    "ScenarioMarketData",
    "Trade",
    "TradeInfo",
    "UnsupportedMeasureError",
    "VolatilityCurve",
    "ZeroRateCurve",
    "collect_requirements",
    "configure_logging",
    "create_default_registry",
    "load_config",
]
