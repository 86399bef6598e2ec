"""
Exception hierarchy for the calculation engine.

Two families of errors exist:
- **Setup errors** abort a run before any cell is dispatched
  (`CalculationSetupError`, `MarketDataResolutionError`, `RunnerClosedError`).
- **Cell-scoped errors** are raised inside one (trade, column) calculation and
  are captured by the runner as a `Failure` for that cell only
  (`UnsupportedMeasureError`, `MarketDataNotFoundError`, `CurrencyConversionError`,
  plus any `ValueError` / `ArithmeticError` raised by a measure function).
"""

from __future__ import annotations

from typing import Any, Optional


class CalculationEngineError(Exception):
    """Base class for all engine errors; carries a free-form context dict."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class UnsupportedMeasureError(CalculationEngineError):
    """No calculation function registered for a (product type, measure) pair."""

    def __init__(self, product_type: type, measure: Any, **kwargs: Any):
        super().__init__(
            f"Measure '{measure}' is not supported for product type "
            f"{product_type.__name__}",
            **kwargs,
        )
        self.product_type = product_type
        self.measure = measure


class RegistryFrozenError(CalculationEngineError):
    """Registration attempted on a registry that has been frozen."""


class MarketDataNotFoundError(CalculationEngineError, KeyError):
    """A market data requirement has no bound value in the scenario data."""

    def __init__(self, key: Any, reason: Optional[str] = None, **kwargs: Any):
        message = f"No market data available for {key}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, **kwargs)
        self.key = key
        self.reason = reason

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.message


class MissingMarketDataRuleError(CalculationEngineError):
    """No market data rule claims a requirement."""

    def __init__(self, requirement: Any, **kwargs: Any):
        super().__init__(f"No market data rule matches requirement {requirement}", **kwargs)
        self.requirement = requirement


class MarketDataResolutionError(CalculationEngineError):
    """Run-level failure: one or more requirements could not be resolved."""

    def __init__(self, failures: dict[Any, str], **kwargs: Any):
        keys = ", ".join(str(k) for k in failures)
        super().__init__(f"Unable to resolve market data for: {keys}", **kwargs)
        self.failures = dict(failures)


class ReferenceDataNotFoundError(CalculationEngineError, KeyError):
    """An identifier is absent from the reference data."""

    def __init__(self, identifier: Any, **kwargs: Any):
        super().__init__(f"Reference data not found for identifier: {identifier}", **kwargs)
        self.identifier = identifier

    def __str__(self) -> str:
        return self.message


class CurrencyConversionError(CalculationEngineError):
    """A result could not be converted into the reporting currency."""


class CalculationSetupError(CalculationEngineError):
    """Invalid inputs detected before execution started."""


class RunnerClosedError(CalculationSetupError):
    """The runner's worker pool has been shut down."""


class FailedResultError(CalculationEngineError):
    """The value of a failed result was requested."""
