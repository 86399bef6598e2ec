"""GraphQL types for the calculation API."""

from __future__ import annotations

from datetime import date
from typing import Optional

import strawberry


# --- Input types (request payloads) ---


@strawberry.input
class CurveInput:
    """
    Zero curve: pillars (year fractions) and zero rates (continuously compounded).

    The roles say which requirements the curve satisfies: discounting for a
    currency and/or forwarding for a rate index.
    """

    name: str
    pillars: list[float]
    zero_rates_cc: list[float]
    discount_currency: Optional[str] = None
    forward_index: Optional[str] = None


@strawberry.input
class HazardCurveInput:
    """Credit curve of a reference entity: df(t) returns S(t)."""

    name: str
    pillars: list[float]
    hazard_rates: list[float]
    reference_entity: str
    currency: str


@strawberry.input
class FxSpotInput:
    """FX spot rate for a pair (e.g. EUR/USD or EURUSD)."""

    pair: str
    spot: float


@strawberry.input
class MarketInput:
    """Market snapshot: curves, credit curves and FX spots for one valuation date."""

    valuation_date: date
    curves: list[CurveInput]
    hazard_curves: Optional[list[HazardCurveInput]] = None
    fx_spot: Optional[list[FxSpotInput]] = None


@strawberry.input
class TermDepositInput:
    """Fixed-rate deposit; start and end are year fractions from the valuation date."""

    id: str
    currency: str
    notional: float
    rate: float
    start: float
    end: float
    buy: bool = True


@strawberry.input
class FixedFloatSwapInput:
    """Fixed-float interest rate swap (pay fixed by default)."""

    id: str
    currency: str
    index: str
    notional: float
    fixed_rate: float
    pay_times: list[float]
    t0: float = 0.0
    spread: float = 0.0
    pay_fixed: bool = True


@strawberry.input
class FxForwardInput:
    """FX forward: notional in base currency, strike (counter per base), settles at maturity."""

    id: str
    pair: str
    notional_base: float
    strike: float
    maturity: float


@strawberry.input
class CdsInput:
    """Single-name CDS (protection buyer by default)."""

    id: str
    reference_entity: str
    currency: str
    notional: float
    premium_rate: float
    pay_times: list[float]
    recovery: float = 0.4
    t0: float = 0.0
    protection_buyer: bool = True


@strawberry.input
class TradesInput:
    term_deposits: Optional[list[TermDepositInput]] = None
    swaps: Optional[list[FixedFloatSwapInput]] = None
    fx_forwards: Optional[list[FxForwardInput]] = None
    cds: Optional[list[CdsInput]] = None


@strawberry.input
class ColumnInput:
    """A measure name (e.g. PresentValue) with optional reporting currency and shift size."""

    measure: str
    reporting_currency: Optional[str] = None
    shift_bp: Optional[float] = None


# --- Output types (response payloads) ---


@strawberry.type
class FailureOutput:
    reason: str
    message: str


@strawberry.type
class ScenarioValue:
    """Value of a cell in one scenario."""

    scenario: str
    amount: Optional[float] = None
    currency: Optional[str] = None
    display: Optional[str] = None
    failure: Optional[FailureOutput] = None


@strawberry.type
class CellOutput:
    """
    One cell of the results grid.

    Scalar and monetary values fill `amount` (and `currency`); structured
    values (cash flows, bucketed sensitivities) are summarised in `display`.
    Multi-scenario runs fill `scenario_values` instead.
    """

    column: str
    amount: Optional[float] = None
    currency: Optional[str] = None
    display: Optional[str] = None
    failure: Optional[FailureOutput] = None
    scenario_values: Optional[list[ScenarioValue]] = None


@strawberry.type
class RowOutput:
    trade_id: str
    cells: list[CellOutput]


@strawberry.type
class CalculationResult:
    """Results grid in request order: one row per trade, one cell per column."""

    columns: list[str]
    rows: list[RowOutput]
    scenario_count: int
    failure_count: int
