"""Service layer: convert GraphQL inputs to engine objects and run calculations."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional

from calcengine import (
    CalculationRules,
    CalculationRunner,
    Column,
    CurrencyAmount,
    CurrencyPair,
    CurveGroupRule,
    EngineConfig,
    Failure,
    FxRateRule,
    HazardRateCurve,
    MarketDataRules,
    MarketSnapshot,
    Measure,
    Measures,
    MultiCurrencyAmount,
    Result,
    Results,
    ScenarioArray,
    Trade,
    ZeroRateCurve,
    load_config,
)
from calcengine.marketdata import CurveId, FxRateId, parallel_shift_scenarios
from calcengine.products import BuySell, Cds, FixedFloatSwap, FxForward, TermDeposit
from calcengine.values import CashFlows, CurveSensitivities

from calc_api.types import (
    CalculationResult,
    CellOutput,
    ColumnInput,
    FailureOutput,
    MarketInput,
    RowOutput,
    ScenarioValue,
    TradesInput,
)

CURVE_GROUP = "API"


@lru_cache(maxsize=1)
def engine_config() -> EngineConfig:
    """Engine settings from CALC_CONFIG_FILE / CALC_* environment variables."""
    return load_config()


def market_from_input(m: MarketInput) -> tuple[MarketSnapshot, MarketDataRules]:
    """
    Build the market snapshot and the rules that map requirements onto it.

    Curves are stored in one curve group; each curve's roles decide which
    discount / forward / credit requirements it satisfies.
    """
    if not m.curves:
        raise ValueError("market.curves must not be empty")
    values: dict[Any, Any] = {}
    discount: dict[str, str] = {}
    forward: dict[str, str] = {}
    credit: dict[tuple[str, str], str] = {}
    for c in m.curves:
        values[CurveId(CURVE_GROUP, c.name)] = ZeroRateCurve(c.name, c.pillars, c.zero_rates_cc)
        if c.discount_currency:
            discount[c.discount_currency] = c.name
        if c.forward_index:
            forward[c.forward_index] = c.name
    for h in m.hazard_curves or []:
        values[CurveId(CURVE_GROUP, h.name)] = HazardRateCurve(h.name, h.pillars, h.hazard_rates)
        credit[(h.reference_entity, h.currency)] = h.name
    for fx in m.fx_spot or []:
        if fx.spot <= 0:
            raise ValueError(f"fx spot for {fx.pair} must be > 0")
        values[FxRateId(CurrencyPair.parse(fx.pair))] = fx.spot

    rules = MarketDataRules.of(
        CurveGroupRule(
            CURVE_GROUP,
            discount_curves=discount,
            forward_curves=forward,
            credit_curves=credit,
        ),
        FxRateRule(),
    )
    return MarketSnapshot(m.valuation_date, values), rules


def trades_from_input(t: TradesInput) -> list[Trade]:
    """Trades in request order: deposits, swaps, FX forwards, then CDS."""
    trades: list[Trade] = []
    for d in t.term_deposits or []:
        product = TermDeposit(
            currency=d.currency,
            notional=d.notional,
            rate=d.rate,
            start=d.start,
            end=d.end,
            buy_sell=BuySell.BUY if d.buy else BuySell.SELL,
        )
        trades.append(Trade.of(d.id, product))
    for s in t.swaps or []:
        product = FixedFloatSwap(
            currency=s.currency,
            index=s.index,
            notional=s.notional,
            fixed_rate=s.fixed_rate,
            pay_times=tuple(s.pay_times),
            t0=s.t0,
            spread=s.spread,
            pay_fixed=s.pay_fixed,
        )
        trades.append(Trade.of(s.id, product))
    for f in t.fx_forwards or []:
        product = FxForward(
            pair=CurrencyPair.parse(f.pair),
            notional_base=f.notional_base,
            strike=f.strike,
            maturity=f.maturity,
        )
        trades.append(Trade.of(f.id, product))
    for c in t.cds or []:
        product = Cds(
            reference_entity=c.reference_entity,
            currency=c.currency,
            notional=c.notional,
            premium_rate=c.premium_rate,
            pay_times=tuple(c.pay_times),
            recovery=c.recovery,
            t0=c.t0,
            protection_buyer=c.protection_buyer,
        )
        trades.append(Trade.of(c.id, product))
    if not trades:
        raise ValueError("at least one trade is required")
    return trades


def _measure(name: str) -> Measure:
    """Standard measure by name (case-insensitive); any other name is passed through."""
    try:
        return Measures.of(name)
    except ValueError:
        return Measure(name.strip())


def columns_from_input(columns: list[ColumnInput]) -> list[Column]:
    if not columns:
        raise ValueError("at least one column is required")
    out = []
    for c in columns:
        parameters = {"shift_bp": c.shift_bp} if c.shift_bp is not None else {}
        out.append(
            Column(
                measure=_measure(c.measure),
                reporting_currency=c.reporting_currency,
                parameters=parameters,
            )
        )
    return out


# --- Result conversion ---


def _failure_output(failure: Failure) -> FailureOutput:
    return FailureOutput(reason=failure.reason.value, message=failure.message)


def _describe(value: Any) -> tuple[Optional[float], Optional[str], str]:
    """(amount, currency, display) for a calculated value."""
    if isinstance(value, CurrencyAmount):
        return value.amount, value.currency, str(value)
    if isinstance(value, (int, float)):
        return float(value), None, f"{value:.10g}"
    if isinstance(value, MultiCurrencyAmount):
        return None, None, ", ".join(str(a) for a in value)
    if isinstance(value, CashFlows):
        return None, None, f"{len(value)} cash flows"
    if isinstance(value, CurveSensitivities):
        buckets = ", ".join(f"{e.curve_name}: {e.total()}" for e in value.entries)
        return None, None, buckets
    return None, None, str(value)


def _cell_output(column: str, result: Result, scenario_names: list[str]) -> CellOutput:
    if result.is_failure:
        return CellOutput(column=column, failure=_failure_output(result.failure))
    value = result.value
    if isinstance(value, ScenarioArray):
        scenario_values = []
        for name, r in zip(scenario_names, value.results):
            if r.is_failure:
                scenario_values.append(ScenarioValue(scenario=name, failure=_failure_output(r.failure)))
                continue
            amount, currency, display = _describe(r.value)
            scenario_values.append(ScenarioValue(scenario=name, amount=amount, currency=currency, display=display))
        return CellOutput(column=column, scenario_values=scenario_values)
    amount, currency, display = _describe(value)
    return CellOutput(column=column, amount=amount, currency=currency, display=display)


def results_to_output(results: Results, scenario_names: list[str]) -> CalculationResult:
    headers = [c.header for c in results.columns]
    rows = [
        RowOutput(
            trade_id=trade_id,
            cells=[_cell_output(headers[j], cell, scenario_names) for j, cell in enumerate(row)],
        )
        for trade_id, row in zip(results.trade_ids, results)
    ]
    return CalculationResult(
        columns=headers,
        rows=rows,
        scenario_count=results.scenario_count,
        failure_count=len(results.failures()),
    )


def calculate(
    trades: TradesInput,
    columns: list[ColumnInput],
    market: MarketInput,
    reporting_currency: Optional[str] = None,
    scenario_shifts_bp: Optional[list[float]] = None,
) -> CalculationResult:
    """
    Calculate every (trade, column) cell.

    With `scenario_shifts_bp`, every curve is shifted in parallel by each
    amount (0 = base) and cells carry one value per scenario.
    """
    snapshot, market_data_rules = market_from_input(market)
    rules = CalculationRules.of(market_data_rules, reporting_currency=reporting_currency)
    trade_list = trades_from_input(trades)
    column_list = columns_from_input(columns)
    config = engine_config()
    with CalculationRunner.from_config(config) as runner:
        if scenario_shifts_bp:
            scenarios = parallel_shift_scenarios(scenario_shifts_bp)
            results = runner.calculate_multi_scenario(
                rules, trade_list, column_list, snapshot, scenarios=scenarios
            )
            return results_to_output(results, [s.name for s in scenarios])
        results = runner.calculate(rules, trade_list, column_list, snapshot)
    return results_to_output(results, [])
