"""
Calculation runner: collect requirements, resolve market data, execute cells.

A run moves through CREATED -> REQUIREMENTS_COLLECTED -> MARKET_DATA_RESOLVED
-> EXECUTING -> COMPLETED, or to FAILED when setup is rejected. Market data is
fully resolved before any cell is dispatched. Cells are independent and run
on the runner's thread pool, one future per cell; every exception raised
inside a cell becomes a Failure for that cell only.

The runner owns its pool from construction until close(). Closing shuts the
pool down and makes the runner unusable.
"""

from __future__ import annotations

import threading
import time
import uuid
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from calcengine.calculation import CalculationRules
from calcengine.column import Column
from calcengine.config import EngineConfig
from calcengine.errors import (
    CalculationSetupError,
    CurrencyConversionError,
    MarketDataNotFoundError,
    MarketDataResolutionError,
    RunnerClosedError,
)
from calcengine.interfaces import FxConvertible, MarketDataSource
from calcengine.log import get_logger, log_state_transition
from calcengine.marketdata.keys import MarketDataRequirement
from calcengine.marketdata.resolver import MarketDataResolver
from calcengine.marketdata.scenario_data import MarketDataView, ScenarioMarketData
from calcengine.marketdata.scenarios import Scenario
from calcengine.refdata import ReferenceData
from calcengine.results import Failure, Result, Results, ScenarioArray
from calcengine.tasks import CalculationTask, CalculationTasks
from calcengine.trade import Trade

logger = get_logger(__name__)

MarketDataInput = Union[MarketDataSource, ScenarioMarketData]


class RunState(Enum):
    CREATED = "CREATED"
    REQUIREMENTS_COLLECTED = "REQUIREMENTS_COLLECTED"
    MARKET_DATA_RESOLVED = "MARKET_DATA_RESOLVED"
    EXECUTING = "EXECUTING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class _Run:
    """State of a single run, for logging transitions."""

    def __init__(self) -> None:
        self.run_id = uuid.uuid4().hex[:12]
        self.state = RunState.CREATED

    def advance(self, state: RunState, **context: Any) -> None:
        log_state_transition(logger, self.run_id, self.state.value, state.value, context or None)
        self.state = state


class CalculationRunner:
    """
    Runs calculations over a bounded thread pool.

    Use as a context manager so that the pool is released deterministically:

        with CalculationRunner.of_multi_threaded() as runner:
            results = runner.calculate(rules, trades, columns, snapshot)
    """

    def __init__(
        self,
        executor: ThreadPoolExecutor,
        config: Optional[EngineConfig] = None,
        owns_executor: bool = True,
    ) -> None:
        self._executor = executor
        self._config = config or EngineConfig()
        self._owns_executor = owns_executor
        self._closed = False
        self._lock = threading.Lock()

    @classmethod
    def of_single_threaded(cls, config: Optional[EngineConfig] = None) -> CalculationRunner:
        return cls(ThreadPoolExecutor(max_workers=1, thread_name_prefix="calc"), config)

    @classmethod
    def of_multi_threaded(
        cls,
        max_workers: Optional[int] = None,
        config: Optional[EngineConfig] = None,
    ) -> CalculationRunner:
        """Pool sized by `max_workers`, else by the config (CPU count by default)."""
        config = config or EngineConfig()
        workers = max_workers or config.max_workers
        if workers < 1:
            raise ValueError("max_workers must be >= 1")
        return cls(ThreadPoolExecutor(max_workers=workers, thread_name_prefix="calc"), config)

    @classmethod
    def of(cls, executor: ThreadPoolExecutor, config: Optional[EngineConfig] = None) -> CalculationRunner:
        """Runner on a caller-managed pool; close() leaves that pool running."""
        return cls(executor, config, owns_executor=False)

    @classmethod
    def from_config(cls, config: EngineConfig) -> CalculationRunner:
        return cls.of_multi_threaded(config.max_workers, config)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate(
        self,
        rules: CalculationRules,
        trades: Sequence[Trade],
        columns: Sequence[Column],
        market_data: MarketDataInput,
        ref_data: Optional[ReferenceData] = None,
    ) -> Results:
        """
        Calculate every (trade, column) cell against a single scenario.

        Cells hold plain values (or failures). Blocks until every cell is done.
        """
        return self._run(rules, trades, columns, market_data, ref_data, None, multi_scenario=False)

    def calculate_multi_scenario(
        self,
        rules: CalculationRules,
        trades: Sequence[Trade],
        columns: Sequence[Column],
        market_data: MarketDataInput,
        ref_data: Optional[ReferenceData] = None,
        scenarios: Optional[Sequence[Scenario]] = None,
    ) -> Results:
        """
        Calculate every cell for every scenario.

        Each cell holds a ScenarioArray with one Result per scenario, in
        scenario order. `scenarios` perturb a base source; pre-built
        ScenarioMarketData already carries its scenarios.
        """
        return self._run(rules, trades, columns, market_data, ref_data, scenarios, multi_scenario=True)

    def close(self) -> None:
        """Shut the pool down, discarding tasks not yet started. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=True, cancel_futures=True)
        logger.debug("calculation_runner_closed")

    def __enter__(self) -> CalculationRunner:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(
        self,
        rules: CalculationRules,
        trades: Sequence[Trade],
        columns: Sequence[Column],
        market_data: MarketDataInput,
        ref_data: Optional[ReferenceData],
        scenarios: Optional[Sequence[Scenario]],
        multi_scenario: bool,
    ) -> Results:
        run = _Run()
        started = time.perf_counter()
        try:
            self._validate(rules, trades, columns, market_data)
            ref_data = ref_data if ref_data is not None else ReferenceData.standard()
            logger.info(
                "calculation_run_started",
                run_id=run.run_id,
                trades=len(trades),
                columns=len(columns),
                multi_scenario=multi_scenario,
            )

            tasks = CalculationTasks.of(trades, columns, rules.registry, ref_data, rules.reporting_currency)
            run.advance(RunState.REQUIREMENTS_COLLECTED, requirements=len(tasks.requirements))

            scenario_data = self._scenario_market_data(tasks.requirements, rules, market_data, scenarios)
            if not multi_scenario and scenario_data.scenario_count != 1:
                raise CalculationSetupError(
                    "calculate() needs single-scenario market data; use calculate_multi_scenario()",
                    context={"scenarios": scenario_data.scenario_count},
                )
            if scenario_data.has_failures() and self._config.strict_market_data:
                raise MarketDataResolutionError(
                    dict(scenario_data.failures),
                    context={"run_id": run.run_id},
                )
            run.advance(RunState.MARKET_DATA_RESOLVED, scenarios=scenario_data.scenario_count)

            run.advance(RunState.EXECUTING, cells=len(tasks))
            cells = self._execute(tasks, scenario_data, ref_data, multi_scenario)
        except Exception:
            run.advance(RunState.FAILED)
            raise

        results = Results(
            trade_ids=[t.id for t in trades],
            columns=columns,
            cells=cells,
            scenario_count=scenario_data.scenario_count if multi_scenario else 1,
        )
        run.advance(RunState.COMPLETED)
        logger.info(
            "calculation_run_completed",
            run_id=run.run_id,
            cells=len(results),
            failures=len(results.failures()),
            duration_ms=round((time.perf_counter() - started) * 1000, 3),
        )
        return results

    def _validate(
        self,
        rules: CalculationRules,
        trades: Sequence[Trade],
        columns: Sequence[Column],
        market_data: MarketDataInput,
    ) -> None:
        if self._closed:
            raise RunnerClosedError("Calculation runner has been closed")
        if rules is None:
            raise CalculationSetupError("Calculation rules are required")
        if not trades:
            raise CalculationSetupError("At least one trade is required")
        if not columns:
            raise CalculationSetupError("At least one column is required")
        if market_data is None:
            raise CalculationSetupError("Market data is required")

    def _scenario_market_data(
        self,
        requirements: frozenset[MarketDataRequirement],
        rules: CalculationRules,
        market_data: MarketDataInput,
        scenarios: Optional[Sequence[Scenario]],
    ) -> ScenarioMarketData:
        if isinstance(market_data, ScenarioMarketData):
            if scenarios:
                raise CalculationSetupError("Scenarios cannot be applied to pre-built scenario market data")
            return market_data
        if market_data.valuation_date is None:
            raise CalculationSetupError("Market data has no valuation date")
        return MarketDataResolver.build(
            requirements,
            rules.market_data_rules,
            market_data,
            scenarios=scenarios,
        )

    def _execute(
        self,
        tasks: CalculationTasks,
        scenario_data: ScenarioMarketData,
        ref_data: ReferenceData,
        multi_scenario: bool,
    ) -> list[list[Result]]:
        cells: list[list[Optional[Result]]] = [[None] * len(tasks.columns) for _ in tasks.trades]
        futures: list[tuple[CalculationTask, Future]] = []
        try:
            for task in tasks:
                try:
                    future = self._executor.submit(
                        self._calculate_cell, task, scenario_data, ref_data, multi_scenario
                    )
                except RuntimeError as exc:
                    # Pool shut down by a concurrent close()
                    raise RunnerClosedError("Calculation runner has been closed") from exc
                futures.append((task, future))
            for task, future in futures:
                try:
                    cells[task.row][task.column_index] = future.result()
                except CancelledError as exc:
                    raise RunnerClosedError("Calculation runner closed during execution") from exc
        finally:
            for _, future in futures:
                future.cancel()
        return cells

    # ------------------------------------------------------------------
    # Cells
    # ------------------------------------------------------------------

    def _parameters(self, column: Column) -> Mapping[str, Any]:
        parameters: dict[str, Any] = {"shift_bp": self._config.default_shift_bp}
        parameters.update(column.parameters)
        return parameters

    def _calculate_cell(
        self,
        task: CalculationTask,
        scenario_data: ScenarioMarketData,
        ref_data: ReferenceData,
        multi_scenario: bool,
    ) -> Result:
        if not task.is_runnable:
            # Plan failures do not depend on the scenario
            return Result.failed(task.failure)
        if multi_scenario:
            array = ScenarioArray.of(
                scenario_data.scenario_count,
                lambda i: self._calculate_scenario(task, scenario_data.scenario(i), ref_data),
            )
            return Result.success(array)
        return self._calculate_scenario(task, scenario_data.scenario(0), ref_data)

    def _calculate_scenario(self, task: CalculationTask, market: MarketDataView, ref_data: ReferenceData) -> Result:
        try:
            value = task.function.calculate(task.trade, market, ref_data, self._parameters(task.column))
            return Result.success(self._convert(task, value, market))
        except Exception as exc:
            failure = Failure.from_exception(exc, task.trade.id, task.column.header)
            logger.debug(
                "cell_failed",
                trade_id=task.trade.id,
                column=task.column.header,
                scenario=market.scenario_name,
                reason=failure.reason.value,
                message=failure.message,
            )
            return Result.failed(failure)

    @staticmethod
    def _convert(task: CalculationTask, value: Any, market: MarketDataView) -> Any:
        """Express a monetary value in the task's reporting currency."""
        target = task.reporting_currency
        natural = task.natural_currency
        if not target or not natural or target == natural or not isinstance(value, FxConvertible):
            return value
        try:
            return value.convert_to(target, market.fx_rate)
        except MarketDataNotFoundError as exc:
            raise CurrencyConversionError(
                f"Cannot convert {natural} to {target}: {exc.message}",
                context={"trade_id": task.trade.id, "column": task.column.header},
            ) from exc
