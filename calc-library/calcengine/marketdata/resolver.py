"""
Build ScenarioMarketData from requirements, rules and a baseline source.

Resolution runs in three passes over the requirements (sorted, so that the same
inputs always produce the same bindings and the same failure messages):

1. map every requirement to a concrete id with the rule chain;
2. read each distinct id from the source once;
3. per scenario, perturb each baseline value once and bind it to every
   requirement that maps to its id.

Failures never raise here: they are recorded per scenario with a reason and
the caller decides whether they are fatal.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional, Sequence

from calcengine.errors import MissingMarketDataRuleError
from calcengine.interfaces import MarketDataSource
from calcengine.log import get_logger
from calcengine.marketdata.ids import MarketDataId
from calcengine.marketdata.keys import MarketDataRequirement
from calcengine.marketdata.rules import MarketDataRules
from calcengine.marketdata.scenario_data import ScenarioMarketData
from calcengine.marketdata.scenarios import Scenario

logger = get_logger(__name__)


class MarketDataResolver:
    """Resolves requirement keys against a MarketDataSource."""

    @staticmethod
    def resolve_ids(
        requirements: Iterable[MarketDataRequirement],
        rules: MarketDataRules,
    ) -> tuple[dict[MarketDataRequirement, MarketDataId], dict[MarketDataRequirement, str]]:
        """Map requirements to ids; unclaimed requirements are returned as failures."""
        ids: dict[MarketDataRequirement, MarketDataId] = {}
        failures: dict[MarketDataRequirement, str] = {}
        for requirement in sorted(set(requirements), key=lambda r: r.sort_key()):
            try:
                ids[requirement] = rules.resolve(requirement)
            except MissingMarketDataRuleError as exc:
                failures[requirement] = exc.message
        return ids, failures

    @staticmethod
    def build(
        requirements: Iterable[MarketDataRequirement],
        rules: MarketDataRules,
        source: MarketDataSource,
        valuation_date: Optional[date] = None,
        scenarios: Optional[Sequence[Scenario]] = None,
    ) -> ScenarioMarketData:
        """
        Bind every requirement for every scenario.

        Args:
            requirements: Keys collected from the calculation functions
            rules: Rule chain mapping keys to ids in `source`
            source: Baseline market data
            valuation_date: Defaults to the source's valuation date
            scenarios: Defaults to the single unperturbed base scenario
        """
        scenarios = list(scenarios) if scenarios else [Scenario.base()]
        base_date = valuation_date or source.valuation_date
        if base_date is None:
            raise ValueError("no valuation date available for market data resolution")

        ids, rule_failures = MarketDataResolver.resolve_ids(requirements, rules)

        baseline: dict[MarketDataId, Any] = {}
        source_failures: dict[MarketDataId, str] = {}
        for market_data_id in sorted(set(ids.values()), key=str):
            try:
                baseline[market_data_id] = source.get(market_data_id)
            except KeyError:
                source_failures[market_data_id] = f"{market_data_id} not found in market data source"

        all_values = []
        all_failures = []
        for scenario in scenarios:
            perturbed: dict[MarketDataId, Any] = {}
            scenario_failures: dict[MarketDataId, str] = dict(source_failures)
            for market_data_id, value in baseline.items():
                try:
                    perturbed[market_data_id] = scenario.perturb(market_data_id, value)
                except Exception as exc:
                    scenario_failures[market_data_id] = (
                        f"scenario '{scenario.name}' could not perturb {market_data_id}: {exc}"
                    )

            values: dict[MarketDataRequirement, Any] = {}
            failures: dict[MarketDataRequirement, str] = dict(rule_failures)
            for requirement, market_data_id in ids.items():
                if market_data_id in perturbed:
                    values[requirement] = perturbed[market_data_id]
                else:
                    failures[requirement] = scenario_failures[market_data_id]
            all_values.append(values)
            all_failures.append(failures)

        result = ScenarioMarketData(
            valuation_dates=[s.valuation_date or base_date for s in scenarios],
            values=all_values,
            failures=all_failures,
            scenario_names=[s.name for s in scenarios],
        )
        for requirement, reason in result.failures.items():
            logger.warning("market_data_unresolved", requirement=str(requirement), reason=reason)
        logger.debug(
            "market_data_resolved",
            requirements=len(ids) + len(rule_failures),
            ids=len(baseline),
            scenarios=len(scenarios),
        )
        return result
