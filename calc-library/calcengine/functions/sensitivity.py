"""
Bump-and-reprice sensitivities shared by the product functions.

Each curve the trade depends on is shifted on its own and the trade repriced
against a derived MarketDataView; the scenario data itself is untouched.
PV01 is PV(shifted) - PV(base) for an additive shift of `shift_bp` basis
points (1bp = 0.0001 in zero rate).
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from calcengine.marketdata.keys import CURVE_KEY_TYPES, MarketDataRequirement
from calcengine.marketdata.scenario_data import MarketDataView
from calcengine.values import CurveSensitivities, CurveSensitivity

ONE_BASIS_POINT = 1e-4
DEFAULT_SHIFT_BP = 1.0

PresentValueFn = Callable[[MarketDataView], float]


def shift_size(parameters: Mapping[str, Any]) -> float:
    """Shift in rate units from the `shift_bp` calculation parameter."""
    shift_bp = float(parameters.get("shift_bp", DEFAULT_SHIFT_BP))
    if shift_bp == 0:
        raise ValueError("shift_bp must be non-zero")
    return shift_bp * ONE_BASIS_POINT


def curve_keys(keys: Iterable[MarketDataRequirement]) -> list[MarketDataRequirement]:
    """Curve requirements only, in deterministic order."""
    return sorted((k for k in keys if isinstance(k, CURVE_KEY_TYPES)), key=lambda k: k.sort_key())


def parallel_pv01(
    pv: PresentValueFn,
    market: MarketDataView,
    keys: Iterable[MarketDataRequirement],
    shift: float,
) -> float:
    """Sum over curves of PV(curve shifted in parallel) - PV(base)."""
    base = pv(market)
    total = 0.0
    for key in curve_keys(keys):
        bumped = market.with_value(key, market.curve(key).bumped(shift))
        total += pv(bumped) - base
    return total


def bucketed_pv01(
    pv: PresentValueFn,
    market: MarketDataView,
    keys: Iterable[MarketDataRequirement],
    shift: float,
    currency: str,
) -> CurveSensitivities:
    """
    PV change per curve pillar.

    Keys bound to the same curve (e.g. one curve used for discounting and
    forwarding) are summed into a single entry.
    """
    base = pv(market)
    by_curve: dict[str, CurveSensitivity] = {}
    for key in curve_keys(keys):
        curve = market.curve(key)
        deltas = tuple(
            pv(market.with_value(key, curve.bumped_at(i, shift))) - base
            for i in range(len(curve.pillars))
        )
        existing = by_curve.get(curve.name)
        if existing is not None:
            deltas = tuple(a + b for a, b in zip(existing.sensitivities, deltas))
        by_curve[curve.name] = CurveSensitivity(curve.name, currency, curve.pillars, deltas)
    return CurveSensitivities.of(list(by_curve.values()))
