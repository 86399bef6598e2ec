"""
Market data rules: map abstract requirement keys to concrete identifiers.

Rules form an ordered chain. Each rule may claim a requirement; the first rule
in priority order that claims it decides the concrete MarketDataId. Overlapping
claims are not diagnosed: the earlier rule silently wins. A requirement that no
rule claims raises MissingMarketDataRuleError naming the key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Protocol

from calcengine.errors import MissingMarketDataRuleError
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


class MarketDataRule(Protocol):
    """A rule that can map some requirements to concrete ids."""

    def resolve(self, requirement: MarketDataRequirement) -> Optional[MarketDataId]:
        """Return the id for a claimed requirement, or None if not claimed."""
        ...


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class CurveGroupRule:
    """
    A named curve group: which curve plays which role.

    - `discount_curves`: currency -> curve name
    - `forward_curves`: index -> curve name
    - `issuer_curves` / `repo_curves`: (issuer, currency) -> curve name
    - `credit_curves`: (reference entity, currency) -> curve name

    Issuer and repo curves resolve to IssuerCurveId within the group, all other
    roles to CurveId.
    """

    group: str
    discount_curves: Mapping[str, str] = field(default_factory=dict)
    forward_curves: Mapping[str, str] = field(default_factory=dict)
    issuer_curves: Mapping[tuple[str, str], str] = field(default_factory=dict)
    repo_curves: Mapping[tuple[str, str], str] = field(default_factory=dict)
    credit_curves: Mapping[tuple[str, str], str] = field(default_factory=dict)
    source: str = ""

    def __post_init__(self) -> None:
        if not self.group:
            raise ValueError("curve group name must not be empty")
        for name in ("discount_curves", "forward_curves", "issuer_curves", "repo_curves", "credit_curves"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    def __hash__(self) -> int:
        return hash((self.group, self.source))

    def resolve(self, requirement: MarketDataRequirement) -> Optional[MarketDataId]:
        if isinstance(requirement, DiscountCurveKey):
            name = self.discount_curves.get(requirement.currency)
            return CurveId(self.group, name) if name else None
        if isinstance(requirement, ForwardCurveKey):
            name = self.forward_curves.get(requirement.index)
            return CurveId(self.group, name) if name else None
        if isinstance(requirement, IssuerCurveKey):
            name = self.issuer_curves.get((requirement.issuer, requirement.currency))
            return IssuerCurveId(self.group, name, self.source) if name else None
        if isinstance(requirement, RepoCurveKey):
            name = self.repo_curves.get((requirement.issuer, requirement.currency))
            return IssuerCurveId(self.group, name, self.source) if name else None
        if isinstance(requirement, CreditCurveKey):
            name = self.credit_curves.get((requirement.reference_entity, requirement.currency))
            return CurveId(self.group, name) if name else None
        return None


@dataclass(frozen=True)
class FxRateRule:
    """Claims every FX requirement, reading rates from one source."""

    source: str = ""

    def resolve(self, requirement: MarketDataRequirement) -> Optional[MarketDataId]:
        if isinstance(requirement, FxRateKey):
            return FxRateId(requirement.pair, self.source)
        return None


@dataclass(frozen=True)
class TimeSeriesRule:
    """Claims index fixing requirements, optionally restricted to some indices."""

    source: str = ""
    indices: Optional[frozenset[str]] = None

    def resolve(self, requirement: MarketDataRequirement) -> Optional[MarketDataId]:
        if not isinstance(requirement, IndexFixingsKey):
            return None
        if self.indices is not None and requirement.index not in self.indices:
            return None
        return TimeSeriesId(requirement.index, self.source)


@dataclass(frozen=True)
class VolatilityRule:
    """index -> name of the volatilities held in the source."""

    volatilities: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "volatilities", _frozen(self.volatilities))

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.volatilities.items())))

    def resolve(self, requirement: MarketDataRequirement) -> Optional[MarketDataId]:
        if isinstance(requirement, VolatilitiesKey):
            name = self.volatilities.get(requirement.index)
            return VolatilitiesId(name) if name else None
        return None


@dataclass(frozen=True)
class ExplicitRule:
    """Fixed requirement -> id mapping, usually placed first to override a group."""

    mappings: Mapping[MarketDataRequirement, MarketDataId] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "mappings", _frozen(self.mappings))

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.mappings.items(), key=lambda kv: kv[0].sort_key())))

    def resolve(self, requirement: MarketDataRequirement) -> Optional[MarketDataId]:
        return self.mappings.get(requirement)


class MarketDataRules:
    """Ordered rule chain with first-match-wins resolution."""

    def __init__(self, rules: Iterable[MarketDataRule] = ()) -> None:
        self._rules: tuple[MarketDataRule, ...] = tuple(rules)

    @classmethod
    def of(cls, *rules: MarketDataRule) -> MarketDataRules:
        return cls(rules)

    @classmethod
    def empty(cls) -> MarketDataRules:
        return cls()

    @property
    def rules(self) -> tuple[MarketDataRule, ...]:
        return self._rules

    def find(self, requirement: MarketDataRequirement) -> Optional[MarketDataId]:
        for rule in self._rules:
            market_data_id = rule.resolve(requirement)
            if market_data_id is not None:
                return market_data_id
        return None

    def resolve(self, requirement: MarketDataRequirement) -> MarketDataId:
        """Return the concrete id. Raises MissingMarketDataRuleError if unclaimed."""
        market_data_id = self.find(requirement)
        if market_data_id is None:
            raise MissingMarketDataRuleError(requirement)
        return market_data_id

    def combined_with(self, other: MarketDataRules) -> MarketDataRules:
        """New chain: these rules first, then `other`'s."""
        return MarketDataRules(self._rules + other.rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"MarketDataRules({len(self._rules)} rules)"
