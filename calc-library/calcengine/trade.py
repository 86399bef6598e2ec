"""
Trades: immutable wrappers of a product payload plus trade metadata.

Products are **data only**; what can be calculated for a product is decided
by the MeasureRegistry keyed on the product's concrete type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class TradeInfo:
    """Trade metadata: identifier, counterparty, dates and free-form attributes."""

    id: str
    counterparty: Optional[str] = None
    trade_date: Optional[date] = None
    settlement_date: Optional[date] = None
    attributes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("trade id must not be empty")
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def __hash__(self) -> int:
        return hash((self.id, self.counterparty, self.trade_date, self.settlement_date))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TradeInfo):
            return NotImplemented
        return (
            self.id == other.id
            and self.counterparty == other.counterparty
            and self.trade_date == other.trade_date
            and self.settlement_date == other.settlement_date
            and dict(self.attributes) == dict(other.attributes)
        )


@dataclass(frozen=True)
class Trade:
    """A financial transaction: trade info plus a product payload."""

    info: TradeInfo
    product: Any

    @classmethod
    def of(cls, trade_id: str, product: Any, **info: Any) -> Trade:
        return cls(info=TradeInfo(id=trade_id, **info), product=product)

    @property
    def id(self) -> str:
        return self.info.id

    @property
    def product_type(self) -> type:
        return type(self.product)
