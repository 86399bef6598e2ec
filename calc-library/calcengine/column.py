"""Columns: one requested output per trade in the results grid."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from calcengine.currency import validate_currency
from calcengine.measures import Measure


@dataclass(frozen=True)
class Column:
    """
    A measure plus reporting configuration.

    - `name`: header used by reporting layers (defaults to the measure name).
    - `reporting_currency`: convert monetary results into this currency,
      overriding the rules' default.
    - `parameters`: per-column overrides passed to the calculation function,
      e.g. {"shift_bp": 10.0} for PV01.
    """

    measure: Measure
    name: Optional[str] = None
    reporting_currency: Optional[str] = None
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.reporting_currency is not None:
            validate_currency(self.reporting_currency)
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @classmethod
    def of(cls, measure: Measure, reporting_currency: Optional[str] = None, **parameters: Any) -> Column:
        return cls(measure=measure, reporting_currency=reporting_currency, parameters=parameters)

    @property
    def header(self) -> str:
        return self.name or self.measure.name

    def __hash__(self) -> int:
        return hash((self.measure, self.name, self.reporting_currency, tuple(sorted(self.parameters.items()))))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Column):
            return NotImplemented
        return (
            self.measure == other.measure
            and self.name == other.name
            and self.reporting_currency == other.reporting_currency
            and dict(self.parameters) == dict(other.parameters)
        )
