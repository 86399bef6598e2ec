"""
Reference data: static, market-data independent lookups.

ReferenceData is an explicit, injected, read-only context. The process-wide
`ReferenceData.standard()` instance is built once on first use and reused by
every run until `ReferenceData.refresh_standard()` is called.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date, timedelta
from types import MappingProxyType
from typing import Any, ClassVar, Iterable, Mapping, Optional

from calcengine.errors import ReferenceDataNotFoundError


@dataclass(frozen=True, order=True)
class HolidayCalendarId:
    name: str

    def __str__(self) -> str:
        return f"HolidayCalendarId:{self.name}"


@dataclass(frozen=True, order=True)
class SecurityId:
    scheme: str
    value: str

    def __str__(self) -> str:
        return f"{self.scheme}~{self.value}"


@dataclass(frozen=True)
class HolidayCalendar:
    """Weekend days (Monday=0) plus explicit holiday dates."""

    name: str
    holidays: frozenset[date] = frozenset()
    weekend_days: frozenset[int] = frozenset({5, 6})

    def is_business_day(self, day: date) -> bool:
        return day.weekday() not in self.weekend_days and day not in self.holidays

    def next_or_same(self, day: date) -> date:
        while not self.is_business_day(day):
            day += timedelta(days=1)
        return day


# Weekend-only calendars; holiday lists belong to the reference data provider
STANDARD_CALENDARS = ("GBLO", "USNY", "EUTA", "JPTO")


def _build_standard() -> dict[Any, Any]:
    return {
        HolidayCalendarId(name): HolidayCalendar(name=name)
        for name in STANDARD_CALENDARS
    }


@dataclass(frozen=True)
class ReferenceData:
    """Immutable mapping of identifier -> reference data value."""

    values: Mapping[Any, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    _standard: ClassVar[Optional["ReferenceData"]] = None
    _standard_lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def of(cls, values: Mapping[Any, Any]) -> ReferenceData:
        return cls(values=values)

    @classmethod
    def empty(cls) -> ReferenceData:
        return cls()

    @classmethod
    def standard(cls) -> ReferenceData:
        """Process-wide standard reference data, populated once."""
        with cls._standard_lock:
            if ReferenceData._standard is None:
                ReferenceData._standard = cls(values=_build_standard())
            return ReferenceData._standard

    @classmethod
    def refresh_standard(cls) -> ReferenceData:
        """Rebuild the process-wide standard instance."""
        with cls._standard_lock:
            ReferenceData._standard = cls(values=_build_standard())
            return ReferenceData._standard

    def contains(self, identifier: Any) -> bool:
        return identifier in self.values

    def get(self, identifier: Any) -> Any:
        try:
            return self.values[identifier]
        except KeyError:
            raise ReferenceDataNotFoundError(identifier) from None

    def find(self, identifier: Any) -> Optional[Any]:
        return self.values.get(identifier)

    def identifiers(self) -> Iterable[Any]:
        return self.values.keys()

    def holiday_calendar(self, name: str) -> HolidayCalendar:
        return self.get(HolidayCalendarId(name))

    def combined_with(self, other: ReferenceData) -> ReferenceData:
        """New instance holding both; `self` wins on conflicting identifiers."""
        merged = dict(other.values)
        merged.update(self.values)
        return ReferenceData(values=merged)
