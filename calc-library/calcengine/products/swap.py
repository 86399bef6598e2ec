"""Fixed-float interest rate swap (data only; measures via the registry)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from calcengine.products.common import validate_pay_times


@dataclass(frozen=True)
class FixedFloatSwap:
    """
    Fixed vs Ibor-style float swap on one payment schedule.

    - Float leg forwards are projected from the forward curve of `index` and
      discounted on the discount curve of `currency`.
    - `pay_fixed=True`: pay fixed, receive float + spread.
    - Periods are [t0, pay_times[0]], [pay_times[0], pay_times[1]], ...
      A period whose start is before the valuation date uses the
      historical fixing of `index` on `first_fixing_date`.
    - Periods already paid (pay time <= 0) are ignored.
    """

    currency: str
    index: str
    notional: float
    fixed_rate: float
    pay_times: tuple[float, ...]
    t0: float = 0.0
    spread: float = 0.0
    pay_fixed: bool = True
    first_fixing_date: Optional[date] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "pay_times", tuple(self.pay_times))
        validate_pay_times(self.pay_times, self.t0)
        if self.needs_fixing() and self.first_fixing_date is None:
            raise ValueError("a swap that started before valuation needs first_fixing_date")

    @property
    def fixed_sign(self) -> float:
        return -1.0 if self.pay_fixed else 1.0

    def periods(self) -> list[tuple[float, float]]:
        """(start, end) of every period still to be paid."""
        out = []
        prev = self.t0
        for t in self.pay_times:
            if t > 0:
                out.append((prev, t))
            prev = t
        return out

    def needs_fixing(self) -> bool:
        """True when a remaining period started before the valuation date."""
        return any(start < 0 for start, _ in self.periods())
