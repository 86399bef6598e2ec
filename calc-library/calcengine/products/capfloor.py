"""Ibor caplet / floorlet (data only; measures via the registry)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IborCapletFloorlet:
    """
    Option on one Ibor fixing: pays notional * accrual * max(F - K, 0) (caplet)
    or max(K - F, 0) (floorlet) at `end`, where F fixes at `fixing_time` for
    the period [start, end].
    """

    currency: str
    index: str
    notional: float
    strike: float
    fixing_time: float
    start: float
    end: float
    is_cap: bool = True

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError("end must be after start")
        if self.fixing_time > self.start:
            raise ValueError("fixing_time must not be after start")
        if self.strike <= 0:
            raise ValueError("strike must be > 0 for the Black model")

    @property
    def accrual(self) -> float:
        return self.end - self.start
