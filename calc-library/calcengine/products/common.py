"""Flags shared by product definitions."""

from enum import Enum


class BuySell(Enum):
    """BUY lends / receives the final payment; SELL borrows."""

    BUY = 1
    SELL = -1

    @property
    def sign(self) -> float:
        return float(self.value)


def validate_pay_times(pay_times: tuple[float, ...], t0: float) -> None:
    """Payment times must be non-empty, strictly increasing and after t0."""
    if not pay_times:
        raise ValueError("pay_times must not be empty")
    prev = t0
    for t in pay_times:
        if t <= prev:
            raise ValueError("pay_times must be strictly increasing and after t0")
        prev = t
