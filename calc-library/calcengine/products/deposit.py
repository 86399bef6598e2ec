"""Term deposit product (data only; measures via the registry)."""

from dataclasses import dataclass

from calcengine.products.common import BuySell


@dataclass(frozen=True)
class TermDeposit:
    """
    Fixed-rate deposit: notional exchanged at `start`, notional plus interest
    returned at `end`. Accrual is `end - start` (year fractions).

    BUY = lend (pay at start, receive at end); SELL = borrow.
    """

    currency: str
    notional: float
    rate: float
    start: float
    end: float
    buy_sell: BuySell = BuySell.BUY

    def __post_init__(self) -> None:
        if self.notional < 0:
            raise ValueError("notional must be >= 0")
        if self.end <= self.start:
            raise ValueError("end must be after start")

    @property
    def accrual(self) -> float:
        return self.end - self.start

    @property
    def final_payment(self) -> float:
        """Notional plus interest paid at end, signed from the trade's perspective."""
        return self.buy_sell.sign * self.notional * (1.0 + self.rate * self.accrual)

    @property
    def initial_payment(self) -> float:
        """Notional exchanged at start, signed from the trade's perspective."""
        return -self.buy_sell.sign * self.notional
