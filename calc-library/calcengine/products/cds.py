"""Single-name CDS product (data only; measures via the registry)."""

from __future__ import annotations

from dataclasses import dataclass

from calcengine.products.common import validate_pay_times


@dataclass(frozen=True)
class Cds:
    """
    Single-name credit default swap (protection buyer convention by default).

    Premium leg: fixed spread on surviving notional. Protection leg: loss given
    default on default. Discounting uses the currency's discount curve and
    survival probabilities come from the credit curve of `reference_entity`.
    """

    reference_entity: str
    currency: str
    notional: float
    premium_rate: float
    pay_times: tuple[float, ...]
    recovery: float = 0.4
    t0: float = 0.0
    protection_buyer: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "pay_times", tuple(self.pay_times))
        validate_pay_times(self.pay_times, self.t0)
        if not 0.0 <= self.recovery < 1.0:
            raise ValueError("recovery must be in [0, 1)")
