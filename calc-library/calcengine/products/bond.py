"""Fixed coupon bond: security definition (reference data) and position (trade payload)."""

from __future__ import annotations

from dataclasses import dataclass

from calcengine.products.common import validate_pay_times
from calcengine.refdata import ReferenceData, SecurityId


@dataclass(frozen=True)
class FixedCouponBondSecurity:
    """
    Static definition of a fixed coupon bond, held in ReferenceData.

    Coupons of `notional * coupon_rate * accrual` at each pay time, notional
    repaid at the last pay time. `issuer` selects the issuer and repo curves.
    """

    security_id: SecurityId
    currency: str
    issuer: str
    notional: float
    coupon_rate: float
    pay_times: tuple[float, ...]
    t0: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "pay_times", tuple(self.pay_times))
        validate_pay_times(self.pay_times, self.t0)
        if self.notional <= 0:
            raise ValueError("notional must be > 0")

    def cash_flows(self) -> list[tuple[float, float]]:
        """(payment time, amount) per unit quantity, including past payments."""
        flows = []
        prev = self.t0
        for t in self.pay_times:
            flows.append((t, self.notional * self.coupon_rate * (t - prev)))
            prev = t
        last_t, last_amount = flows[-1]
        flows[-1] = (last_t, last_amount + self.notional)
        return flows


@dataclass(frozen=True)
class FixedCouponBondPosition:
    """A quantity of a bond security; the security is looked up in reference data."""

    security_id: SecurityId
    quantity: float

    def security(self, ref_data: ReferenceData) -> FixedCouponBondSecurity:
        security = ref_data.get(self.security_id)
        if not isinstance(security, FixedCouponBondSecurity):
            raise ValueError(f"{self.security_id} is not a fixed coupon bond security")
        return security
