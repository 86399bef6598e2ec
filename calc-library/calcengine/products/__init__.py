"""Products: term deposit, swap, fixed coupon bond, FX forward, caplet/floorlet, CDS."""

from calcengine.products.bond import FixedCouponBondPosition, FixedCouponBondSecurity
from calcengine.products.capfloor import IborCapletFloorlet
from calcengine.products.cds import Cds
from calcengine.products.common import BuySell
from calcengine.products.deposit import TermDeposit
from calcengine.products.fx import FxForward
from calcengine.products.swap import FixedFloatSwap

__all__ = [
    "BuySell",
    "Cds",
    "FixedCouponBondPosition",
    "FixedCouponBondSecurity",
    "FixedFloatSwap",
    "FxForward",
    "IborCapletFloorlet",
    "TermDeposit",
]
