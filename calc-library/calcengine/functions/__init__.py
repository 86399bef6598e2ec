"""Built-in calculation functions, one per (product type, measure)."""

from calcengine.functions.base import BaseCalculationFunction
from calcengine.functions.bond import BondPricer, bond_functions
from calcengine.functions.capfloor import CapletPricer, black_price, caplet_functions
from calcengine.functions.cds import CdsPricer, cds_functions
from calcengine.functions.deposit import TermDepositPricer, term_deposit_functions
from calcengine.functions.fx import FxForwardPricer, fx_forward_functions
from calcengine.functions.swap import SwapPricer, swap_functions

__all__ = [
    "BaseCalculationFunction",
    "BondPricer",
    "CapletPricer",
    "CdsPricer",
    "FxForwardPricer",
    "SwapPricer",
    "TermDepositPricer",
    "black_price",
    "bond_functions",
    "caplet_functions",
    "cds_functions",
    "fx_forward_functions",
    "swap_functions",
    "term_deposit_functions",
]
