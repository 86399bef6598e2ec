"""
Measure registry: which calculation function computes which measure for which product.

Design intent:
- Products are **data only** (no market access, no pricing methods).
- Dispatch is a table keyed by (product class, measure). Lookup is exact: a
  subclass of a registered product is not priced by its parent's functions
  unless registered itself.
- New products and measures are added by registration, without touching the
  runner.
- The registry is read-mostly: once frozen it can be shared by concurrent
  runs without locking.
"""

from __future__ import annotations

from typing import Mapping

from calcengine.errors import RegistryFrozenError, UnsupportedMeasureError
from calcengine.interfaces import CalculationFunction
from calcengine.measures import Measure


class MeasureRegistry:
    """Registration table of calculation functions."""

    def __init__(self) -> None:
        self._functions: dict[tuple[type, Measure], CalculationFunction] = {}
        self._frozen = False

    def register(self, product_type: type, measure: Measure, function: CalculationFunction) -> None:
        """Register a function for (product_type, measure), replacing any previous one."""
        if self._frozen:
            raise RegistryFrozenError(
                "Cannot register functions on a frozen registry",
                context={"product_type": product_type.__name__, "measure": str(measure)},
            )
        self._functions[(product_type, measure)] = function

    def register_all(self, product_type: type, functions: Mapping[Measure, CalculationFunction]) -> None:
        for measure, function in functions.items():
            self.register(product_type, measure, function)

    def lookup(self, product_type: type, measure: Measure) -> CalculationFunction:
        """Return the function. Raises UnsupportedMeasureError if none is registered."""
        try:
            return self._functions[(product_type, measure)]
        except KeyError:
            raise UnsupportedMeasureError(product_type, measure) from None

    def supports(self, product_type: type, measure: Measure) -> bool:
        return (product_type, measure) in self._functions

    def supported_measures(self, product_type: type) -> frozenset[Measure]:
        return frozenset(m for (p, m) in self._functions if p is product_type)

    def product_types(self) -> frozenset[type]:
        return frozenset(p for (p, _) in self._functions)

    def freeze(self) -> MeasureRegistry:
        """Make the registry immutable; returns self for chaining."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def copy(self) -> MeasureRegistry:
        """Unfrozen copy, e.g. to extend the default registry."""
        registry = MeasureRegistry()
        registry._functions = dict(self._functions)
        return registry

    def __len__(self) -> int:
        return len(self._functions)


def create_default_registry() -> MeasureRegistry:
    """Factory for a frozen registry with all built-in functions registered."""
    from calcengine.functions import (
        bond_functions,
        caplet_functions,
        cds_functions,
        fx_forward_functions,
        swap_functions,
        term_deposit_functions,
    )
    from calcengine.products import (
        Cds,
        FixedCouponBondPosition,
        FixedFloatSwap,
        FxForward,
        IborCapletFloorlet,
        TermDeposit,
    )

    registry = MeasureRegistry()
    registry.register_all(TermDeposit, term_deposit_functions())
    registry.register_all(FixedFloatSwap, swap_functions())
    registry.register_all(FixedCouponBondPosition, bond_functions())
    registry.register_all(FxForward, fx_forward_functions())
    registry.register_all(IborCapletFloorlet, caplet_functions())
    registry.register_all(Cds, cds_functions())
    return registry.freeze()
