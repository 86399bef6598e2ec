"""Tests for the measure registry."""

from dataclasses import dataclass

import pytest

from calcengine import Measure, MeasureRegistry, Measures, create_default_registry
from calcengine.errors import RegistryFrozenError, UnsupportedMeasureError
from calcengine.functions.deposit import TermDepositPresentValue
from calcengine.products import Cds, FixedFloatSwap, FxForward, TermDeposit


def test_register_and_lookup() -> None:
    registry = MeasureRegistry()
    function = TermDepositPresentValue()
    registry.register(TermDeposit, Measures.PRESENT_VALUE, function)
    assert registry.lookup(TermDeposit, Measures.PRESENT_VALUE) is function
    assert registry.supports(TermDeposit, Measures.PRESENT_VALUE)
    assert not registry.supports(TermDeposit, Measures.PV01)
    assert len(registry) == 1


def test_lookup_unsupported_raises() -> None:
    registry = MeasureRegistry()
    with pytest.raises(UnsupportedMeasureError, match="PV01.*TermDeposit"):
        registry.lookup(TermDeposit, Measures.PV01)


def test_lookup_is_exact_on_product_type() -> None:
    """A subclass of a registered product is not priced by its parent's functions."""

    @dataclass(frozen=True)
    class SpecialDeposit(TermDeposit):
        pass

    registry = MeasureRegistry()
    registry.register(TermDeposit, Measures.PRESENT_VALUE, TermDepositPresentValue())
    assert not registry.supports(SpecialDeposit, Measures.PRESENT_VALUE)
    with pytest.raises(UnsupportedMeasureError):
        registry.lookup(SpecialDeposit, Measures.PRESENT_VALUE)


def test_re_registration_replaces() -> None:
    registry = MeasureRegistry()
    first, second = TermDepositPresentValue(), TermDepositPresentValue()
    registry.register(TermDeposit, Measures.PRESENT_VALUE, first)
    registry.register(TermDeposit, Measures.PRESENT_VALUE, second)
    assert registry.lookup(TermDeposit, Measures.PRESENT_VALUE) is second
    assert len(registry) == 1


def test_frozen_registry_rejects_registration() -> None:
    registry = MeasureRegistry().freeze()
    assert registry.frozen
    with pytest.raises(RegistryFrozenError) as exc_info:
        registry.register(TermDeposit, Measures.PRESENT_VALUE, TermDepositPresentValue())
    assert exc_info.value.context == {"product_type": "TermDeposit", "measure": "PresentValue"}


def test_default_registry_contents() -> None:
    registry = create_default_registry()
    assert registry.frozen
    assert {TermDeposit, FixedFloatSwap, FxForward, Cds} <= registry.product_types()
    assert Measures.PAR_RATE in registry.supported_measures(TermDeposit)
    assert Measures.FX_DELTA in registry.supported_measures(FxForward)
    assert Measures.CS01 in registry.supported_measures(Cds)
    assert not registry.supports(FxForward, Measures.PAR_RATE)


def test_copy_of_default_registry_is_extensible() -> None:
    """New measures are added by registration on an unfrozen copy."""
    custom = Measure("Notional")
    registry = create_default_registry().copy()
    registry.register(TermDeposit, custom, TermDepositPresentValue())
    assert registry.supports(TermDeposit, custom)
    assert not create_default_registry().supports(TermDeposit, custom)


def test_measures_lookup() -> None:
    assert Measures.of("presentvalue") is Measures.PRESENT_VALUE
    assert Measures.PV01 in Measures.standard()
    with pytest.raises(ValueError, match="unknown measure"):
        Measures.of("Gamma")
    with pytest.raises(ValueError):
        Measure(" ")
