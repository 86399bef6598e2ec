"""Tests for currency value types."""

import pytest

from calcengine.currency import CurrencyAmount, CurrencyPair, MultiCurrencyAmount, validate_currency
from calcengine.interfaces import FxConvertible


def test_pair_parse_and_inverse() -> None:
    assert CurrencyPair.parse("EUR/USD") == CurrencyPair("EUR", "USD")
    assert CurrencyPair.parse("eurusd") == CurrencyPair("EUR", "USD")
    assert CurrencyPair("EUR", "USD").inverse() == CurrencyPair("USD", "EUR")
    assert str(CurrencyPair("EUR", "USD")) == "EUR/USD"
    assert CurrencyPair("USD", "USD").is_identity()


def test_invalid_codes_rejected() -> None:
    with pytest.raises(ValueError, match="invalid currency code"):
        validate_currency("usd")
    with pytest.raises(ValueError, match="invalid currency pair"):
        CurrencyPair.parse("EUR/US")
    with pytest.raises(ValueError):
        CurrencyAmount("DOLLARS", 1.0)


def test_amount_arithmetic() -> None:
    a = CurrencyAmount("USD", 100.0)
    assert a.plus(CurrencyAmount("USD", 50.0)) == CurrencyAmount("USD", 150.0)
    assert a.minus(CurrencyAmount("USD", 50.0)) == CurrencyAmount("USD", 50.0)
    with pytest.raises(ValueError, match="cannot add"):
        a.plus(CurrencyAmount("EUR", 1.0))


def test_amount_conversion() -> None:
    """fx(base, counter) is counter per base."""
    rates = {("EUR", "USD"): 1.1}
    eur = CurrencyAmount("EUR", 100.0)
    usd = eur.convert_to("USD", lambda b, c: rates[(b, c)])
    assert usd.currency == "USD"
    assert abs(usd.amount - 110.0) < 1e-12
    assert eur.convert_to("EUR", lambda b, c: 1 / 0) is eur


def test_multi_currency_amount_sums_by_currency() -> None:
    mca = MultiCurrencyAmount.of(
        CurrencyAmount("USD", 10.0),
        CurrencyAmount("EUR", 5.0),
        CurrencyAmount("USD", 2.5),
    )
    assert mca.currencies() == ("EUR", "USD")
    assert mca.amount("USD") == CurrencyAmount("USD", 12.5)
    assert mca.amount("GBP") == CurrencyAmount("GBP", 0.0)
    assert len(mca) == 2


def test_only_single_currency_values_are_convertible() -> None:
    assert isinstance(CurrencyAmount("USD", 1.0), FxConvertible)
    assert not isinstance(MultiCurrencyAmount.of(CurrencyAmount("USD", 1.0)), FxConvertible)
    assert not isinstance(1.0, FxConvertible)
