"""FX forward product (data only; measures via the registry)."""

from dataclasses import dataclass

from calcengine.currency import CurrencyPair


@dataclass(frozen=True)
class FxForward:
    """
    FX forward: buy `notional_base` of pair.base at `strike` (counter per base),
    settling at `maturity`.

    Valuation uses covered interest rate parity with the discount curves of
    both currencies: F = spot * DF_base(T) / DF_counter(T), and
    PV (counter currency) = notional_base * DF_counter(T) * (F - strike).
    """

    pair: CurrencyPair
    notional_base: float
    strike: float
    maturity: float

    def __post_init__(self) -> None:
        if self.pair.is_identity():
            raise ValueError("FX forward needs two distinct currencies")
        if self.maturity < 0:
            raise ValueError("maturity must be >= 0")
        if self.strike <= 0:
            raise ValueError("strike must be > 0")
