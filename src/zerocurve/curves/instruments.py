"""
Curve instruments for bootstrapping.

Defines the inputs used to build yield curves:
- InstrumentKind: money market deposit or par swap
- InstrumentQuote: kind, tenor and quoted rate
- FixedLegSchedule: fixed leg cash flows of a par swap node

So that the floating leg can be valued at 1.0 rather than the textbook
1 - P(T), the final fixed payment carries the notional: its amount is
1 + rate * accrual instead of rate * accrual. The two are financially
equivalent.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterator, List, Mapping, Tuple, Union

from ..dates import Tenor
from ..exceptions import ConfigurationError


class InstrumentKind(Enum):
    """Type of curve instrument."""
    MONEY_MARKET = "MoneyMarket"
    SWAP = "Swap"
    
    @classmethod
    def from_string(cls, s: str) -> "InstrumentKind":
        """Parse instrument kind from string representation."""
        mapping = {
            "MONEYMARKET": cls.MONEY_MARKET,
            "MM": cls.MONEY_MARKET,
            "DEPOSIT": cls.MONEY_MARKET,
            "SWAP": cls.SWAP,
            "IRS": cls.SWAP,
        }
        key = s.upper().replace(" ", "").replace("_", "")
        if key in mapping:
            return mapping[key]
        raise ConfigurationError(f"Unknown instrument kind: {s}")


@dataclass(frozen=True)
class InstrumentQuote:
    """
    Market quote for a curve instrument.
    
    Attributes:
        kind: Money market or swap
        tenor: Instrument tenor (e.g., "3M", "2Y")
        rate: Quoted rate in decimal (simple rate for deposits, par rate for swaps)
    """
    kind: InstrumentKind
    tenor: str
    rate: float
    
    @classmethod
    def from_dict(cls, d: Mapping) -> "InstrumentQuote":
        """
        Build from a dict with keys kind, tenor and rate.
        
        Example:
            {"kind": "MM", "tenor": "1M", "rate": 0.01}
        """
        try:
            kind = d["kind"]
            tenor = d["tenor"]
            rate = float(d["rate"])
        except KeyError as e:
            raise ConfigurationError(f"Quote missing field {e}: {dict(d)}") from e
        if not isinstance(kind, InstrumentKind):
            kind = InstrumentKind.from_string(str(kind))
        return cls(kind=kind, tenor=str(tenor), rate=rate)


@dataclass(frozen=True)
class FixedLegPayment:
    """One fixed leg period: payment date, curve time and accrual fraction."""
    payment_date: date
    payment_time: float
    accrual_fraction: float


class FixedLegSchedule:
    """
    Fixed leg of a par swap used to calibrate a curve node.
    
    Payments are in chronological order; the last payment includes the
    notional (see module docstring).
    """
    
    def __init__(self, payments: List[FixedLegPayment]):
        if not payments:
            raise ConfigurationError("Fixed leg needs at least one payment")
        self._payments = tuple(payments)
    
    @property
    def payments(self) -> Tuple[FixedLegPayment, ...]:
        return self._payments
    
    @property
    def number_of_payments(self) -> int:
        return len(self._payments)
    
    def payment_time(self, k: int) -> float:
        return self._payments[k].payment_time
    
    def accrual_fraction(self, k: int) -> float:
        return self._payments[k].accrual_fraction
    
    def amount(self, k: int, rate: float) -> float:
        """Cash flow k per unit notional for a fixed rate."""
        accrual = self._payments[k].accrual_fraction
        if k == len(self._payments) - 1:
            return 1.0 + rate * accrual
        return rate * accrual
    
    def annuity(self, curve) -> float:
        """Sum of accrual * P(0, t_k)."""
        return sum(p.accrual_fraction * curve.discount_factor(p.payment_time) for p in self._payments)
    
    def present_value(self, curve, rate: float) -> float:
        """Value of the fixed leg including the terminal notional."""
        return sum(
            self.amount(k, rate) * curve.discount_factor(p.payment_time)
            for k, p in enumerate(self._payments)
        )
    
    def par_rate(self, curve) -> float:
        """Fixed rate that values the swap at par against the curve."""
        final_df = curve.discount_factor(self._payments[-1].payment_time)
        return (1.0 - final_df) / self.annuity(curve)
    
    def __iter__(self) -> Iterator[FixedLegPayment]:
        return iter(self._payments)
    
    def __len__(self) -> int:
        return len(self._payments)


QuoteLike = Union[InstrumentQuote, Mapping]


def normalize_quotes(quotes: List[QuoteLike]) -> List[InstrumentQuote]:
    """Convert dict quotes to InstrumentQuote, validating tenors."""
    result = []
    for q in quotes:
        quote = q if isinstance(q, InstrumentQuote) else InstrumentQuote.from_dict(q)
        try:
            Tenor.parse(quote.tenor)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        result.append(quote)
    return result


__all__ = [
    "InstrumentKind",
    "InstrumentQuote",
    "FixedLegPayment",
    "FixedLegSchedule",
    "normalize_quotes",
]
