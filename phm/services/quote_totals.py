# phm/services/quote_totals.py
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol, Union

MONEY = Decimal("0.01")
HUNDRED = Decimal("100")

Number = Union[Decimal, int, float, str]


def qmoney(x: Decimal) -> Decimal:
    return Decimal(x).quantize(MONEY, rounding=ROUND_HALF_UP)


def _dec(x: Number) -> Decimal:
    # str() first so floats like 0.1 don't drag binary noise in
    return x if isinstance(x, Decimal) else Decimal(str(x))


class PricedLine(Protocol):
    quantity: int
    unit_price: Decimal
    discount: Decimal


@dataclass(frozen=True)
class QuoteTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal

    def rounded(self) -> "QuoteTotals":
        return QuoteTotals(qmoney(self.subtotal), qmoney(self.tax_amount), qmoney(self.total))


def line_total(quantity: Number, unit_price: Number, discount: Number = 0) -> Decimal:
    """quantity x unit price minus discount. Not clamped: a big discount gives a negative line."""
    return _dec(quantity) * _dec(unit_price) - _dec(discount)


def calculate_quote_totals(lines: Iterable[PricedLine], tax_rate: Number) -> QuoteTotals:
    subtotal = sum(
        (line_total(l.quantity, l.unit_price, l.discount) for l in lines),
        Decimal("0"),
    )
    tax_amount = subtotal * _dec(tax_rate) / HUNDRED
    return QuoteTotals(subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount)
