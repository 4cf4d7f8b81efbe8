from dataclasses import dataclass
from decimal import Decimal

from phm.services.quote_totals import calculate_quote_totals, line_total, qmoney


@dataclass
class Line:
    quantity: int
    unit_price: Decimal
    discount: Decimal = Decimal("0")


def test_line_total_is_quantity_times_price_minus_discount():
    assert line_total(3, Decimal("19.99"), Decimal("5")) == Decimal("54.97")


def test_discount_larger_than_line_goes_negative():
    # no clamping: the negative line reduces the subtotal
    assert line_total(1, Decimal("10"), Decimal("25")) == Decimal("-15")

    totals = calculate_quote_totals(
        [Line(1, Decimal("100")), Line(1, Decimal("10"), Decimal("25"))],
        Decimal("20"),
    ).rounded()
    assert totals.subtotal == Decimal("85.00")
    assert totals.tax_amount == Decimal("17.00")
    assert totals.total == Decimal("102.00")


def test_boiler_install_quote_totals():
    lines = [Line(1, Decimal("1200"))]
    totals = calculate_quote_totals(lines, 20).rounded()
    assert (totals.subtotal, totals.tax_amount, totals.total) == (
        Decimal("1200.00"),
        Decimal("240.00"),
        Decimal("1440.00"),
    )


def test_rounding_happens_once_at_the_end():
    # 3 x 0.335 = 1.005 -> tax 0.201 -> total 1.206; rounding per line would drift
    totals = calculate_quote_totals([Line(3, Decimal("0.335"))], Decimal("20"))
    assert totals.subtotal == Decimal("1.005")
    rounded = totals.rounded()
    assert rounded.subtotal == Decimal("1.01")
    assert rounded.tax_amount == Decimal("0.20")
    assert rounded.total == Decimal("1.21")


def test_qmoney_rounds_half_up():
    assert qmoney(Decimal("2.675")) == Decimal("2.68")
    assert qmoney(Decimal("-2.675")) == Decimal("-2.68")


def test_empty_quote_is_zero():
    totals = calculate_quote_totals([], Decimal("20")).rounded()
    assert totals.total == Decimal("0.00")


def test_float_inputs_do_not_leak_binary_noise():
    assert line_total(1, 0.1, 0) + line_total(1, 0.2, 0) == Decimal("0.3")
