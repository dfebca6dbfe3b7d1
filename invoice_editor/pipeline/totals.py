"""Invoice total calculation: subtotal, tax amount and grand total."""

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Iterable

from ..models.invoice_totals import InvoiceTotals
from ..models.line_item import LineItem

_CENT = Decimal("0.01")
# Wide enough for any finite float quantized to cents
_WIDE_CONTEXT = Context(prec=400)


def compute_totals(items: Iterable[LineItem], tax_rate: float) -> InvoiceTotals:
    """Compute subtotal, tax amount and total for a set of line items.

    Plain float arithmetic, summed left to right from 0:
        subtotal   = sum(quantity * price)
        tax_amount = subtotal * (tax_rate / 100)
        total      = subtotal + tax_amount

    Pure and uncached; call it again after every change to items or tax rate.
    Rounding to cents happens only when values are displayed (format_currency).

    Args:
        items: Line items in display order
        tax_rate: Tax rate in percent (8 means 8%)

    Returns:
        InvoiceTotals with the three derived values
    """
    subtotal = 0.0
    for item in items:
        subtotal = subtotal + item.quantity * item.price
    tax_amount = subtotal * (tax_rate / 100)
    total = subtotal + tax_amount
    return InvoiceTotals(subtotal=subtotal, tax_amount=tax_amount, total=total)


def format_amount(value: float) -> str:
    """Two decimals, no currency symbol ("1242.00").

    Halves round away from zero on the exact binary value (2.625 -> "2.63"),
    and a negative zero prints as "0.00".
    """
    if not math.isfinite(value):
        return f"{value:.2f}"
    if value == 0:
        value = 0.0
    return str(Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP, context=_WIDE_CONTEXT))


def format_currency(value: float, symbol: str = "$") -> str:
    """Two decimals with currency symbol prefix ("$1242.00")."""
    return f"{symbol}{format_amount(value)}"


def format_number(value: float) -> str:
    """Plain number the way it is typed: 8.0 -> "8", 7.5 -> "7.5", 1000000.0 -> "1000000".

    Used for quantities and the tax rate, which are shown unrounded.
    Small fractions stay positional (0.00001 -> "0.00001").
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text and abs(value) >= 1e-6:
        text = format(Decimal(text), "f")
    return text
