"""InvoiceTotals data model holding the derived amounts of an invoice."""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class InvoiceTotals:
    """Derived amounts of an invoice. Never persisted, always recomputed.

    Attributes:
        subtotal: Sum of all line totals before tax
        tax_amount: subtotal * tax_rate / 100
        total: subtotal + tax_amount
    """

    subtotal: float = 0.0
    tax_amount: float = 0.0
    total: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"subtotal": self.subtotal, "tax_amount": self.tax_amount, "total": self.total}
