"""LineItem data model representing one billable row on an invoice."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Dict, Iterable

from ..pipeline.number_coercion import coerce_number


@dataclass
class LineItem:
    """Represents a billable row on an invoice.

    The line total is always derived from quantity and price and never stored.
    Negative values are tolerated; they are only discouraged by the input forms.

    Attributes:
        id: Identifier, unique within one invoice
        description: Product/service description
        quantity: Number of units
        price: Unit price
    """

    id: int
    description: str = ""
    quantity: float = 1.0
    price: float = 0.0

    @property
    def line_total(self) -> float:
        """quantity * price."""
        return self.quantity * self.price

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> LineItem:
        """Create LineItem from dictionary. Numeric fields are coerced, bad values become 0."""
        return cls(
            id=int(data["id"]),
            description=str(data.get("description") or ""),
            quantity=coerce_number(data.get("quantity", 0)),
            price=coerce_number(data.get("price", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "quantity": self.quantity,
            "price": self.price,
        }


class ItemIdSequence:
    """Monotonic id source for new line items of one invoice.

    Starts above the largest id already in use so ids never collide, no matter
    how quickly items are added.
    """

    def __init__(self, existing: Iterable[LineItem] = ()):
        start = max((item.id for item in existing), default=0) + 1
        self._counter = itertools.count(start)

    def next_id(self) -> int:
        return next(self._counter)
