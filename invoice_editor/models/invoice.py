"""Invoice data model: the document being edited."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from ..pipeline.number_coercion import coerce_number
from .address import Address
from .line_item import LineItem

if TYPE_CHECKING:
    from ..config.profile_loader import ProfileConfig


DEFAULT_DUE_DAYS = 14
DEFAULT_TAX_RATE = 8.0
DEFAULT_INVOICE_PREFIX = "INV-"
# Characters that cannot appear in a single file name on common filesystems
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

SAMPLE_FROM = Address(
    name="My Company LLC",
    email="hello@mycompany.com",
    address="123 Tech Blvd, San Francisco, CA 94107",
)
SAMPLE_TO = Address(
    name="Client Name",
    email="client@business.com",
    address="456 Market St, New York, NY 10001",
)
SAMPLE_ITEMS = (
    ("Web Development Services", 10.0, 85.0),
    ("Server Setup", 2.0, 150.0),
)
SAMPLE_NOTES = (
    "Payment is due within 14 days.\n"
    "This document remains valid even without a signature.\n"
    "Thank you for your business!"
)


def parse_iso_date(value: Union[str, date]) -> date:
    """Parse YYYY-MM-DD (or pass a date through).

    Raises:
        ValueError: If value is not an ISO date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as e:
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value!r}") from e


@dataclass
class Invoice:
    """Represents an invoice being edited.

    subtotal, tax and total are not fields; they are derived
    with pipeline.totals.compute_totals every time they are shown or printed.

    Attributes:
        id: Invoice number, also the PDF filename stem
        created_at: Issue date
        due_date: Payment due date
        from_address: Sender ("from")
        to_address: Recipient ("to")
        items: Line items in display / table-row order
        notes: Free text, may contain line breaks
        tax_rate: Tax rate in percent (8 means 8%)
    """

    id: str
    created_at: date
    due_date: date
    from_address: Address = field(default_factory=Address)
    to_address: Address = field(default_factory=Address)
    items: List[LineItem] = field(default_factory=list)
    notes: str = ""
    tax_rate: float = 0.0

    def __post_init__(self):
        """Validate that line item ids are unique."""
        ids = [item.id for item in self.items]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Line item ids must be unique within an invoice, got {ids}")

    @property
    def file_stem(self) -> str:
        """Invoice id usable as one file name component.

        Path separators and other reserved characters become "-", so
        "INV/2024/001" gives "INV-2024-001"; an empty or all-dots id gives "invoice".
        """
        stem = _UNSAFE_FILENAME_CHARS.sub("-", self.id).strip()
        if not stem.strip("."):
            return "invoice"
        return stem

    @property
    def pdf_filename(self) -> str:
        """Download filename: "<id>.pdf" (id made file-name safe)."""
        return f"{self.file_stem}.pdf"

    @classmethod
    def sample(
        cls,
        today: Optional[date] = None,
        profile: Optional[ProfileConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> Invoice:
        """Create the default invoice an editing session starts with.

        Args:
            today: Issue date (default: date.today())
            profile: Optional configuration profile overriding sender, recipient,
                tax rate, due days, notes and invoice number prefix
            rng: Random source for the invoice number (default: module random)

        Returns:
            Invoice numbered "<prefix><year><0-9999>", due after the configured days
        """
        today = today or date.today()
        rng = rng or random.Random()

        prefix = DEFAULT_INVOICE_PREFIX
        due_days = DEFAULT_DUE_DAYS
        tax_rate = DEFAULT_TAX_RATE
        notes = SAMPLE_NOTES
        from_address = SAMPLE_FROM
        to_address = SAMPLE_TO
        items = [
            LineItem(id=i, description=desc, quantity=qty, price=price)
            for i, (desc, qty, price) in enumerate(SAMPLE_ITEMS, start=1)
        ]

        if profile is not None:
            prefix = profile.invoice_prefix
            due_days = profile.due_days
            tax_rate = profile.tax_rate
            if profile.notes is not None:
                notes = profile.notes
            if profile.sender:
                from_address = Address.from_dict(profile.sender)
            if profile.recipient:
                to_address = Address.from_dict(profile.recipient)
            if profile.items is not None:
                items = [
                    LineItem.from_dict({"id": i, **item})
                    for i, item in enumerate(profile.items, start=1)
                ]

        return cls(
            id=f"{prefix}{today.year}{rng.randint(0, 9999)}",
            created_at=today,
            due_date=today + timedelta(days=due_days),
            from_address=from_address,
            to_address=to_address,
            items=items,
            notes=notes,
            tax_rate=tax_rate,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Invoice:
        """Create Invoice from dictionary (keys as written by to_dict).

        Raises:
            ValueError: If required keys are missing or dates are malformed
        """
        missing = [key for key in ("id", "created_at", "due_date") if key not in data]
        if missing:
            raise ValueError(f"Invoice is missing required field(s): {', '.join(missing)}")

        return cls(
            id=str(data["id"]),
            created_at=parse_iso_date(data["created_at"]),
            due_date=parse_iso_date(data["due_date"]),
            from_address=Address.from_dict(data.get("from") or {}),
            to_address=Address.from_dict(data.get("to") or {}),
            items=[LineItem.from_dict(item) for item in data.get("items") or []],
            notes=str(data.get("notes") or ""),
            tax_rate=coerce_number(data.get("tax_rate", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON/YAML friendly dictionary."""
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "due_date": self.due_date.isoformat(),
            "from": self.from_address.to_dict(),
            "to": self.to_address.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "notes": self.notes,
            "tax_rate": self.tax_rate,
        }
