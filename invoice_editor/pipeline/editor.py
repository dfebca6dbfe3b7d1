"""Editing session state: one invoice, its logo and explicit update commands."""

import logging
from datetime import date
from typing import Any, Callable, Dict, Optional, Union

from ..models.invoice import Invoice, parse_iso_date
from ..models.invoice_totals import InvoiceTotals
from ..models.line_item import ItemIdSequence, LineItem
from ..models.logo import Logo
from .number_coercion import coerce_number
from .totals import compute_totals

logger = logging.getLogger(__name__)

MODE_EDIT = "edit"
MODE_PREVIEW = "preview"

ADDRESS_SIDES = ("from", "to")
TEXT_FIELDS = ("id", "notes")
DATE_FIELDS = ("created_at", "due_date")


class UnknownCommandError(Exception):
    """Raised when dispatch() gets a command name it does not know."""
    pass


class InvoiceEditor:
    """Owns the invoice of one editing session.

    Every change goes through a command method (or dispatch() by name). Totals are
    never cached: totals() recomputes them from the current items and tax rate,
    so screen, PDF and exports always agree.

    Attributes:
        invoice: The invoice being edited (mutated in place by the commands)
        logo: Optional logo, kept next to the invoice rather than inside it
        mode: MODE_EDIT or MODE_PREVIEW
        is_sending: True while a send is in flight; used to disable the send action
    """

    def __init__(self, invoice: Optional[Invoice] = None, logo: Optional[Logo] = None):
        self.invoice = invoice or Invoice.sample()
        self.logo = logo
        self.mode = MODE_EDIT
        self.is_sending = False
        self._ids = ItemIdSequence(self.invoice.items)
        self._commands: Dict[str, Callable[..., Any]] = {
            "add_item": self.add_item,
            "remove_item": self.remove_item,
            "update_item": self.update_item,
            "set_tax_rate": self.set_tax_rate,
            "update_address": self.update_address,
            "set_field": self.set_field,
            "set_logo": self.set_logo,
            "clear_logo": self.clear_logo,
            "toggle_mode": self.toggle_mode,
        }

    @property
    def is_editing(self) -> bool:
        return self.mode == MODE_EDIT

    def totals(self) -> InvoiceTotals:
        """Fresh totals for the current state."""
        return compute_totals(self.invoice.items, self.invoice.tax_rate)

    def add_item(self) -> LineItem:
        """Append an empty line item (quantity 1, price 0) with a new unique id."""
        item = LineItem(id=self._ids.next_id(), description="", quantity=1.0, price=0.0)
        self.invoice.items.append(item)
        return item

    def remove_item(self, index: int) -> LineItem:
        """Remove the line item at position index; the others keep their order.

        Raises:
            IndexError: If index is out of range
        """
        if not 0 <= index < len(self.invoice.items):
            raise IndexError(f"No line item at position {index} (have {len(self.invoice.items)})")
        return self.invoice.items.pop(index)

    def update_item(
        self,
        index: int,
        description: Optional[str] = None,
        quantity: Any = None,
        price: Any = None,
    ) -> LineItem:
        """Patch the line item at position index. Numeric input is coerced (bad input -> 0).

        Raises:
            IndexError: If index is out of range
        """
        if not 0 <= index < len(self.invoice.items):
            raise IndexError(f"No line item at position {index} (have {len(self.invoice.items)})")
        item = self.invoice.items[index]
        if description is not None:
            item.description = str(description)
        if quantity is not None:
            item.quantity = coerce_number(quantity)
        if price is not None:
            item.price = coerce_number(price)
        return item

    def set_tax_rate(self, value: Any) -> float:
        self.invoice.tax_rate = coerce_number(value)
        return self.invoice.tax_rate

    def update_address(self, side: str, **changes: Any) -> None:
        """Replace the "from" or "to" address with a copy carrying the changes.

        Raises:
            ValueError: If side is unknown or a field name is not an address field
        """
        if side == "from":
            self.invoice.from_address = self.invoice.from_address.with_changes(**changes)
        elif side == "to":
            self.invoice.to_address = self.invoice.to_address.with_changes(**changes)
        else:
            raise ValueError(f"Address side must be one of {ADDRESS_SIDES}, got {side!r}")

    def set_field(self, name: str, value: Union[str, date]) -> None:
        """Set id, notes, created_at or due_date.

        Raises:
            ValueError: If the field is unknown or a date is not YYYY-MM-DD
        """
        if name in TEXT_FIELDS:
            setattr(self.invoice, name, "" if value is None else str(value))
        elif name in DATE_FIELDS:
            setattr(self.invoice, name, parse_iso_date(value))
        else:
            raise ValueError(f"Unknown invoice field: {name!r}")

    def set_logo(self, logo: Logo) -> None:
        """Replace any previous logo."""
        self.logo = logo

    def clear_logo(self) -> None:
        self.logo = None

    def toggle_mode(self) -> str:
        self.mode = MODE_PREVIEW if self.mode == MODE_EDIT else MODE_EDIT
        return self.mode

    def dispatch(self, command: str, **kwargs: Any) -> Any:
        """Run a command by name, e.g. dispatch("update_item", index=0, price="12.5").

        Raises:
            UnknownCommandError: If command is not registered
        """
        handler = self._commands.get(command)
        if handler is None:
            raise UnknownCommandError(f"Unknown editor command: {command!r}")
        logger.debug(f"Editor command {command} {kwargs}")
        return handler(**kwargs)
