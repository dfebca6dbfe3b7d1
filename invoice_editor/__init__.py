"""Invoice editor: line items, totals and PDF invoices."""

__version__ = "1.0.0"
