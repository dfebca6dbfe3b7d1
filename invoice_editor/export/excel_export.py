"""Excel export of an invoice: line items and a summary sheet."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd
from openpyxl.styles import Font
from openpyxl.styles.numbers import FORMAT_NUMBER_00

from ..models.invoice import Invoice
from ..pipeline.totals import compute_totals

logger = logging.getLogger(__name__)

ITEMS_SHEET = "Items"
SUMMARY_SHEET = "Summary"
ITEM_COLUMNS = ["Description", "Qty", "Price", "Total"]
SUMMARY_AMOUNT_FIELDS = ("Subtotal", "Tax", "Total")


def _item_rows(invoice: Invoice) -> List[Dict[str, Any]]:
    return [
        {
            "Description": item.description,
            "Qty": item.quantity,
            "Price": item.price,
            "Total": item.line_total,
        }
        for item in invoice.items
    ]


def _summary_rows(invoice: Invoice) -> List[Dict[str, Any]]:
    totals = compute_totals(invoice.items, invoice.tax_rate)
    return [
        {"Field": "Invoice #", "Value": invoice.id},
        {"Field": "Date", "Value": invoice.created_at.isoformat()},
        {"Field": "Due Date", "Value": invoice.due_date.isoformat()},
        {"Field": "From", "Value": invoice.from_address.name},
        {"Field": "From email", "Value": invoice.from_address.email},
        {"Field": "To", "Value": invoice.to_address.name},
        {"Field": "To email", "Value": invoice.to_address.email},
        {"Field": "Subtotal", "Value": totals.subtotal},
        {"Field": "Tax rate (%)", "Value": invoice.tax_rate},
        {"Field": "Tax", "Value": totals.tax_amount},
        {"Field": "Total", "Value": totals.total},
    ]


def export_invoice_to_excel(invoice: Invoice, output_path: Union[str, Path]) -> str:
    """Export an invoice to an Excel workbook.

    Args:
        invoice: Invoice to export
        output_path: Path to output .xlsx file

    Returns:
        Path to created Excel file

    Excel structure:
    - "Items": one row per line item (Description, Qty, Price, Total), in invoice order
    - "Summary": Field/Value rows with invoice number, dates, parties and the
      subtotal / tax / total from the same calculator the PDF uses
    - Price, Total and the summary amounts use a two-decimal number format
    """
    items_df = pd.DataFrame(_item_rows(invoice), columns=ITEM_COLUMNS)
    summary_df = pd.DataFrame(_summary_rows(invoice), columns=["Field", "Value"])

    # Ensure output directory exists
    output_path_obj = Path(output_path)
    output_path_obj.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path_obj, engine="openpyxl") as writer:
        items_df.to_excel(writer, index=False, sheet_name=ITEMS_SHEET)
        summary_df.to_excel(writer, index=False, sheet_name=SUMMARY_SHEET)

        items_ws = writer.sheets[ITEMS_SHEET]
        price_idx = ITEM_COLUMNS.index("Price")
        total_idx = ITEM_COLUMNS.index("Total")
        for row in items_ws.iter_rows(min_row=2, max_row=items_ws.max_row):
            row[price_idx].number_format = FORMAT_NUMBER_00
            row[total_idx].number_format = FORMAT_NUMBER_00
        items_ws.column_dimensions["A"].width = 48

        summary_ws = writer.sheets[SUMMARY_SHEET]
        for row in summary_ws.iter_rows(min_row=2, max_row=summary_ws.max_row):
            field_cell, value_cell = row[0], row[1]
            if field_cell.value in SUMMARY_AMOUNT_FIELDS:
                value_cell.number_format = FORMAT_NUMBER_00
            if field_cell.value == "Total":
                field_cell.font = Font(bold=True)
                value_cell.font = Font(bold=True)
        summary_ws.column_dimensions["A"].width = 16
        summary_ws.column_dimensions["B"].width = 40

    logger.info(f"Invoice spreadsheet written: {output_path_obj}")
    return str(output_path_obj)
