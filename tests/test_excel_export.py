"""Unit tests for Excel export."""

from datetime import date

import openpyxl
import pytest

from invoice_editor.export.excel_export import export_invoice_to_excel
from invoice_editor.models.invoice import Invoice


@pytest.fixture
def invoice():
    invoice = Invoice.sample(today=date(2024, 1, 1))
    invoice.id = "INV-20240042"
    return invoice


def _summary(ws):
    return {ws.cell(row=r, column=1).value: ws.cell(row=r, column=2) for r in range(2, ws.max_row + 1)}


def test_export_creates_workbook(tmp_path, invoice):
    output = tmp_path / "nested" / "invoice.xlsx"
    result = export_invoice_to_excel(invoice, output)

    assert result == str(output)
    assert output.exists()
    wb = openpyxl.load_workbook(output)
    assert wb.sheetnames == ["Items", "Summary"]


def test_items_sheet(tmp_path, invoice):
    output = tmp_path / "invoice.xlsx"
    export_invoice_to_excel(invoice, output)
    ws = openpyxl.load_workbook(output)["Items"]

    assert [c.value for c in ws[1]] == ["Description", "Qty", "Price", "Total"]
    assert [c.value for c in ws[2]] == ["Web Development Services", 10, 85, 850]
    assert [c.value for c in ws[3]] == ["Server Setup", 2, 150, 300]
    assert ws.cell(row=2, column=3).number_format == "0.00"
    assert ws.cell(row=2, column=4).number_format == "0.00"


def test_summary_sheet_uses_calculator(tmp_path, invoice):
    output = tmp_path / "invoice.xlsx"
    export_invoice_to_excel(invoice, output)
    summary = _summary(openpyxl.load_workbook(output)["Summary"])

    assert summary["Invoice #"].value == "INV-20240042"
    assert summary["Date"].value == "2024-01-01"
    assert summary["Due Date"].value == "2024-01-15"
    assert summary["Subtotal"].value == pytest.approx(1150)
    assert summary["Tax"].value == pytest.approx(92)
    assert summary["Total"].value == pytest.approx(1242)
    assert summary["Total"].font.bold
    assert summary["Total"].number_format == "0.00"


def test_export_empty_invoice(tmp_path, invoice):
    invoice.items = []
    output = tmp_path / "empty.xlsx"
    export_invoice_to_excel(invoice, output)
    wb = openpyxl.load_workbook(output)

    assert wb["Items"].max_row == 1
    assert _summary(wb["Summary"])["Total"].value == 0
