"""Unit tests for invoice PDF generation."""

import base64
import io
import logging
from datetime import date
from unittest.mock import patch

import fitz
import pytest
from fpdf import FPDF
from PIL import Image

from invoice_editor.models.address import Address
from invoice_editor.models.invoice import Invoice
from invoice_editor.models.line_item import LineItem
from invoice_editor.models.logo import Logo
from invoice_editor.pipeline.pdf_generator import (
    ADDRESS_WRAP_WIDTH,
    FONT_FAMILY,
    NOTES_MARGIN,
    InvoicePDFError,
    InvoicePDFGenerator,
    render_invoice_pdf,
    save_invoice_pdf,
    split_text_to_size,
)

MM_TO_PT = 72 / 25.4


def _invoice(items=None, notes="Payment is due within 14 days.\nThank you!", tax_rate=8.0):
    if items is None:
        items = [
            LineItem(id=1, description="Web Development Services", quantity=10, price=85),
            LineItem(id=2, description="Server Setup", quantity=2, price=150),
        ]
    return Invoice(
        id="INV-20241234",
        created_at=date(2024, 1, 1),
        due_date=date(2024, 1, 15),
        from_address=Address("My Company LLC", "hello@mycompany.com", "123 Tech Blvd, San Francisco, CA 94107"),
        to_address=Address("Client Name", "client@business.com", "456 Market St, New York, NY 10001"),
        items=items,
        notes=notes,
        tax_rate=tax_rate,
    )


def _png_logo() -> Logo:
    buffer = io.BytesIO()
    Image.new("RGB", (90, 30), (59, 130, 246)).save(buffer, format="PNG")
    return Logo.from_bytes(buffer.getvalue())


def _pages_text(pdf_bytes):
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [page.get_text() for page in doc]


def test_render_returns_pdf_bytes():
    data = render_invoice_pdf(_invoice())
    assert data.startswith(b"%PDF")


def test_header_metadata_and_addresses():
    text = _pages_text(render_invoice_pdf(_invoice()))[0]

    for expected in (
        "INVOICE",
        "Invoice #INV-20241234",
        "Date: 2024-01-01",
        "Due Date: 2024-01-15",
        "FROM:",
        "TO:",
        "My Company LLC",
        "client@business.com",
    ):
        assert expected in text


def test_fixed_positions():
    with fitz.open(stream=render_invoice_pdf(_invoice()), filetype="pdf") as doc:
        page = doc[0]
        title = page.search_for("INVOICE")[0]
        to_label = page.search_for("TO:")[0]

    assert title.x0 == pytest.approx(14 * MM_TO_PT, abs=1.5)
    assert to_label.x0 == pytest.approx(120 * MM_TO_PT, abs=1.5)
    # Title is drawn on the 20 mm baseline
    assert title.y0 < 20 * MM_TO_PT < title.y1


def test_table_rows_and_footer_totals():
    text = _pages_text(render_invoice_pdf(_invoice()))[0]

    for expected in ("Description", "Qty", "Price", "Total", "$85.00", "$850.00", "$300.00"):
        assert expected in text
    assert "Subtotal" in text and "$1150.00" in text
    assert "Tax (8%)" in text and "$92.00" in text
    assert "$1242.00" in text


def test_zero_items_gives_header_and_zero_totals():
    text = _pages_text(render_invoice_pdf(_invoice(items=[])))[0]

    assert "Description" in text
    assert "Subtotal" in text
    assert text.count("$0.00") == 3


def test_currency_symbol():
    text = _pages_text(render_invoice_pdf(_invoice(), currency_symbol="EUR "))[0]
    assert "EUR 1242.00" in text


def test_notes_line_breaks_preserved():
    notes = "First line\nSecond line\n\nAfter blank"
    text = _pages_text(render_invoice_pdf(_invoice(notes=notes)))[-1]

    assert "Notes:" in text
    lines = [line.strip() for line in text.splitlines()]
    assert "First line" in lines
    assert "Second line" in lines
    assert "After blank" in lines


def test_notes_follow_table_end():
    generator = InvoicePDFGenerator(_invoice())
    generator.build()

    assert generator.table_end_y > 95
    assert generator.notes_y == pytest.approx(generator.table_end_y + NOTES_MARGIN)


def test_table_end_depends_on_row_count():
    short = InvoicePDFGenerator(_invoice())
    short.build()
    longer = InvoicePDFGenerator(_invoice(items=[LineItem(id=i, description=f"Row {i}") for i in range(1, 8)]))
    longer.build()

    assert longer.table_end_y > short.table_end_y


def test_many_items_paginate_with_repeated_heading():
    items = [LineItem(id=i, description=f"Item {i}", quantity=1, price=i) for i in range(1, 81)]
    pages = _pages_text(render_invoice_pdf(_invoice(items=items)))

    assert len(pages) >= 2
    assert "Description" in pages[1]
    assert "Item 80" in "".join(pages)
    assert "Notes:" in pages[-1]
    assert "$3240.00" in "".join(pages)  # subtotal of 1..80


def test_logo_embedded():
    generator = InvoicePDFGenerator(_invoice(), logo=_png_logo())
    data = generator.render()

    assert generator.logo_embedded
    with fitz.open(stream=data, filetype="pdf") as doc:
        assert len(doc[0].get_images()) == 1


def test_no_logo_no_image():
    with fitz.open(stream=render_invoice_pdf(_invoice()), filetype="pdf") as doc:
        assert doc[0].get_images() == []


def test_broken_logo_is_skipped_with_warning(caplog):
    payload = base64.b64encode(b"definitely not an image").decode("ascii")
    logo = Logo(f"data:image/png;base64,{payload}")

    with caplog.at_level(logging.WARNING, logger="invoice_editor.pipeline.pdf_generator"):
        generator = InvoicePDFGenerator(_invoice(), logo=logo)
        data = generator.render()

    assert data.startswith(b"%PDF")
    assert not generator.logo_embedded
    assert "Could not embed logo in PDF" in caplog.text


def test_text_outside_latin1_does_not_fail():
    invoice = _invoice(items=[LineItem(id=1, description="Café design ✓ 😀", quantity=1, price=1)])
    text = _pages_text(render_invoice_pdf(invoice))[0]
    assert "Café design" in text


class TestSplitTextToSize:
    """Address wrapping."""

    @pytest.fixture
    def pdf(self):
        pdf = FPDF(unit="mm", format="A4")
        pdf.add_page()
        pdf.set_font(FONT_FAMILY, size=10)
        return pdf

    def test_lines_fit_width(self, pdf):
        text = "Building 7, Floor 3, 1600 Amphitheatre Parkway, Mountain View, CA 94043, United States of America"
        lines = split_text_to_size(pdf, text, ADDRESS_WRAP_WIDTH)

        assert len(lines) > 1
        assert all(pdf.get_string_width(line) <= ADDRESS_WRAP_WIDTH for line in lines)
        assert " ".join(lines) == text

    def test_existing_line_breaks_kept(self, pdf):
        assert split_text_to_size(pdf, "1 Harbour St\nSuite 4", ADDRESS_WRAP_WIDTH) == ["1 Harbour St", "Suite 4"]

    def test_long_word_is_broken(self, pdf):
        lines = split_text_to_size(pdf, "x" * 200, ADDRESS_WRAP_WIDTH)
        assert len(lines) > 1
        assert "".join(lines) == "x" * 200
        assert all(pdf.get_string_width(line) <= ADDRESS_WRAP_WIDTH for line in lines)

    def test_empty_text(self, pdf):
        assert split_text_to_size(pdf, "", ADDRESS_WRAP_WIDTH) == [""]


class TestSaveInvoicePdf:

    def test_writes_id_named_file(self, tmp_path):
        path = save_invoice_pdf(_invoice(), tmp_path / "out")
        assert path == tmp_path / "out" / "INV-20241234.pdf"
        assert path.read_bytes().startswith(b"%PDF")

    def test_failure_raises_and_writes_nothing(self, tmp_path):
        with patch.object(InvoicePDFGenerator, "render", side_effect=RuntimeError("boom")):
            with pytest.raises(InvoicePDFError, match="boom"):
                save_invoice_pdf(_invoice(), tmp_path)
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.parametrize(
        "invoice_id,filename",
        [("INV/2024/001", "INV-2024-001.pdf"), ("../escaped", "..-escaped.pdf"), ("a\\b", "a-b.pdf")],
    )
    def test_id_never_leaves_output_dir(self, tmp_path, invoice_id, filename):
        invoice = _invoice()
        invoice.id = invoice_id
        out = tmp_path / "out"

        path = save_invoice_pdf(invoice, out)

        assert path == out / filename
        assert [p.name for p in out.iterdir()] == [filename]
        assert [p.name for p in tmp_path.iterdir()] == ["out"]

    def test_unwritable_output_dir_raises_pdf_error(self, tmp_path):
        blocker = tmp_path / "taken"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(InvoicePDFError, match="Failed to write PDF"):
            save_invoice_pdf(_invoice(), blocker)
