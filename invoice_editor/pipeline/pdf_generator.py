"""Invoice PDF layout using fpdf2.

A4, millimetres, origin top-left with y growing downward. Text positions are
baselines. Everything above the items table sits at fixed coordinates; the
notes block is placed relative to where the table actually ended, which the
table engine reports after laying out (and possibly paginating) its rows.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from fpdf import FPDF
from fpdf.fonts import FontFace

from ..models.invoice import Invoice
from ..models.invoice_totals import InvoiceTotals
from ..models.logo import Logo
from .totals import compute_totals, format_currency, format_number

logger = logging.getLogger(__name__)

FONT_FAMILY = "helvetica"
PAGE_MARGIN = 14.0
PAGE_BOTTOM_MARGIN = 14.0
LINE_HEIGHT_FACTOR = 1.15
PT_TO_MM = 25.4 / 72

# Title and metadata
TITLE = "INVOICE"
TITLE_POS = (14.0, 20.0)
TITLE_FONT_SIZE = 22
TITLE_COLOR = (40, 40, 40)
META_X = 14.0
META_Y = (30.0, 35.0, 40.0)
META_FONT_SIZE = 10
MUTED_COLOR = (100, 100, 100)

# Logo (top-right)
LOGO_BOX = (150.0, 10.0, 45.0, 15.0)  # x, y, w, h

# Address blocks
FROM_X = 14.0
TO_X = 120.0
ADDRESS_LABEL_Y = 55.0
ADDRESS_NAME_Y = 62.0
ADDRESS_EMAIL_Y = 67.0
ADDRESS_TEXT_Y = 72.0
ADDRESS_WRAP_WIDTH = 80.0
ADDRESS_LABEL_FONT_SIZE = 12
ADDRESS_FONT_SIZE = 10
ADDRESS_COLOR = (60, 60, 60)

# Items table
TABLE_START_Y = 95.0
TABLE_FONT_SIZE = 10
TABLE_LINE_HEIGHT = 7.0
TABLE_HEADINGS = ("Description", "Qty", "Price", "Total")
TABLE_COL_WIDTHS = (94, 20, 34, 34)
TABLE_TEXT_ALIGN = ("LEFT", "RIGHT", "RIGHT", "RIGHT")
HEAD_STYLE = FontFace(emphasis="BOLD", color=(255, 255, 255), fill_color=(59, 130, 246))
STRIPE_STYLE = FontFace(fill_color=(245, 245, 245))
FOOT_STYLE = FontFace(emphasis="BOLD", color=(0, 0, 0), fill_color=(241, 245, 249))

# Notes
NOTES_MARGIN = 10.0
NOTES_TEXT_OFFSET = 5.0
NOTES_X = 14.0
NOTES_FONT_SIZE = 10


class InvoicePDFError(Exception):
    """Raised when the invoice PDF cannot be generated."""
    pass


def pdf_safe_text(text: str) -> str:
    """Map text onto the latin-1 range the core PDF fonts can encode ("?" for the rest)."""
    return text.encode("latin-1", "replace").decode("latin-1")


def line_height_mm(font_size_pt: float) -> float:
    """Distance between baselines for a font size."""
    return font_size_pt * LINE_HEIGHT_FACTOR * PT_TO_MM


def split_text_to_size(pdf: FPDF, text: str, max_width: float) -> List[str]:
    """Word-wrap text so no line is wider than max_width in the current font.

    Existing line breaks are kept. Words longer than max_width are broken
    between characters.

    Args:
        pdf: Document whose current font is used for measuring
        text: Text to wrap, may contain "\\n"
        max_width: Width budget in mm

    Returns:
        List of lines (at least one, possibly empty)
    """
    lines: List[str] = []
    for paragraph in text.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if pdf.get_string_width(candidate) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            # Break a word that alone does not fit
            current = ""
            for char in word:
                if current and pdf.get_string_width(current + char) > max_width:
                    lines.append(current)
                    current = ""
                current += char
        lines.append(current)
    return lines


class InvoicePDFGenerator:
    """Lays out one invoice onto an A4 document.

    After build(), table_end_y and notes_y record where the table ended and
    where the notes label was drawn (on the last page).

    Attributes:
        invoice: Invoice to render
        logo: Optional logo to embed top-right
        currency_symbol: Prefix for amounts
        totals: Totals used for the footer rows (computed at construction)
    """

    def __init__(self, invoice: Invoice, logo: Optional[Logo] = None, currency_symbol: str = "$"):
        self.invoice = invoice
        self.logo = logo
        self.currency_symbol = currency_symbol
        self.totals: InvoiceTotals = compute_totals(invoice.items, invoice.tax_rate)
        self.pdf: Optional[FPDF] = None
        self.logo_embedded = False
        self.table_end_y: Optional[float] = None
        self.notes_y: Optional[float] = None

    def build(self) -> FPDF:
        """Run the layout sequence and return the finished document."""
        pdf = FPDF(orientation="P", unit="mm", format="A4")
        pdf.set_margins(PAGE_MARGIN, PAGE_MARGIN, PAGE_MARGIN)
        pdf.set_auto_page_break(auto=True, margin=PAGE_BOTTOM_MARGIN)
        pdf.set_title(pdf_safe_text(f"Invoice {self.invoice.id}"))
        pdf.set_author(pdf_safe_text(self.invoice.from_address.name))
        pdf.add_page()
        self.pdf = pdf

        self._draw_title()
        self._draw_metadata()
        self._draw_logo()
        self._draw_address("FROM:", self.invoice.from_address, FROM_X)
        self._draw_address("TO:", self.invoice.to_address, TO_X)
        self._draw_items_table()
        self._draw_notes()
        return pdf

    def render(self) -> bytes:
        """Build and serialize the document."""
        pdf = self.build()
        return bytes(pdf.output())

    def _text(self, x: float, y: float, text: str) -> None:
        if text:
            self.pdf.text(x, y, pdf_safe_text(text))

    def _draw_title(self) -> None:
        self.pdf.set_font(FONT_FAMILY, size=TITLE_FONT_SIZE)
        self.pdf.set_text_color(*TITLE_COLOR)
        self._text(*TITLE_POS, TITLE)

    def _draw_metadata(self) -> None:
        invoice = self.invoice
        self.pdf.set_font(FONT_FAMILY, size=META_FONT_SIZE)
        self.pdf.set_text_color(*MUTED_COLOR)
        lines = (
            f"Invoice #{invoice.id}",
            f"Date: {invoice.created_at.isoformat()}",
            f"Due Date: {invoice.due_date.isoformat()}",
        )
        for y, line in zip(META_Y, lines):
            self._text(META_X, y, line)

    def _draw_logo(self) -> None:
        if self.logo is None:
            return
        x, y, w, h = LOGO_BOX
        try:
            self.pdf.image(self.logo.to_image(), x=x, y=y, w=w, h=h)
            self.logo_embedded = True
        except Exception as e:
            logger.warning(f"Could not embed logo in PDF: {e}")

    def _draw_address(self, label: str, address, x: float) -> None:
        pdf = self.pdf
        pdf.set_font(FONT_FAMILY, size=ADDRESS_LABEL_FONT_SIZE)
        pdf.set_text_color(0, 0, 0)
        self._text(x, ADDRESS_LABEL_Y, label)

        pdf.set_font(FONT_FAMILY, size=ADDRESS_FONT_SIZE)
        pdf.set_text_color(*ADDRESS_COLOR)
        self._text(x, ADDRESS_NAME_Y, address.name)
        self._text(x, ADDRESS_EMAIL_Y, address.email)

        step = line_height_mm(ADDRESS_FONT_SIZE)
        wrapped = split_text_to_size(pdf, pdf_safe_text(address.address), ADDRESS_WRAP_WIDTH)
        for i, line in enumerate(wrapped):
            self._text(x, ADDRESS_TEXT_Y + i * step, line)

    def _table_rows(self):
        """(cells, style) for body rows followed by the three footer rows."""
        symbol = self.currency_symbol
        rows = []
        for i, item in enumerate(self.invoice.items):
            cells = (
                item.description,
                format_number(item.quantity),
                format_currency(item.price, symbol),
                format_currency(item.line_total, symbol),
            )
            rows.append((cells, STRIPE_STYLE if i % 2 == 1 else None))

        totals = self.totals
        rows.append((("", "", "Subtotal", format_currency(totals.subtotal, symbol)), FOOT_STYLE))
        rows.append((
            ("", "", f"Tax ({format_number(self.invoice.tax_rate)}%)", format_currency(totals.tax_amount, symbol)),
            FOOT_STYLE,
        ))
        rows.append((("", "", "Total", format_currency(totals.total, symbol)), FOOT_STYLE))
        return rows

    def _draw_items_table(self) -> None:
        pdf = self.pdf
        pdf.set_font(FONT_FAMILY, size=TABLE_FONT_SIZE)
        pdf.set_text_color(0, 0, 0)
        pdf.set_y(TABLE_START_Y)

        # The table engine sizes the columns and breaks onto new pages,
        # repeating the heading row on each continuation page.
        with pdf.table(
            headings_style=HEAD_STYLE,
            col_widths=TABLE_COL_WIDTHS,
            text_align=TABLE_TEXT_ALIGN,
            line_height=TABLE_LINE_HEIGHT,
            borders_layout="NONE",
        ) as table:
            table.row(TABLE_HEADINGS)
            for cells, style in self._table_rows():
                table.row([pdf_safe_text(c) for c in cells], style=style)

        self.table_end_y = pdf.get_y()

    def _draw_notes(self) -> None:
        pdf = self.pdf
        pdf.set_font(FONT_FAMILY, size=NOTES_FONT_SIZE)
        pdf.set_text_color(*MUTED_COLOR)

        step = line_height_mm(NOTES_FONT_SIZE)
        y = self._room_for(self.table_end_y + NOTES_MARGIN)
        self.notes_y = y
        self._text(NOTES_X, y, "Notes:")

        y += NOTES_TEXT_OFFSET
        width = pdf.w - NOTES_X - PAGE_MARGIN
        for line in split_text_to_size(pdf, pdf_safe_text(self.invoice.notes), width):
            y = self._room_for(y)
            self._text(NOTES_X, y, line)
            y += step

    def _room_for(self, y: float) -> float:
        """Return y, or the top of a fresh page if y is past the printable area."""
        if y > self.pdf.h - PAGE_BOTTOM_MARGIN:
            self.pdf.add_page()
            return PAGE_MARGIN + line_height_mm(NOTES_FONT_SIZE)
        return y


def render_invoice_pdf(
    invoice: Invoice,
    logo: Optional[Logo] = None,
    currency_symbol: str = "$",
) -> bytes:
    """Render an invoice to PDF bytes.

    Args:
        invoice: Invoice to render
        logo: Optional logo; if it cannot be embedded a warning is logged and
            the PDF is produced without it
        currency_symbol: Prefix for amounts

    Returns:
        PDF document as bytes

    Raises:
        InvoicePDFError: If layout or serialization fails
    """
    try:
        return InvoicePDFGenerator(invoice, logo, currency_symbol).render()
    except Exception as e:
        raise InvoicePDFError(f"Failed to generate PDF for invoice {invoice.id}: {e}") from e


def save_invoice_pdf(
    invoice: Invoice,
    output_dir: Union[str, Path],
    logo: Optional[Logo] = None,
    currency_symbol: str = "$",
) -> Path:
    """Render an invoice and write it to <output_dir>/<invoice.pdf_filename>.

    The file name is the invoice id with path separators replaced, so the
    file always lands directly inside output_dir.

    The document is fully rendered before anything is written, so a failed
    generation never leaves a partial file behind.

    Returns:
        Path to the written PDF

    Raises:
        InvoicePDFError: If generation or writing the file fails
    """
    data = render_invoice_pdf(invoice, logo, currency_symbol)

    output_path = Path(output_dir)
    pdf_path = output_path / invoice.pdf_filename
    try:
        output_path.mkdir(parents=True, exist_ok=True)
        pdf_path.write_bytes(data)
    except OSError as e:
        raise InvoicePDFError(f"Failed to write PDF for invoice {invoice.id} to {pdf_path}: {e}") from e
    logger.info(f"Invoice PDF written: {pdf_path}")
    return pdf_path
