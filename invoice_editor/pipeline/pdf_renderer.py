"""Render pages of a generated invoice PDF to PNG images for on-screen preview."""

from typing import List

try:
    import fitz  # pymupdf
except ImportError:
    fitz = None

PREVIEW_DPI = 110


class PDFRenderError(Exception):
    """Raised when PDF rendering fails."""
    pass


def _require_fitz() -> None:
    if fitz is None:
        raise ImportError(
            "pymupdf (fitz) is required for PDF preview rendering. "
            "Install with: pip install pymupdf"
        )


def count_pdf_pages(pdf_bytes: bytes) -> int:
    """Number of pages in a PDF held in memory.

    Raises:
        PDFRenderError: If the bytes are not a readable PDF
        ImportError: If pymupdf (fitz) is not installed
    """
    _require_fitz()
    try:
        with fitz.open(stream=pdf_bytes, filetype="pdf") as pdf_doc:
            return pdf_doc.page_count
    except Exception as e:
        raise PDFRenderError(f"Failed to open PDF: {e}") from e


def render_pdf_page_to_image(pdf_bytes: bytes, page_number: int = 1, dpi: int = PREVIEW_DPI) -> bytes:
    """Convert one PDF page to a PNG image.

    Args:
        pdf_bytes: PDF document, e.g. from render_invoice_pdf()
        page_number: Page to render (1-indexed)
        dpi: Resolution in dots per inch

    Returns:
        PNG image bytes

    Raises:
        PDFRenderError: If rendering fails (corrupt document, page out of range)
        ImportError: If pymupdf (fitz) is not installed
    """
    _require_fitz()

    try:
        with fitz.open(stream=pdf_bytes, filetype="pdf") as pdf_doc:
            if not 1 <= page_number <= pdf_doc.page_count:
                raise PDFRenderError(
                    f"Page {page_number} out of range (document has {pdf_doc.page_count} pages)"
                )

            # page_number is 1-indexed, fitz uses 0-indexed
            fitz_page = pdf_doc[page_number - 1]

            # Matrix: scale factor for DPI (dpi / 72)
            zoom = float(dpi) / 72.0
            pix = fitz_page.get_pixmap(matrix=fitz.Matrix(zoom, zoom))
            return pix.tobytes("png")

    except PDFRenderError:
        raise
    except Exception as e:
        raise PDFRenderError(f"Failed to render page {page_number}: {str(e)}") from e


def render_pdf_preview(pdf_bytes: bytes, dpi: int = PREVIEW_DPI) -> List[bytes]:
    """Render every page of a PDF to PNG images, in page order."""
    return [
        render_pdf_page_to_image(pdf_bytes, page_number, dpi)
        for page_number in range(1, count_pdf_pages(pdf_bytes) + 1)
    ]
