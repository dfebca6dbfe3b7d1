"""CLI interface for rendering invoices to PDF."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Optional

# Fix encoding for Windows console
if sys.platform == "win32":
    try:
        sys.stdout.reconfigure(encoding='utf-8')
    except (AttributeError, ValueError):
        pass

from ..config import (
    get_app_name,
    get_app_version,
    get_currency_symbol,
    get_default_output_dir,
    get_profile,
    set_profile,
)
from ..export.excel_export import export_invoice_to_excel
from ..models.invoice import Invoice
from ..models.logo import Logo, LogoError
from ..pipeline.pdf_generator import InvoicePDFError, save_invoice_pdf
from ..pipeline.reader import InvoiceReadError, read_invoice_file, write_invoice_file
from ..pipeline.totals import compute_totals, format_currency, format_number

logger = logging.getLogger(__name__)


class InvoiceProcessingError(Exception):
    """Raised when an invoice cannot be loaded or rendered."""
    pass


def load_invoice(
    input_path: Optional[str],
    logo_path: Optional[str] = None,
) -> tuple:
    """Load the invoice to render: from a file, or the profile's sample invoice.

    A --logo file overrides any logo stored in the invoice file.

    Returns:
        (Invoice, Logo or None)

    Raises:
        InvoiceProcessingError: If the file or logo cannot be read
    """
    try:
        if input_path:
            invoice, logo = read_invoice_file(input_path)
        else:
            invoice, logo = Invoice.sample(profile=get_profile()), None
        if logo_path:
            logo = Logo.from_file(logo_path)
    except (InvoiceReadError, LogoError, FileNotFoundError) as e:
        raise InvoiceProcessingError(str(e)) from e
    return invoice, logo


def format_totals_report(invoice: Invoice, currency_symbol: str = "$") -> str:
    """Human-readable totals block for the terminal."""
    totals = compute_totals(invoice.items, invoice.tax_rate)
    lines = [f"Invoice #{invoice.id} ({len(invoice.items)} items)"]
    for item in invoice.items:
        lines.append(
            f"  {item.description or '-'}: {format_number(item.quantity)} x "
            f"{format_currency(item.price, currency_symbol)} = {format_currency(item.line_total, currency_symbol)}"
        )
    lines.append(f"Subtotal: {format_currency(totals.subtotal, currency_symbol)}")
    lines.append(f"Tax ({format_number(invoice.tax_rate)}%): {format_currency(totals.tax_amount, currency_symbol)}")
    lines.append(f"Total: {format_currency(totals.total, currency_symbol)}")
    return "\n".join(lines)


def process_invoice(
    invoice: Invoice,
    output_dir: str,
    logo: Optional[Logo] = None,
    excel: bool = False,
    currency_symbol: Optional[str] = None,
) -> Dict:
    """Render one invoice (PDF, optionally Excel) into output_dir.

    Args:
        invoice: Invoice to render
        output_dir: Directory for <id>.pdf (and <id>.xlsx)
        logo: Optional logo to embed
        excel: Also write the spreadsheet export
        currency_symbol: Amount prefix (default: configured symbol)

    Returns:
        Dict with:
        - status: "OK" or "FAILED"
        - pdf_path: Path of the written PDF (None if failed)
        - excel_path: Path of the spreadsheet (None unless excel=True and OK)
        - totals: InvoiceTotals used for the document
        - error: Error message if failed
    """
    symbol = currency_symbol or get_currency_symbol()
    totals = compute_totals(invoice.items, invoice.tax_rate)
    result = {
        "status": "OK",
        "pdf_path": None,
        "excel_path": None,
        "totals": totals,
        "error": None,
    }

    try:
        result["pdf_path"] = save_invoice_pdf(invoice, output_dir, logo, symbol)
    except InvoicePDFError as e:
        logger.error(f"PDF generation failed: {e}", exc_info=True)
        result["status"] = "FAILED"
        result["error"] = str(e)
        return result

    if excel:
        excel_path = Path(output_dir) / f"{invoice.file_stem}.xlsx"
        result["excel_path"] = export_invoice_to_excel(invoice, excel_path)

    return result


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description=f"{get_app_name()} - Render invoices (YAML/JSON) to PDF"
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--input",
        required=False,
        help="Invoice file (.yaml/.yml/.json)"
    )
    source.add_argument(
        "--sample",
        action="store_true",
        help="Render the profile's sample invoice (default when --input is not given)"
    )

    parser.add_argument(
        "--output",
        required=False,
        help="Output directory for <invoice id>.pdf (default: ./out or INVOICE_OUTPUT_DIR)"
    )

    parser.add_argument(
        "--logo",
        required=False,
        help="Image file to embed as logo (overrides a logo in the invoice file)"
    )

    parser.add_argument(
        "--profile",
        type=str,
        help="Configuration profile name (default: INVOICE_PROFILE or default)"
    )

    parser.add_argument(
        "--excel",
        action="store_true",
        help="Also write <invoice id>.xlsx with line items and totals"
    )

    parser.add_argument(
        "--totals-only",
        action="store_true",
        help="Print subtotal, tax and total without writing any file"
    )

    parser.add_argument(
        "--write-sample",
        type=str,
        help="Write the profile's sample invoice to this path (.yaml or .json) and exit"
    )

    parser.add_argument(
        "--check-deps",
        action="store_true",
        help="Check that the PDF, preview and export libraries are installed"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {get_app_version()}"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    if args.check_deps:
        from .check_deps import run_check
        sys.exit(0 if run_check(verbose=True) else 1)

    if args.profile:
        try:
            set_profile(args.profile)
        except FileNotFoundError:
            print(f"Error: profile not found: {args.profile}", file=sys.stderr)
            sys.exit(1)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    if args.write_sample:
        path = write_invoice_file(Invoice.sample(profile=get_profile()), args.write_sample)
        print(f"Sample invoice: {path}")
        sys.exit(0)

    try:
        invoice, logo = load_invoice(args.input, args.logo)
    except InvoiceProcessingError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    symbol = get_currency_symbol()

    if args.totals_only:
        print(format_totals_report(invoice, symbol))
        sys.exit(0)

    output_dir = args.output
    if not output_dir:
        output_dir = str(get_default_output_dir())
        print(f"Using default output directory: {output_dir}")

    try:
        result = process_invoice(invoice, output_dir, logo=logo, excel=args.excel, currency_symbol=symbol)
    except Exception as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(1)

    if result["status"] != "OK":
        print(f"Failed to generate PDF: {result['error']}", file=sys.stderr)
        sys.exit(1)

    print(format_totals_report(invoice, symbol))
    print(f"PDF: {result['pdf_path']}")
    if result["excel_path"]:
        print(f"Excel: {result['excel_path']}")
    sys.exit(0)


if __name__ == "__main__":
    main()
