"""FastAPI application for the invoice editor REST API."""

import logging
import re
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from ..config import get_app_name, get_app_version, get_currency_symbol, get_profile
from ..models.invoice import Invoice
from ..models.logo import Logo, LogoError
from ..pipeline.pdf_generator import InvoicePDFError, render_invoice_pdf
from ..pipeline.sender import send_invoice
from ..pipeline.totals import compute_totals, format_currency
from .models import ErrorResponse, InvoiceModel, SendResponse, TotalsResponse

logger = logging.getLogger(__name__)

BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Invalid invoice or logo"}}
GENERATION_FAILED = {500: {"model": ErrorResponse, "description": "PDF generation failed"}}

app = FastAPI(
    title=f"{get_app_name()} API",
    description="REST API for invoice totals, PDF generation and (simulated) sending",
    version=get_app_version(),
)


def _to_invoice(payload: InvoiceModel) -> Invoice:
    try:
        return payload.to_invoice()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _to_logo(payload: InvoiceModel) -> Optional[Logo]:
    if not payload.logo:
        return None
    try:
        return Logo.from_data_uri(payload.logo)
    except LogoError as e:
        raise HTTPException(status_code=400, detail=f"Invalid logo: {e}")


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the UTF-8 name (RFC 6266)."""
    fallback = re.sub(r"[^A-Za-z0-9._-]", "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"{get_app_name()} API",
        "version": get_app_version(),
        "docs": "/docs",
    }


@app.get("/api/invoices/sample", response_model=InvoiceModel, response_model_by_alias=True)
async def sample_invoice():
    """A fresh sample invoice built from the active profile."""
    return InvoiceModel.from_invoice(Invoice.sample(profile=get_profile()))


@app.post("/api/invoices/totals", response_model=TotalsResponse, responses=BAD_REQUEST)
async def invoice_totals(payload: InvoiceModel):
    """Subtotal, tax and total for the posted invoice.

    Returns:
        TotalsResponse with raw float amounts and their display strings
    """
    invoice = _to_invoice(payload)
    totals = compute_totals(invoice.items, invoice.tax_rate)
    symbol = get_currency_symbol()
    return TotalsResponse(
        subtotal=totals.subtotal,
        tax_rate=invoice.tax_rate,
        tax_amount=totals.tax_amount,
        total=totals.total,
        formatted={
            "subtotal": format_currency(totals.subtotal, symbol),
            "tax_amount": format_currency(totals.tax_amount, symbol),
            "total": format_currency(totals.total, symbol),
        },
    )


@app.post(
    "/api/invoices/pdf",
    response_class=Response,
    responses={
        200: {"content": {"application/pdf": {}}, "description": "The rendered invoice"},
        **BAD_REQUEST,
        **GENERATION_FAILED,
    },
)
async def invoice_pdf(payload: InvoiceModel):
    """Render the posted invoice and return it as a PDF attachment named <id>.pdf."""
    invoice = _to_invoice(payload)
    logo = _to_logo(payload)

    try:
        pdf_bytes = render_invoice_pdf(invoice, logo, get_currency_symbol())
    except InvoicePDFError as e:
        logger.error(f"PDF generation failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to generate PDF: {e}")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": _content_disposition(invoice.pdf_filename)},
    )


@app.post("/api/invoices/send", response_model=SendResponse, responses=BAD_REQUEST)
async def invoice_send(payload: InvoiceModel):
    """Simulate sending the invoice to its recipient (waits the configured delay)."""
    invoice = _to_invoice(payload)
    result = await send_invoice(invoice)
    return SendResponse(
        invoice_id=result.invoice_id,
        recipient=result.recipient,
        message=result.message,
        sent_at=result.sent_at,
    )
