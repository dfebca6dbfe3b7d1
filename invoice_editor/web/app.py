"""Streamlit web application for editing, previewing and sending an invoice."""

import asyncio
import hashlib
import logging
from typing import Optional

import pandas as pd
import streamlit as st

from invoice_editor.config import get_app_name, get_currency_symbol, get_profile
from invoice_editor.models.invoice import Invoice
from invoice_editor.models.logo import Logo, LogoError
from invoice_editor.pipeline.editor import InvoiceEditor
from invoice_editor.pipeline.pdf_generator import InvoicePDFError, render_invoice_pdf
from invoice_editor.pipeline.pdf_renderer import PDFRenderError, render_pdf_preview
from invoice_editor.pipeline.sender import send_invoice
from invoice_editor.pipeline.totals import format_currency, format_number

logger = logging.getLogger(__name__)

LOGO_TYPES = ["png", "jpg", "jpeg", "gif", "webp"]


def get_editor() -> InvoiceEditor:
    """Editing session for this browser tab, created with the sample invoice."""
    if "editor" not in st.session_state:
        st.session_state.editor = InvoiceEditor(Invoice.sample(profile=get_profile()))
        st.session_state.logo_uploader_key = 0
        st.session_state.logo_upload_token = None
        st.session_state.send_message = None
    return st.session_state.editor


def main():
    """Main Streamlit application."""
    st.set_page_config(
        page_title=get_app_name(),
        page_icon="🧾",
        layout="wide"
    )

    editor = get_editor()
    symbol = get_currency_symbol()

    header_col, mode_col = st.columns([4, 1])
    with header_col:
        st.title(f"🧾 {get_app_name()}")
    with mode_col:
        label = "👁 Preview" if editor.is_editing else "✏️ Edit"
        if st.button(label, key="toggle_mode", use_container_width=True):
            editor.toggle_mode()
            st.rerun()

    if st.session_state.send_message:
        st.success(st.session_state.send_message)

    if editor.is_editing:
        render_editor(editor, symbol)
    else:
        render_preview(editor, symbol)

    render_actions(editor, symbol)

    if editor.is_sending:
        run_send(editor)
        st.rerun()


def render_editor(editor: InvoiceEditor, symbol: str) -> None:
    """All editable fields of the invoice."""
    invoice = editor.invoice

    st.header("Invoice")
    col1, col2, col3 = st.columns(3)
    with col1:
        editor.set_field("id", st.text_input("Invoice #", value=invoice.id, key="invoice_id"))
    with col2:
        editor.set_field("created_at", st.date_input("Date", value=invoice.created_at, key="created_at"))
    with col3:
        editor.set_field("due_date", st.date_input("Due Date", value=invoice.due_date, key="due_date"))

    render_logo_section(editor)

    from_col, to_col = st.columns(2)
    for side, column, title, address in (
        ("from", from_col, "From", invoice.from_address),
        ("to", to_col, "To", invoice.to_address),
    ):
        with column:
            st.subheader(title)
            editor.update_address(
                side,
                name=st.text_input("Name", value=address.name, key=f"{side}_name"),
                email=st.text_input("Email", value=address.email, key=f"{side}_email"),
                address=st.text_area("Address", value=address.address, key=f"{side}_address"),
            )

    render_items(editor, symbol)

    st.subheader("Notes")
    editor.set_field("notes", st.text_area("Notes", value=invoice.notes, key="notes", label_visibility="collapsed"))


def upload_token(data: bytes) -> str:
    """Identity of an uploaded file by content, so a same-named replacement still counts."""
    return hashlib.sha256(data).hexdigest()


def render_logo_section(editor: InvoiceEditor) -> None:
    """Logo upload / delete. A new upload replaces the previous logo."""
    st.subheader("Logo")
    logo_col, upload_col = st.columns([1, 3])

    with upload_col:
        uploaded = st.file_uploader(
            "Upload logo",
            type=LOGO_TYPES,
            key=f"logo_uploader_{st.session_state.logo_uploader_key}",
            help="PNG, JPEG, GIF or WebP; drawn top-right on the PDF"
        )
        if uploaded is not None:
            data = uploaded.getvalue()
            token = upload_token(data)
            if token != st.session_state.logo_upload_token:
                try:
                    editor.set_logo(Logo.from_bytes(data, uploaded.type or None))
                    st.session_state.logo_upload_token = token
                except LogoError as e:
                    st.error(f"Not a usable image: {e}")

    with logo_col:
        if editor.logo is not None:
            st.image(editor.logo.decode(), width=150)
            if st.button("🗑 Delete logo", key="delete_logo"):
                editor.clear_logo()
                st.session_state.logo_upload_token = None
                # A fresh uploader key drops the file still held by the widget
                st.session_state.logo_uploader_key += 1
                st.rerun()
        else:
            st.caption("No logo")


def render_items(editor: InvoiceEditor, symbol: str) -> None:
    """Line item rows, add/remove buttons, tax rate and live totals."""
    st.subheader("Items")

    header = st.columns([6, 2, 2, 2, 1])
    for column, title in zip(header, ("Description", "Qty", "Price", "Total", "")):
        column.markdown(f"**{title}**")

    for index, item in enumerate(list(editor.invoice.items)):
        desc_col, qty_col, price_col, total_col, remove_col = st.columns([6, 2, 2, 2, 1])
        with desc_col:
            description = st.text_input(
                "Description", value=item.description, key=f"desc_{item.id}",
                label_visibility="collapsed",
            )
        with qty_col:
            quantity = st.text_input(
                "Qty", value=format_number(item.quantity), key=f"qty_{item.id}",
                label_visibility="collapsed",
            )
        with price_col:
            price = st.text_input(
                "Price", value=format_number(item.price), key=f"price_{item.id}",
                label_visibility="collapsed",
            )
        item = editor.update_item(index, description=description, quantity=quantity, price=price)
        with total_col:
            st.markdown(format_currency(item.line_total, symbol))
        with remove_col:
            if st.button("✖", key=f"remove_{item.id}", help="Remove item"):
                editor.remove_item(index)
                st.rerun()

    if st.button("➕ Add Item", key="add_item"):
        editor.add_item()
        st.rerun()

    tax_col, _ = st.columns([1, 3])
    with tax_col:
        editor.set_tax_rate(st.text_input("Tax rate (%)", value=format_number(editor.invoice.tax_rate), key="tax_rate"))

    render_totals(editor, symbol)


def render_totals(editor: InvoiceEditor, symbol: str) -> None:
    totals = editor.totals()
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Subtotal", format_currency(totals.subtotal, symbol))
    with col2:
        st.metric(f"Tax ({format_number(editor.invoice.tax_rate)}%)", format_currency(totals.tax_amount, symbol))
    with col3:
        st.metric("Total", format_currency(totals.total, symbol))


def render_preview(editor: InvoiceEditor, symbol: str) -> None:
    """Read-only view: summary table and the rendered PDF pages."""
    invoice = editor.invoice
    st.header(f"Invoice #{invoice.id}")
    st.caption(f"Date: {invoice.created_at.isoformat()}  ·  Due Date: {invoice.due_date.isoformat()}")

    df = pd.DataFrame([
        {
            "Description": item.description,
            "Qty": format_number(item.quantity),
            "Price": format_currency(item.price, symbol),
            "Total": format_currency(item.line_total, symbol),
        }
        for item in invoice.items
    ], columns=["Description", "Qty", "Price", "Total"])
    st.dataframe(df, use_container_width=True, hide_index=True)
    render_totals(editor, symbol)

    pdf_bytes = build_pdf(editor, symbol)
    if pdf_bytes is None:
        return
    try:
        for page_number, png in enumerate(render_pdf_preview(pdf_bytes), start=1):
            st.image(png, caption=f"Page {page_number}", use_container_width=True)
    except (PDFRenderError, ImportError) as e:
        logger.warning(f"Preview rendering failed: {e}")
        st.warning(f"Page preview unavailable: {e}")


def build_pdf(editor: InvoiceEditor, symbol: str) -> Optional[bytes]:
    """Render the current state; on failure show the error and return None."""
    try:
        return render_invoice_pdf(editor.invoice, editor.logo, symbol)
    except InvoicePDFError as e:
        logger.exception("Failed to generate PDF")
        st.error(f"Failed to generate PDF: {e}")
        return None


def render_actions(editor: InvoiceEditor, symbol: str) -> None:
    """Download PDF and Send Invoice."""
    st.divider()
    download_col, send_col, _ = st.columns([1, 1, 3])

    with download_col:
        pdf_bytes = build_pdf(editor, symbol)
        st.download_button(
            label="📥 Download PDF",
            data=pdf_bytes or b"",
            file_name=editor.invoice.pdf_filename,
            mime="application/pdf",
            disabled=pdf_bytes is None,
        )

    with send_col:
        if st.button("✉️ Send Invoice", key="send_invoice", type="primary", disabled=editor.is_sending):
            editor.is_sending = True
            st.session_state.send_message = None
            st.rerun()


def run_send(editor: InvoiceEditor) -> None:
    """Perform a pending send; the send button renders disabled meanwhile."""
    try:
        with st.spinner(f"Sending invoice to {editor.invoice.to_address.email}..."):
            result = asyncio.run(send_invoice(editor.invoice))
        st.session_state.send_message = result.message
    finally:
        editor.is_sending = False


if __name__ == "__main__":
    main()
