"""Unit tests for the REST API."""

import base64
import io

import fitz
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from invoice_editor.api.main import app
from invoice_editor.config import reset_profile


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("INVOICE_SEND_DELAY", "0")
    monkeypatch.delenv("INVOICE_CURRENCY_SYMBOL", raising=False)
    reset_profile()
    yield TestClient(app)
    reset_profile()


@pytest.fixture
def payload():
    return {
        "id": "INV-20245678",
        "created_at": "2024-01-01",
        "due_date": "2024-01-15",
        "from": {"name": "My Company LLC", "email": "hello@mycompany.com", "address": "123 Tech Blvd"},
        "to": {"name": "Client Name", "email": "client@business.com", "address": "456 Market St"},
        "items": [
            {"id": 1, "description": "Web Development Services", "quantity": 10, "price": 85},
            {"id": 2, "description": "Server Setup", "quantity": 2, "price": 150},
        ],
        "notes": "Payment is due within 14 days.\nThank you!",
        "tax_rate": 8,
    }


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Invoice Editor API"


def test_sample_invoice(client):
    response = client.get("/api/invoices/sample")
    assert response.status_code == 200

    data = response.json()
    assert data["id"].startswith("INV-")
    assert data["from"]["name"] == "My Company LLC"
    assert data["to"]["email"] == "client@business.com"
    assert len(data["items"]) == 2
    assert data["tax_rate"] == 8


def test_sample_can_be_posted_back(client):
    sample = client.get("/api/invoices/sample").json()
    response = client.post("/api/invoices/totals", json=sample)
    assert response.status_code == 200
    assert response.json()["total"] == pytest.approx(1242)


def test_totals(client, payload):
    response = client.post("/api/invoices/totals", json=payload)
    assert response.status_code == 200

    data = response.json()
    assert data["subtotal"] == pytest.approx(1150)
    assert data["tax_amount"] == pytest.approx(92)
    assert data["total"] == pytest.approx(1242)
    assert data["formatted"] == {"subtotal": "$1150.00", "tax_amount": "$92.00", "total": "$1242.00"}


def test_totals_coerces_text_numbers(client, payload):
    payload["items"] = [{"description": "Typed", "quantity": "12abc", "price": "2"}, {"quantity": "x", "price": 5}]
    payload["tax_rate"] = "0"
    response = client.post("/api/invoices/totals", json=payload)
    assert response.json()["total"] == pytest.approx(24)


def test_totals_empty_items(client, payload):
    payload["items"] = []
    data = client.post("/api/invoices/totals", json=payload).json()
    assert (data["subtotal"], data["tax_amount"], data["total"]) == (0, 0, 0)


def test_duplicate_item_ids_rejected(client, payload):
    payload["items"][1]["id"] = 1
    response = client.post("/api/invoices/totals", json=payload)
    assert response.status_code == 400


def test_missing_dates_rejected(client, payload):
    del payload["due_date"]
    response = client.post("/api/invoices/totals", json=payload)
    assert response.status_code == 422


def test_pdf(client, payload):
    response = client.post("/api/invoices/pdf", json=payload)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="INV-20245678.pdf"' in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")
    with fitz.open(stream=response.content, filetype="pdf") as doc:
        assert "$1242.00" in doc[0].get_text()


def test_pdf_with_logo(client, payload):
    buffer = io.BytesIO()
    Image.new("RGB", (45, 15), (255, 0, 0)).save(buffer, format="PNG")
    payload["logo"] = "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")

    response = client.post("/api/invoices/pdf", json=payload)
    assert response.status_code == 200
    with fitz.open(stream=response.content, filetype="pdf") as doc:
        assert len(doc[0].get_images()) == 1


def test_pdf_invalid_logo(client, payload):
    payload["logo"] = "data:text/plain;base64,aGk="
    response = client.post("/api/invoices/pdf", json=payload)
    assert response.status_code == 400
    assert "Invalid logo" in response.json()["detail"]


def test_pdf_generation_failure(client, payload):
    from unittest.mock import patch
    from invoice_editor.pipeline.pdf_generator import InvoicePDFError

    with patch("invoice_editor.api.main.render_invoice_pdf", side_effect=InvoicePDFError("boom")):
        response = client.post("/api/invoices/pdf", json=payload)
    assert response.status_code == 500
    assert "Failed to generate PDF" in response.json()["detail"]


def test_pdf_non_latin_id(client, payload):
    payload["id"] = "R\u00c4KNING-\u20ac1"
    response = client.post("/api/invoices/pdf", json=payload)

    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert 'filename="R_KNING-_1.pdf"' in disposition
    assert "filename*=UTF-8''R%C3%84KNING-%E2%82%AC1.pdf" in disposition


def test_pdf_id_with_quotes_and_slashes(client, payload):
    payload["id"] = 'Say "hi"/2024'
    response = client.post("/api/invoices/pdf", json=payload)

    assert response.status_code == 200
    assert response.headers["content-disposition"] == (
        'attachment; filename="Say_-hi--2024.pdf"; filename*=UTF-8\'\'Say%20-hi--2024.pdf'
    )


def test_error_responses_documented(client):
    paths = client.get("/openapi.json").json()["paths"]
    pdf_responses = paths["/api/invoices/pdf"]["post"]["responses"]

    for status in ("400", "500"):
        schema = pdf_responses[status]["content"]["application/json"]["schema"]
        assert schema["$ref"] == "#/components/schemas/ErrorResponse"
    assert "400" in paths["/api/invoices/totals"]["post"]["responses"]
    assert "400" in paths["/api/invoices/send"]["post"]["responses"]


def test_send(client, payload):
    response = client.post("/api/invoices/send", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["invoice_id"] == "INV-20245678"
    assert data["message"] == "Invoice sent successfully to client@business.com!"
