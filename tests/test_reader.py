"""Unit tests for reading and writing invoice files."""

import io
import json
from datetime import date

import pytest
import yaml
from PIL import Image

from invoice_editor.models.invoice import Invoice
from invoice_editor.models.logo import Logo
from invoice_editor.pipeline.reader import InvoiceReadError, read_invoice_file, write_invoice_file


@pytest.fixture
def invoice():
    return Invoice.sample(today=date(2024, 6, 1))


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (0, 0, 0)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.parametrize("suffix", [".yaml", ".yml", ".json"])
def test_write_then_read(tmp_path, invoice, suffix):
    path = write_invoice_file(invoice, tmp_path / f"invoice{suffix}")
    loaded, logo = read_invoice_file(path)

    assert loaded == invoice
    assert logo is None


def test_json_output_is_json(tmp_path, invoice):
    path = write_invoice_file(invoice, tmp_path / "invoice.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["id"] == invoice.id
    assert data["from"]["name"] == "My Company LLC"


def test_inline_logo_round_trip(tmp_path, invoice):
    logo = Logo.from_bytes(_png_bytes())
    path = write_invoice_file(invoice, tmp_path / "invoice.yaml", logo=logo)

    _, loaded_logo = read_invoice_file(path)
    assert loaded_logo == logo


def test_logo_path_relative_to_file(tmp_path, invoice):
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "logo.png").write_bytes(_png_bytes())
    data = invoice.to_dict()
    data["logo_path"] = "assets/logo.png"
    path = tmp_path / "invoice.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")

    _, logo = read_invoice_file(path)
    assert logo.mime_type == "image/png"


def test_multiline_notes_preserved(tmp_path, invoice):
    invoice.notes = "Line 1\nLine 2\n\nLine 4"
    loaded, _ = read_invoice_file(write_invoice_file(invoice, tmp_path / "i.yaml"))
    assert loaded.notes == "Line 1\nLine 2\n\nLine 4"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_invoice_file(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "id: [unclosed",
        "- just\n- a list\n",
        "id: X\ncreated_at: 2024-01-01\n",
        "id: X\ncreated_at: soon\ndue_date: later\n",
    ],
)
def test_malformed_files(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(InvoiceReadError):
        read_invoice_file(path)


def test_bad_logo(tmp_path, invoice):
    data = invoice.to_dict()
    data["logo"] = "data:text/plain;base64,aGk="
    path = tmp_path / "invoice.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")

    with pytest.raises(InvoiceReadError, match="logo"):
        read_invoice_file(path)


def test_out_of_range_quantity_reads_as_zero(tmp_path, invoice):
    data = invoice.to_dict()
    data["items"][0]["quantity"] = 10**400
    path = tmp_path / "invoice.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")

    loaded, _ = read_invoice_file(path)
    assert loaded.items[0].quantity == 0.0
    assert loaded.items[1] == invoice.items[1]


def test_out_of_range_item_id_is_a_read_error(tmp_path, invoice):
    data = invoice.to_dict()
    data["items"][0]["id"] = float("inf")
    path = tmp_path / "invoice.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    with pytest.raises(InvoiceReadError):
        read_invoice_file(path)
