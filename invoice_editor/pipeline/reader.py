"""Reading and writing invoice files (YAML or JSON)."""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import yaml

from ..models.invoice import Invoice
from ..models.logo import Logo, LogoError

logger = logging.getLogger(__name__)


class InvoiceReadError(Exception):
    """Raised when an invoice file cannot be read or is malformed."""
    pass


def read_invoice_file(filepath: Union[str, Path]) -> Tuple[Invoice, Optional[Logo]]:
    """Read an invoice file and its optional logo.

    The file is a mapping with the keys written by Invoice.to_dict(). JSON files
    are read through the YAML parser (JSON is valid YAML). A logo can be given
    inline as "logo" (data URI) or as "logo_path" relative to the file.

    Args:
        filepath: Path to .yaml/.yml/.json file

    Returns:
        (Invoice, Logo or None)

    Raises:
        InvoiceReadError: If the file is not valid YAML/JSON or not a valid invoice
        FileNotFoundError: If filepath does not exist
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Invoice file not found: {filepath}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvoiceReadError(f"Failed to parse invoice file {path.name}: {e}") from e

    if not isinstance(data, dict):
        raise InvoiceReadError(f"Invoice file {path.name} must contain a mapping")

    try:
        invoice = Invoice.from_dict(data)
    except (KeyError, TypeError, ValueError, OverflowError) as e:
        raise InvoiceReadError(f"Invalid invoice in {path.name}: {e}") from e

    logo = None
    try:
        if data.get("logo"):
            logo = Logo.from_data_uri(str(data["logo"]))
        elif data.get("logo_path"):
            logo = Logo.from_file(path.parent / str(data["logo_path"]))
    except (LogoError, FileNotFoundError) as e:
        raise InvoiceReadError(f"Invalid logo in {path.name}: {e}") from e

    logger.info(f"Read invoice {invoice.id} from {path} ({len(invoice.items)} items)")
    return invoice, logo


def write_invoice_file(
    invoice: Invoice,
    filepath: Union[str, Path],
    logo: Optional[Logo] = None,
) -> Path:
    """Write an invoice (and inline logo) as JSON for .json paths, YAML otherwise.

    Returns:
        Path to the written file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = invoice.to_dict()
    if logo is not None:
        data["logo"] = logo.data_uri

    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
    return path
